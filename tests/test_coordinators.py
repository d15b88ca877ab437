import pytest

from app.core.exceptions import Conflict, NotFound
from app.schemas.coordinator import CoordinatorAssignmentCreate
from app.services import coordinators


def _payload(career_id=1, cedula="1711111111"):
    return CoordinatorAssignmentCreate(
        cedula=cedula, nombres="Rosa", apellidos="Andrade", correo="coord@istla.edu.ec", id_carrera=career_id
    )


async def test_one_active_coordinator_per_career(write_session):
    created = await coordinators.create_assignment(write_session, _payload())
    assert created.status == "ACTIVO"

    with pytest.raises(Conflict):
        await coordinators.create_assignment(write_session, _payload(cedula="1722222222"))

    await coordinators.deactivate_assignment(write_session, created.id)
    replacement = await coordinators.create_assignment(write_session, _payload(cedula="1722222222"))
    assert [a.id for a in await coordinators.list_active_assignments(write_session)] == [replacement.id]


async def test_update_assignment(write_session):
    first = await coordinators.create_assignment(write_session, _payload(career_id=1))
    second = await coordinators.create_assignment(write_session, _payload(career_id=2, cedula="1722222222"))

    moved = await coordinators.update_assignment(write_session, first.id, _payload(career_id=3))
    assert moved.career_id == 3

    with pytest.raises(Conflict):
        await coordinators.update_assignment(write_session, first.id, _payload(career_id=2))

    # keeping its own career is not a conflict
    same = await coordinators.update_assignment(write_session, second.id, _payload(career_id=2, cedula="1799999999"))
    assert same.document == "1799999999"


async def test_inactive_assignments_are_not_found(write_session):
    created = await coordinators.create_assignment(write_session, _payload())
    await coordinators.deactivate_assignment(write_session, created.id)

    with pytest.raises(NotFound):
        await coordinators.get_active_assignment(write_session, created.id)
    with pytest.raises(NotFound):
        await coordinators.deactivate_assignment(write_session, created.id)
    with pytest.raises(NotFound):
        await coordinators.update_assignment(write_session, 999, _payload())


async def test_career_for_document(write_session):
    await coordinators.create_assignment(write_session, _payload(career_id=2))
    assert await coordinators.career_id_for_document(write_session, "1711111111") == 2
    assert await coordinators.career_id_for_document(write_session, "1700000000") is None


async def test_response_falls_back_on_missing_career(write_session):
    created = await coordinators.create_assignment(write_session, _payload(career_id=5))
    assert coordinators.to_response(created, {}).nombre_carrera == "Carrera no encontrada"
    assert coordinators.to_response(created, {5: "Turismo"}).nombre_carrera == "Turismo"
