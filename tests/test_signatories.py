import pytest

from app.config import settings
from app.core.exceptions import Conflict, InvalidInput, NotFound
from app.schemas.signatory import SignatoryCreate, SignatoryOrder
from app.services import signatories
from app.services.grade_exports import DEFAULT_SIGNATORIES

USER = 7


def _signatory(name="Ing. Maria Vega", title="Vicerrectora Académica", order=None):
    return SignatoryCreate(nombre_autoridad=name, cargo_autoridad=title, orden_firma=order)


async def test_positions_are_assigned_in_order(write_session):
    first = await signatories.create_signatory(write_session, USER, _signatory())
    second = await signatories.create_signatory(write_session, USER, _signatory("Ing. Hugo Cevallos", "Rector"))

    assert (first.position, second.position) == (1, 2)
    assert first.status == "ACTIVO"
    assert [s.id for s in await signatories.list_active(write_session, USER)] == [first.id, second.id]

    with pytest.raises(Conflict):
        await signatories.create_signatory(write_session, USER, _signatory("Otra", "Secretaria", order=2))

    # another user has an independent registry
    other = await signatories.create_signatory(write_session, 8, _signatory(order=2))
    assert other.position == 2


async def test_update_and_deactivate(write_session):
    first = await signatories.create_signatory(write_session, USER, _signatory())
    second = await signatories.create_signatory(write_session, USER, _signatory("Ing. Hugo Cevallos", "Rector"))

    updated = await signatories.update_signatory(
        write_session, first.id, USER, _signatory("Mgs. Maria Vega", "Vicerrectora")
    )
    assert (updated.name, updated.title, updated.position) == ("Mgs. Maria Vega", "Vicerrectora", 1)

    with pytest.raises(Conflict):
        await signatories.update_signatory(write_session, first.id, USER, _signatory(order=2))

    await signatories.deactivate_signatory(write_session, second.id, USER)
    assert [s.id for s in await signatories.list_active(write_session, USER)] == [first.id]
    with pytest.raises(Conflict):
        await signatories.deactivate_signatory(write_session, second.id, USER)

    # the freed position can be taken again
    third = await signatories.create_signatory(write_session, USER, _signatory("Lic. Rosa Andrade", "Secretaria", 2))
    assert third.position == 2


async def test_signatories_are_scoped_to_their_user(write_session):
    mine = await signatories.create_signatory(write_session, USER, _signatory())

    with pytest.raises(NotFound):
        await signatories.get_signatory(write_session, mine.id, 8)
    with pytest.raises(NotFound):
        await signatories.deactivate_signatory(write_session, mine.id, 8)
    assert await signatories.list_active(write_session, 8) == []


async def test_reorder(write_session):
    first = await signatories.create_signatory(write_session, USER, _signatory())
    second = await signatories.create_signatory(write_session, USER, _signatory("Ing. Hugo Cevallos", "Rector"))

    await signatories.reorder_signatories(write_session, USER, [
        SignatoryOrder(id_autoridad=first.id, orden_firma=2),
        SignatoryOrder(id_autoridad=second.id, orden_firma=1),
    ])
    assert [s.id for s in await signatories.list_active(write_session, USER)] == [second.id, first.id]

    with pytest.raises(InvalidInput):
        await signatories.reorder_signatories(write_session, USER, [
            SignatoryOrder(id_autoridad=first.id, orden_firma=3),
            SignatoryOrder(id_autoridad=second.id, orden_firma=3),
        ])

    # an unknown id leaves every position untouched
    with pytest.raises(NotFound):
        await signatories.reorder_signatories(write_session, USER, [
            SignatoryOrder(id_autoridad=first.id, orden_firma=5),
            SignatoryOrder(id_autoridad=999, orden_firma=6),
        ])
    assert (await signatories.get_signatory(write_session, first.id, USER)).position == 2


async def test_report_signatories_use_the_registry_first(write_session, monkeypatch):
    monkeypatch.setattr(settings, "REPORT_SIGNATORIES", "Ing. Luis Borja|Rector")
    assert await signatories.report_signatories(write_session, USER) == [("Ing. Luis Borja", "RECTOR")]

    for name, title in [("Ing. Maria Vega", "Vicerrectora"), ("Ing. Hugo Cevallos", "Rector"), ("Lic. Rosa", "Secretaria")]:
        await signatories.create_signatory(write_session, USER, _signatory(name, title))

    assert await signatories.report_signatories(write_session, USER) == [
        ("Ing. Maria Vega", "VICERRECTORA"),
        ("Ing. Hugo Cevallos", "RECTOR"),
    ]


async def test_report_signatories_default(write_session, monkeypatch):
    monkeypatch.setattr(settings, "REPORT_SIGNATORIES", None)
    assert await signatories.report_signatories(write_session, USER) == list(DEFAULT_SIGNATORIES)
