from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, NotFound
from app.models.coordinator import CoordinatorAssignment
from app.models.evaluation import STATUS_ACTIVE, STATUS_INACTIVE
from app.schemas.coordinator import CoordinatorAssignmentCreate, CoordinatorAssignmentResponse

MISSING_CAREER = "Carrera no encontrada"


async def get_active_for_career(
    db: AsyncSession, career_id: int, exclude_id: Optional[int] = None
) -> Optional[CoordinatorAssignment]:
    stmt = (
        select(CoordinatorAssignment)
        .where(CoordinatorAssignment.career_id == career_id)
        .where(CoordinatorAssignment.status == STATUS_ACTIVE)
    )
    if exclude_id is not None:
        stmt = stmt.where(CoordinatorAssignment.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


async def get_active_assignment(db: AsyncSession, assignment_id: int) -> CoordinatorAssignment:
    result = await db.execute(
        select(CoordinatorAssignment)
        .where(CoordinatorAssignment.id == assignment_id)
        .where(CoordinatorAssignment.status == STATUS_ACTIVE)
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise NotFound("Coordinador", assignment_id)
    return assignment


async def list_active_assignments(db: AsyncSession) -> List[CoordinatorAssignment]:
    result = await db.execute(
        select(CoordinatorAssignment)
        .where(CoordinatorAssignment.status == STATUS_ACTIVE)
        .order_by(CoordinatorAssignment.assigned_at.desc(), CoordinatorAssignment.id.desc())
    )
    return result.scalars().all()


async def create_assignment(db: AsyncSession, data: CoordinatorAssignmentCreate) -> CoordinatorAssignment:
    if await get_active_for_career(db, data.id_carrera):
        raise Conflict("Ya existe un coordinador activo asignado a esta carrera")
    assignment = CoordinatorAssignment(
        document=data.cedula,
        first_names=data.nombres,
        last_names=data.apellidos,
        email=data.correo,
        career_id=data.id_carrera,
        status=STATUS_ACTIVE,
    )
    db.add(assignment)
    await db.commit()
    await db.refresh(assignment)
    return assignment


async def update_assignment(
    db: AsyncSession, assignment_id: int, data: CoordinatorAssignmentCreate
) -> CoordinatorAssignment:
    assignment = await get_active_assignment(db, assignment_id)
    if await get_active_for_career(db, data.id_carrera, exclude_id=assignment_id):
        raise Conflict("Ya existe otro coordinador activo asignado a esta carrera")
    assignment.document = data.cedula
    assignment.first_names = data.nombres
    assignment.last_names = data.apellidos
    assignment.email = data.correo
    assignment.career_id = data.id_carrera
    await db.commit()
    await db.refresh(assignment)
    return assignment


async def deactivate_assignment(db: AsyncSession, assignment_id: int) -> None:
    """Soft delete: the row stays with status INACTIVO."""
    assignment = await get_active_assignment(db, assignment_id)
    assignment.status = STATUS_INACTIVE
    await db.commit()


def to_response(assignment: CoordinatorAssignment, career_names: Dict[int, str]) -> CoordinatorAssignmentResponse:
    return CoordinatorAssignmentResponse(
        id_coordinador_carrera=assignment.id,
        cedula_coordinador=assignment.document,
        nombres_coordinador=assignment.first_names,
        apellidos_coordinador=assignment.last_names,
        correo_coordinador=assignment.email,
        id_carrera=assignment.career_id,
        nombre_carrera=career_names.get(assignment.career_id, MISSING_CAREER),
        estado=assignment.status,
        fecha_asignacion=assignment.assigned_at,
    )


async def career_id_for_document(db: AsyncSession, document: str) -> Optional[int]:
    result = await db.execute(
        select(CoordinatorAssignment.career_id)
        .where(CoordinatorAssignment.document == document)
        .where(CoordinatorAssignment.status == STATUS_ACTIVE)
        .order_by(CoordinatorAssignment.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
