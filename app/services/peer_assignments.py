"""
Co-evaluation pairings.

An assignment names the teacher who observes (evaluador) and the colleague
observed (evaluado) in a period, optionally for one subject and a time slot.
Without a subject it is a "general" pairing; each pairing exists once per
period and subject.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, InvalidInput, NotFound
from app.core.logging import kv
from app.models.peer_assignment import PeerAssignment
from app.repositories.institute import InstituteRepository
from app.schemas.peer_assignment import PeerAssignmentCreate, PeerAssignmentResponse, PeerTeacher
from app.services.formatting import title_case

logger = logging.getLogger(__name__)

UNKNOWN_EVALUATOR = "Docente evaluador"
UNKNOWN_EVALUATED = "Docente evaluado"


def _check_schedule(data: PeerAssignmentCreate, today: date, action: str) -> None:
    if data.id_docente_evaluador == data.id_docente_evaluado:
        raise InvalidInput("Un docente no puede evaluarse a sí mismo")
    if data.fecha is not None and data.fecha < today:
        raise InvalidInput(f"No se puede {action} una asignación con una fecha anterior a la fecha actual")
    if data.hora_inicio and data.hora_fin and data.hora_fin <= data.hora_inicio:
        raise InvalidInput("La hora de fin debe ser posterior a la hora de inicio")


async def _check_references(institute: InstituteRepository, data: PeerAssignmentCreate) -> None:
    teachers = await institute.teachers_by_ids([data.id_docente_evaluador, data.id_docente_evaluado])
    if data.id_docente_evaluador not in teachers:
        raise InvalidInput("El docente evaluador no existe")
    if data.id_docente_evaluado not in teachers:
        raise InvalidInput("El docente evaluado no existe")
    if await institute.get_period(data.id_periodo) is None:
        raise InvalidInput("El período no existe")


async def _check_duplicate(db: AsyncSession, data: PeerAssignmentCreate, exclude_id: Optional[int] = None) -> None:
    stmt = (
        select(PeerAssignment.id)
        .where(PeerAssignment.period_id == data.id_periodo)
        .where(PeerAssignment.evaluator_id == data.id_docente_evaluador)
        .where(PeerAssignment.evaluated_id == data.id_docente_evaluado)
    )
    if data.id_asignatura is None:
        stmt = stmt.where(PeerAssignment.subject_id.is_(None))
    else:
        stmt = stmt.where(PeerAssignment.subject_id == data.id_asignatura)
    if exclude_id is not None:
        stmt = stmt.where(PeerAssignment.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    if result.first() is None:
        return
    if data.id_asignatura is None:
        raise Conflict("Ya existe una asignación general entre estos docentes para este período")
    raise Conflict("Ya existe una asignación entre estos docentes para esta asignatura en este período")


def _apply(assignment: PeerAssignment, data: PeerAssignmentCreate) -> None:
    assignment.period_id = data.id_periodo
    assignment.evaluator_id = data.id_docente_evaluador
    assignment.evaluated_id = data.id_docente_evaluado
    assignment.subject_id = data.id_asignatura
    assignment.scheduled_on = data.fecha
    assignment.starts_at = data.hora_inicio
    assignment.ends_at = data.hora_fin
    assignment.weekday = data.dia


async def get_assignment(db: AsyncSession, assignment_id: int) -> PeerAssignment:
    assignment = await db.get(PeerAssignment, assignment_id)
    if assignment is None:
        raise NotFound("Asignación", assignment_id)
    return assignment


async def list_for_period(db: AsyncSession, period_id: int) -> List[PeerAssignment]:
    result = await db.execute(
        select(PeerAssignment)
        .where(PeerAssignment.period_id == period_id)
        .order_by(PeerAssignment.id.desc())
    )
    return result.scalars().all()


async def create_assignment(
    db: AsyncSession,
    institute: InstituteRepository,
    data: PeerAssignmentCreate,
    today: Optional[date] = None,
) -> PeerAssignment:
    _check_schedule(data, today or date.today(), "crear")
    await _check_references(institute, data)
    await _check_duplicate(db, data)
    assignment = PeerAssignment()
    _apply(assignment, data)
    db.add(assignment)
    await db.commit()
    await db.refresh(assignment)
    logger.info(
        "peer assignment created %s",
        kv(id_asignacion=assignment.id, id_periodo=data.id_periodo,
           evaluador=data.id_docente_evaluador, evaluado=data.id_docente_evaluado),
    )
    return assignment


async def update_assignment(
    db: AsyncSession,
    institute: InstituteRepository,
    assignment_id: int,
    data: PeerAssignmentCreate,
    today: Optional[date] = None,
) -> PeerAssignment:
    assignment = await get_assignment(db, assignment_id)
    _check_schedule(data, today or date.today(), "editar")
    await _check_references(institute, data)
    await _check_duplicate(db, data, exclude_id=assignment_id)
    _apply(assignment, data)
    await db.commit()
    await db.refresh(assignment)
    return assignment


async def delete_assignment(db: AsyncSession, assignment_id: int) -> None:
    assignment = await get_assignment(db, assignment_id)
    await db.delete(assignment)
    await db.commit()


async def to_responses(
    institute: InstituteRepository, assignments: List[PeerAssignment]
) -> List[PeerAssignmentResponse]:
    teachers = await institute.teachers_by_ids(
        [a.evaluator_id for a in assignments] + [a.evaluated_id for a in assignments]
    )
    subjects = await institute.subjects_by_ids(a.subject_id for a in assignments if a.subject_id)
    return [
        PeerAssignmentResponse(
            id_asignacion=a.id,
            id_periodo=a.period_id,
            id_docente_evaluador=a.evaluator_id,
            nombre_evaluador=teachers.get(a.evaluator_id, UNKNOWN_EVALUATOR),
            id_docente_evaluado=a.evaluated_id,
            nombre_evaluado=teachers.get(a.evaluated_id, UNKNOWN_EVALUATED),
            id_asignatura=a.subject_id,
            nombre_asignatura=subjects.get(a.subject_id) if a.subject_id else None,
            fecha=a.scheduled_on,
            hora_inicio=a.starts_at,
            hora_fin=a.ends_at,
            dia=a.weekday,
        )
        for a in assignments
    ]


def clean_teacher_name(name: Optional[str]) -> Optional[str]:
    """Title-cased name, or None for blanks, e-mails and placeholder strings."""
    if not name:
        return None
    cleaned = " ".join(name.split())
    if len(cleaned) < 2 or "@" in cleaned or cleaned.lower() in ("null", "undefined"):
        return None
    return title_case(cleaned)


async def list_evaluator_candidates(institute: InstituteRepository, period_id: int) -> List[PeerTeacher]:
    teachers = []
    for row in await institute.list_period_teachers(period_id):
        name = clean_teacher_name(row["nombre"])
        if name is not None:
            teachers.append(PeerTeacher(id_docente=row["id_docente"], nombre=name))
    return sorted(teachers, key=lambda t: (t.nombre.casefold(), t.id_docente))
