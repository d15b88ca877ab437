"""Per-user registry of the authorities that sign the PDF reports."""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import Conflict, InvalidInput, NotFound
from app.core.logging import kv
from app.models.evaluation import STATUS_ACTIVE, STATUS_INACTIVE
from app.models.signatory import ReportSignatory
from app.schemas.signatory import SignatoryCreate, SignatoryOrder, SignatoryResponse
from app.services.grade_exports import DEFAULT_SIGNATORIES

logger = logging.getLogger(__name__)

# signature blocks that fit under a report
MAX_REPORT_SIGNATORIES = 2


async def list_active(db: AsyncSession, user_id: int, limit: Optional[int] = None) -> List[ReportSignatory]:
    stmt = (
        select(ReportSignatory)
        .where(ReportSignatory.user_id == user_id)
        .where(ReportSignatory.status == STATUS_ACTIVE)
        .order_by(ReportSignatory.position, ReportSignatory.id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_signatory(db: AsyncSession, signatory_id: int, user_id: int) -> ReportSignatory:
    result = await db.execute(
        select(ReportSignatory)
        .where(ReportSignatory.id == signatory_id)
        .where(ReportSignatory.user_id == user_id)
    )
    signatory = result.scalar_one_or_none()
    if signatory is None:
        raise NotFound("Autoridad", signatory_id)
    return signatory


async def _position_taken(db: AsyncSession, user_id: int, position: int, exclude_id: Optional[int] = None) -> bool:
    stmt = (
        select(ReportSignatory.id)
        .where(ReportSignatory.user_id == user_id)
        .where(ReportSignatory.status == STATUS_ACTIVE)
        .where(ReportSignatory.position == position)
    )
    if exclude_id is not None:
        stmt = stmt.where(ReportSignatory.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.first() is not None


async def _next_position(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.coalesce(func.max(ReportSignatory.position), 0))
        .where(ReportSignatory.user_id == user_id)
        .where(ReportSignatory.status == STATUS_ACTIVE)
    )
    return int(result.scalar_one()) + 1


async def create_signatory(db: AsyncSession, user_id: int, data: SignatoryCreate) -> ReportSignatory:
    if data.orden_firma is None:
        position = await _next_position(db, user_id)
    elif await _position_taken(db, user_id, data.orden_firma):
        raise Conflict("El orden de firma ya está en uso")
    else:
        position = data.orden_firma
    signatory = ReportSignatory(
        user_id=user_id,
        name=data.nombre_autoridad,
        title=data.cargo_autoridad,
        position=position,
        status=STATUS_ACTIVE,
    )
    db.add(signatory)
    await db.commit()
    await db.refresh(signatory)
    logger.info("signatory created %s", kv(usuario=user_id, id_autoridad=signatory.id, orden=position))
    return signatory


async def update_signatory(
    db: AsyncSession, signatory_id: int, user_id: int, data: SignatoryCreate
) -> ReportSignatory:
    signatory = await get_signatory(db, signatory_id, user_id)
    if data.orden_firma is not None and await _position_taken(db, user_id, data.orden_firma, exclude_id=signatory_id):
        raise Conflict("El orden de firma ya está en uso")
    signatory.name = data.nombre_autoridad
    signatory.title = data.cargo_autoridad
    if data.orden_firma is not None:
        signatory.position = data.orden_firma
    await db.commit()
    await db.refresh(signatory)
    return signatory


async def deactivate_signatory(db: AsyncSession, signatory_id: int, user_id: int) -> None:
    signatory = await get_signatory(db, signatory_id, user_id)
    if signatory.status == STATUS_INACTIVE:
        raise Conflict("La autoridad ya está inactiva")
    signatory.status = STATUS_INACTIVE
    await db.commit()


async def reorder_signatories(db: AsyncSession, user_id: int, updates: List[SignatoryOrder]) -> None:
    """Applies every new position in one transaction."""
    positions = [item.orden_firma for item in updates]
    if len(set(positions)) != len(positions):
        raise InvalidInput("Cada autoridad debe tener un orden de firma distinto")
    rows = [await get_signatory(db, item.id_autoridad, user_id) for item in updates]
    for signatory, item in zip(rows, updates):
        signatory.position = item.orden_firma
    await db.commit()


async def report_signatories(db: AsyncSession, user_id: int) -> List[Tuple[str, str]]:
    """(name, TITLE) blocks for a report: the user's registry, then REPORT_SIGNATORIES, then the default."""
    rows = await list_active(db, user_id, limit=MAX_REPORT_SIGNATORIES)
    if rows:
        return [(row.name, row.title.upper()) for row in rows]
    return settings.signatories[:MAX_REPORT_SIGNATORIES] or list(DEFAULT_SIGNATORIES)


def to_response(signatory: ReportSignatory) -> SignatoryResponse:
    return SignatoryResponse(
        id_autoridad=signatory.id,
        nombre_autoridad=signatory.name,
        cargo_autoridad=signatory.title,
        orden_firma=signatory.position,
        estado=signatory.status,
        created_at=signatory.created_at,
    )
