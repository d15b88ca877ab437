# app/routers/signatories.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ADMIN, COORDINATOR, require_roles
from app.database import get_write_db
from app.schemas.signatory import SignatoryCreate, SignatoryList, SignatoryOrderUpdate, SignatoryResponse
from app.schemas.user import TokenUser
from app.services import signatories as service

router = APIRouter(tags=["signatories"])

# whoever prints reports keeps their own signatories
report_signers = require_roles(ADMIN, COORDINATOR)


@router.get("/autoridades-firmas", response_model=SignatoryList)
async def list_signatories(
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    rows = await service.list_active(db, user.id)
    return SignatoryList(data=[service.to_response(r) for r in rows])


@router.get("/firmas", response_model=SignatoryList)
async def report_signatories(
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    rows = await service.list_active(db, user.id, limit=service.MAX_REPORT_SIGNATORIES)
    return SignatoryList(data=[service.to_response(r) for r in rows])


@router.get("/autoridades-firmas/{signatory_id}", response_model=SignatoryResponse)
async def get_signatory(
    signatory_id: int,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    return service.to_response(await service.get_signatory(db, signatory_id, user.id))


@router.post("/autoridades-firmas", response_model=SignatoryResponse, status_code=201)
async def create_signatory(
    data: SignatoryCreate,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    return service.to_response(await service.create_signatory(db, user.id, data))


@router.put("/autoridades-firmas/{signatory_id}", response_model=SignatoryResponse)
async def update_signatory(
    signatory_id: int,
    data: SignatoryCreate,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    return service.to_response(await service.update_signatory(db, signatory_id, user.id, data))


@router.delete("/autoridades-firmas/{signatory_id}")
async def delete_signatory(
    signatory_id: int,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    await service.deactivate_signatory(db, signatory_id, user.id)
    return {"success": True, "message": "Autoridad eliminada exitosamente"}


@router.put("/actualizar-ordenes")
async def reorder_signatories(
    data: SignatoryOrderUpdate,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(report_signers),
):
    await service.reorder_signatories(db, user.id, data.actualizaciones)
    return {"success": True, "message": "Órdenes actualizados exitosamente"}
