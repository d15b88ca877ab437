# app/routers/filters.py
from fastapi import APIRouter, Depends, HTTPException

from app.core.auth import get_current_user
from app.dependencies import get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.report import ListResponse
from app.schemas.user import TokenUser

router = APIRouter(prefix="/filtros", tags=["filters"])


@router.get("/periodos", response_model=ListResponse)
async def list_periods(
    repo: InstituteRepository = Depends(get_institute_repository),
    user: TokenUser = Depends(get_current_user),
):
    periods = await repo.list_periods()
    return ListResponse(data=[p.model_dump() for p in periods])


@router.get("/periodos/{period_id}/docentes", response_model=ListResponse)
async def period_assignments(
    period_id: int,
    repo: InstituteRepository = Depends(get_institute_repository),
    user: TokenUser = Depends(get_current_user),
):
    if await repo.get_period(period_id) is None:
        raise HTTPException(status_code=404, detail="Periodo no encontrado")
    return ListResponse(data=await repo.list_period_assignments(period_id))


@router.get("/periodos/{period_id}/mis-distributivos", response_model=ListResponse)
async def my_assignments(
    period_id: int,
    repo: InstituteRepository = Depends(get_institute_repository),
    user: TokenUser = Depends(get_current_user),
):
    if not user.cedula:
        return ListResponse(data=[])
    return ListResponse(data=await repo.list_teacher_assignments(period_id, user.cedula))
