# app/routers/evaluations.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import ADMIN, COORDINATOR, get_current_admin, get_current_user, require_roles
from app.core.rate_limit import limiter
from app.database import get_write_db
from app.dependencies import get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.evaluation import (
    AuthorityEvaluationCreate,
    AuthorityEvaluationResponse,
    EvaluationCreate,
    EvaluationResponse,
    EvaluationUpdate,
    SubmissionCreate,
    SubmissionResponse,
)
from app.schemas.user import TokenUser
from app.services import evaluations as service

router = APIRouter(tags=["evaluations"])

authority_evaluators = require_roles(ADMIN, COORDINATOR)


async def _ensure_period(repo: InstituteRepository, period_id: int) -> None:
    if await repo.get_period(period_id) is None:
        raise HTTPException(status_code=404, detail="Periodo no encontrado")


@router.get("/evaluaciones", response_model=List[EvaluationResponse])
async def list_evaluations(
    id_periodo: Optional[int] = None,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(get_current_user),
):
    return await service.list_evaluations(db, id_periodo)


@router.get("/evaluaciones/{evaluation_id}", response_model=EvaluationResponse)
async def get_evaluation(
    evaluation_id: int,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(get_current_user),
):
    evaluation = await service.get_evaluation(db, evaluation_id)
    form = await service.get_form(db, evaluation.form_id)
    return service.evaluation_response(evaluation, form.name)


@router.post("/evaluaciones", response_model=EvaluationResponse, status_code=201)
async def create_evaluation(
    data: EvaluationCreate,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    await _ensure_period(repo, data.id_periodo)
    return await service.create_evaluation(db, data)


@router.put("/evaluaciones/{evaluation_id}", response_model=EvaluationResponse)
async def update_evaluation(
    evaluation_id: int,
    data: EvaluationUpdate,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    if data.id_periodo is not None:
        await _ensure_period(repo, data.id_periodo)
    return await service.update_evaluation(db, evaluation_id, data)


@router.delete("/evaluaciones/{evaluation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_evaluation(
    evaluation_id: int,
    db: AsyncSession = Depends(get_write_db),
    admin: TokenUser = Depends(get_current_admin),
):
    await service.delete_evaluation(db, evaluation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/evaluaciones/{evaluation_id}/respuestas", response_model=SubmissionResponse, status_code=201)
@limiter.limit(settings.RATE_LIMIT_CRITICAL)
async def submit_answers(
    request: Request,
    evaluation_id: int,
    data: SubmissionCreate,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(get_current_user),
):
    return await service.submit_answers(db, evaluation_id, user.id, data)


@router.post("/evaluaciones-autoridades", response_model=AuthorityEvaluationResponse)
async def save_authority_evaluation(
    data: AuthorityEvaluationCreate,
    response: Response,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(authority_evaluators),
):
    if not user.cedula:
        raise HTTPException(status_code=400, detail="El token no contiene la cédula del evaluador")
    row, action = await service.upsert_authority_evaluation(db, data, user.cedula)
    response.status_code = status.HTTP_201_CREATED if action == "creada" else status.HTTP_200_OK
    return service.authority_response(row, action)


@router.get("/evaluaciones-autoridades", response_model=List[AuthorityEvaluationResponse])
async def list_authority_evaluations(
    id_periodo: int,
    id_docente: Optional[int] = None,
    db: AsyncSession = Depends(get_write_db),
    user: TokenUser = Depends(authority_evaluators),
):
    rows = await service.list_authority_evaluations(db, id_periodo, id_docente)
    return [service.authority_response(row) for row in rows]
