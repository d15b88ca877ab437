# app/routers/peer_assignments.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin
from app.database import get_write_db
from app.dependencies import get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.peer_assignment import (
    PeerAssignmentCreate,
    PeerAssignmentCreated,
    PeerAssignmentResponse,
    PeerTeacherList,
)
from app.schemas.user import TokenUser
from app.services import peer_assignments as service

router = APIRouter(prefix="/asignaciones", tags=["peer-assignments"])


@router.get("/docentes-evaluadores/{id_periodo}", response_model=PeerTeacherList)
async def evaluator_candidates(
    id_periodo: int,
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    teachers = await service.list_evaluator_candidates(repo, id_periodo)
    return PeerTeacherList(total=len(teachers), data=teachers)


@router.post("/crear", response_model=PeerAssignmentCreated, status_code=201)
async def create_assignment(
    data: PeerAssignmentCreate,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    assignment = await service.create_assignment(db, repo, data)
    return PeerAssignmentCreated(id_asignacion=assignment.id)


@router.get("/{id_periodo}", response_model=List[PeerAssignmentResponse])
async def list_assignments(
    id_periodo: int,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    return await service.to_responses(repo, await service.list_for_period(db, id_periodo))


@router.put("/{assignment_id}", response_model=PeerAssignmentResponse)
async def update_assignment(
    assignment_id: int,
    data: PeerAssignmentCreate,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    assignment = await service.update_assignment(db, repo, assignment_id, data)
    return (await service.to_responses(repo, [assignment]))[0]


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_write_db),
    admin: TokenUser = Depends(get_current_admin),
):
    await service.delete_assignment(db, assignment_id)
    return {"success": True, "message": "Asignación eliminada exitosamente"}
