# app/routers/coordinators.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin
from app.database import get_write_db
from app.dependencies import get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.coordinator import (
    CareerOption,
    CoordinatorAssignmentCreate,
    CoordinatorAssignmentResponse,
    CoordinatorCandidate,
    SelectOptionsResponse,
)
from app.schemas.user import TokenUser
from app.services import coordinators as service

router = APIRouter(prefix="/coordinadores", tags=["coordinators"])


@router.get("/datos-selects", response_model=SelectOptionsResponse)
async def select_options(
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    candidates = await repo.list_coordinator_candidates()
    careers = await repo.list_active_careers()
    return SelectOptionsResponse(
        coordinadores=[CoordinatorCandidate(**c) for c in candidates],
        carreras=[CareerOption(id_carrera=c.id_carrera, nombre_carrera=c.nombre_carrera) for c in careers],
    )


@router.get("/asignaciones", response_model=List[CoordinatorAssignmentResponse])
async def list_assignments(
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    assignments = await service.list_active_assignments(db)
    names = await repo.careers_by_ids(a.career_id for a in assignments)
    return [service.to_response(a, names) for a in assignments]


@router.get("/asignaciones/{assignment_id}", response_model=CoordinatorAssignmentResponse)
async def get_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    assignment = await service.get_active_assignment(db, assignment_id)
    return service.to_response(assignment, await repo.careers_by_ids([assignment.career_id]))


@router.post("/asignaciones", response_model=CoordinatorAssignmentResponse, status_code=201)
async def create_assignment(
    data: CoordinatorAssignmentCreate,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    assignment = await service.create_assignment(db, data)
    return service.to_response(assignment, await repo.careers_by_ids([assignment.career_id]))


@router.put("/asignaciones/{assignment_id}", response_model=CoordinatorAssignmentResponse)
async def update_assignment(
    assignment_id: int,
    data: CoordinatorAssignmentCreate,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    admin: TokenUser = Depends(get_current_admin),
):
    assignment = await service.update_assignment(db, assignment_id, data)
    return service.to_response(assignment, await repo.careers_by_ids([assignment.career_id]))


@router.delete("/asignaciones/{assignment_id}")
async def delete_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_write_db),
    admin: TokenUser = Depends(get_current_admin),
):
    await service.deactivate_assignment(db, assignment_id)
    return {"success": True, "message": "Coordinador desactivado correctamente"}
