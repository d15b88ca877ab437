# app/routers/access.py
from fastapi import APIRouter, Depends

from app.core.auth import ADMIN, COORDINATOR, STUDENT, TEACHER, require_roles
from app.schemas.user import TokenUser

router = APIRouter(tags=["access"])


@router.get("/admin")
async def admin_area(user: TokenUser = Depends(require_roles(ADMIN))):
    return {"message": "Bienvenido al panel de administración", "user": user}


@router.get("/docente")
async def teacher_area(user: TokenUser = Depends(require_roles(TEACHER))):
    return {"message": "Bienvenido al panel docente", "user": user}


@router.get("/coordinador")
async def coordinator_area(user: TokenUser = Depends(require_roles(COORDINATOR))):
    return {"message": "Bienvenido al panel de coordinación", "user": user}


@router.get("/estudiante")
async def student_area(user: TokenUser = Depends(require_roles(STUDENT))):
    return {"message": "Bienvenido al panel de estudiante", "user": user}
