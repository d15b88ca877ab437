# app/routers/grade_reports.py
from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import ADMIN, COORDINATOR, require_roles
from app.core.rate_limit import limiter
from app.database import get_write_db
from app.dependencies import get_career_report_service, get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.report import CareerReport, GradeReportResponse
from app.schemas.user import TokenUser
from app.services import coordinators, signatories
from app.services.career_report import CareerReportService
from app.services.formatting import report_filename
from app.services.grade_exports import (
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    build_pdf,
    build_xlsx,
    career_scores,
)

router = APIRouter(prefix="/reportes-calificacion", tags=["grade-reports"])

report_readers = require_roles(ADMIN, COORDINATOR)

ALL_CAREERS = "todas"


async def _coordinator_career_id(db: AsyncSession, repo: InstituteRepository, user: TokenUser) -> int:
    """Career assigned to a coordinator: active assignment first, then the teacher record."""
    career_id = await coordinators.career_id_for_document(db, user.cedula) if user.cedula else None
    if career_id is None and user.cedula:
        career = await repo.get_coordinator_career(user.cedula)
        career_id = career.id_carrera if career else None
    if career_id is None:
        raise HTTPException(status_code=404, detail="No se encontró una carrera asignada al coordinador")
    return career_id


async def _load_reports(
    period_id: int,
    career: str,
    user: TokenUser,
    db: AsyncSession,
    repo: InstituteRepository,
    service: CareerReportService,
) -> List[CareerReport]:
    # a coordinator only ever sees their own career
    if user.rol in COORDINATOR:
        career_id = await _coordinator_career_id(db, repo, user)
        return [await service.build_report(career_id, period_id)]
    if career == ALL_CAREERS:
        return await service.build_period_reports(period_id)
    if not career.isdigit():
        raise HTTPException(status_code=400, detail="id_carrera debe ser un número o 'todas'")
    return [await service.build_report(int(career), period_id)]


def _require_teachers(reports: List[CareerReport]) -> None:
    if not any(report.teachers for report in reports):
        raise HTTPException(status_code=404, detail="No se encontraron docentes para generar el reporte")


@router.get("/datos/{id_periodo}/{id_carrera}", response_model=GradeReportResponse)
async def report_data(
    id_periodo: int,
    id_carrera: str,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    service: CareerReportService = Depends(get_career_report_service),
    user: TokenUser = Depends(report_readers),
):
    reports = await _load_reports(id_periodo, id_carrera, user, db, repo, service)
    return GradeReportResponse(data=[career_scores(r) for r in reports])


@router.get("/pdf/{id_periodo}")
@router.get("/pdf/{id_periodo}/{id_carrera}")
@limiter.limit(settings.RATE_LIMIT_CRITICAL)
async def report_pdf(
    request: Request,
    id_periodo: int,
    id_carrera: str = ALL_CAREERS,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    service: CareerReportService = Depends(get_career_report_service),
    user: TokenUser = Depends(report_readers),
):
    reports = await _load_reports(id_periodo, id_carrera, user, db, repo, service)
    _require_teachers(reports)
    content = build_pdf(
        [r for r in reports if r.teachers],
        generated_at=datetime.now(),
        signatories=await signatories.report_signatories(db, user.id),
    )
    label = reports[0].career.nombre_carrera if len(reports) == 1 else "Todas_las_carreras"
    filename = report_filename("Reporte_Calificaciones", label, date.today(), "pdf")
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/excel/{id_periodo}/{id_carrera}")
@limiter.limit(settings.RATE_LIMIT_CRITICAL)
async def report_excel(
    request: Request,
    id_periodo: int,
    id_carrera: str,
    db: AsyncSession = Depends(get_write_db),
    repo: InstituteRepository = Depends(get_institute_repository),
    service: CareerReportService = Depends(get_career_report_service),
    user: TokenUser = Depends(report_readers),
):
    if id_carrera == ALL_CAREERS and user.rol not in COORDINATOR:
        raise HTTPException(status_code=400, detail="El reporte Excel se genera por carrera")
    reports = await _load_reports(id_periodo, id_carrera, user, db, repo, service)
    _require_teachers(reports)
    report = reports[0]
    filename = report_filename("Reporte_Calificaciones", report.career.nombre_carrera, date.today(), "xlsx")
    return Response(
        content=build_xlsx(report),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
