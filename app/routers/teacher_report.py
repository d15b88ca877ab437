# app/routers/teacher_report.py
import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import ADMIN, COORDINATOR, TEACHER, require_roles
from app.core.exceptions import NoEvaluations
from app.core.logging import kv
from app.core.rate_limit import limiter
from app.database import get_write_db
from app.dependencies import get_teacher_report_service
from app.schemas.report import TeacherReportResponse
from app.schemas.user import TokenUser
from app.services import signatories
from app.services.formatting import report_filename
from app.services.grade_exports import PDF_MEDIA_TYPE, build_teacher_pdf
from app.services.teacher_report import TeacherReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reporte-docente-individual", tags=["teacher-report"])

report_readers = require_roles(ADMIN, COORDINATOR, TEACHER)


def _check_access(user: TokenUser, cedula: str) -> None:
    # teachers only get their own report
    if user.rol in TEACHER and user.cedula != cedula:
        raise HTTPException(status_code=403, detail="Solo puede consultar su propio reporte")


@router.get("/datos/{id_periodo}/{cedula}", response_model=TeacherReportResponse)
async def teacher_report_data(
    id_periodo: int,
    cedula: str,
    service: TeacherReportService = Depends(get_teacher_report_service),
    user: TokenUser = Depends(report_readers),
):
    _check_access(user, cedula)
    return TeacherReportResponse(data=await service.build(id_periodo, cedula))


@router.get("/pdf/{id_periodo}/{cedula}")
@limiter.limit(settings.RATE_LIMIT_CRITICAL)
async def teacher_report_pdf(
    request: Request,
    id_periodo: int,
    cedula: str,
    db: AsyncSession = Depends(get_write_db),
    service: TeacherReportService = Depends(get_teacher_report_service),
    user: TokenUser = Depends(report_readers),
):
    _check_access(user, cedula)
    report = await service.build(id_periodo, cedula)
    if not report.has_evaluations:
        raise NoEvaluations(cedula, id_periodo)
    content = build_teacher_pdf(
        report,
        generated_at=datetime.now(),
        signatories=await signatories.report_signatories(db, user.id),
    )
    logger.info("teacher report generated %s", kv(cedula=cedula, id_periodo=id_periodo, usuario=user.id))
    filename = report_filename("Reporte_Docente", f"{cedula}_periodo_{id_periodo}", date.today(), "pdf")
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
