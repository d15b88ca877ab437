# app/routers/career_report.py
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from app.config import settings
from app.core.auth import ADMIN, COORDINATOR, require_roles
from app.core.logging import kv
from app.core.rate_limit import limiter
from app.dependencies import get_career_report_service, get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.report import GenerateCareerReportRequest, ListResponse
from app.schemas.user import TokenUser
from app.services.career_report import CareerReportService
from app.services.documents import DOCX_MEDIA_TYPE
from app.services.formatting import report_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reporte-carrera", tags=["career-report"])

report_readers = require_roles(ADMIN, COORDINATOR)


@router.get("/carreras", response_model=ListResponse)
async def list_careers(
    id_periodo: Optional[int] = None,
    repo: InstituteRepository = Depends(get_institute_repository),
    user: TokenUser = Depends(report_readers),
):
    careers = await repo.list_active_careers(id_periodo)
    return ListResponse(data=[c.model_dump() for c in careers])


@router.get("/periodos", response_model=ListResponse)
async def list_periods(
    repo: InstituteRepository = Depends(get_institute_repository),
    user: TokenUser = Depends(report_readers),
):
    periods = await repo.list_periods()
    return ListResponse(data=[p.model_dump() for p in periods])


@router.post("/generar")
@limiter.limit(settings.RATE_LIMIT_CRITICAL)
async def generate_career_report(
    request: Request,
    data: GenerateCareerReportRequest,
    service: CareerReportService = Depends(get_career_report_service),
    user: TokenUser = Depends(report_readers),
):
    report, content = await service.generate_document(data.id_carrera, data.id_periodo, data.numero_inicio_oficio)
    logger.info(
        "career report generated %s",
        kv(id_carrera=data.id_carrera, id_periodo=data.id_periodo, usuario=user.id,
           docentes=len(report.teachers), bytes=len(content)),
    )
    filename = report_filename("Reporte_Evaluacion", report.career.nombre_carrera, date.today(), "docx")
    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
