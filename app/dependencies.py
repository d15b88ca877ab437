# app/dependencies.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_read_db, get_write_db
from app.repositories.institute import InstituteRepository
from app.repositories.scores import ScoreRepository
from app.services.career_report import CareerReportService
from app.services.documents import DocxTemplateRenderer
from app.services.teacher_report import TeacherReportService


def get_institute_repository(db: AsyncSession = Depends(get_read_db)) -> InstituteRepository:
    return InstituteRepository(db)


def get_score_repository(db: AsyncSession = Depends(get_write_db)) -> ScoreRepository:
    return ScoreRepository(db)


def get_career_report_service(
    institute: InstituteRepository = Depends(get_institute_repository),
    scores: ScoreRepository = Depends(get_score_repository),
) -> CareerReportService:
    return CareerReportService(institute, scores, renderer=DocxTemplateRenderer(settings.REPORT_TEMPLATE_PATH))


def get_teacher_report_service(
    institute: InstituteRepository = Depends(get_institute_repository),
    scores: ScoreRepository = Depends(get_score_repository),
) -> TeacherReportService:
    return TeacherReportService(institute, scores)
