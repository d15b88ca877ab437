"""
Individual teacher report.

Same weighting as the career report, but the form averages pool every
assignment the teacher holds in the period instead of the representative one.
"""
import logging
from typing import List, Optional, Protocol, Sequence

from app.core.exceptions import NotFound
from app.core.logging import kv
from app.repositories.scores import FormType, ScoreSummary
from app.schemas.report import EvaluationTypeSummary, Period, ScoreSet, TeacherReport
from app.services import scoring

logger = logging.getLogger(__name__)

# field, key, label as printed on the report
EVALUATION_TYPES = (
    ("self_score", "autoevaluacion", "Autoevaluación"),
    ("hetero_score", "heteroevaluacion", "Heteroevaluación (Estudiantes)"),
    ("co_score", "coevaluacion", "Coevaluación (Docentes)"),
    ("authority_score", "autoridades", "Evaluación Autoridades"),
)


class TeacherSource(Protocol):
    async def get_teacher_by_document(self, document: str) -> Optional[dict]: ...

    async def get_period(self, period_id: int) -> Optional[Period]: ...

    async def list_teacher_assignments(self, period_id: int, document: str) -> List[dict]: ...


class SummarySource(Protocol):
    async def form_summary(
        self, assignment_ids: Sequence[int], period_id: int, form_type: FormType
    ) -> ScoreSummary: ...

    async def authority_summary(self, teacher_id: int, period_id: int) -> ScoreSummary: ...

    async def authority_notes(self, teacher_id: int, period_id: int) -> List[str]: ...


def _subjects(assignments: List[dict]) -> List[str]:
    seen: List[str] = []
    for item in assignments:
        name = item.get("asignatura")
        if name and name not in seen:
            seen.append(name)
    return seen


class TeacherReportService:
    def __init__(self, institute: TeacherSource, scores: SummarySource):
        self.institute = institute
        self.scores = scores

    async def build(self, period_id: int, document: str) -> TeacherReport:
        teacher = await self.institute.get_teacher_by_document(document)
        if teacher is None:
            raise NotFound("Docente", document)
        period = await self.institute.get_period(period_id)
        if period is None:
            raise NotFound("Periodo", period_id)

        assignments = await self.institute.list_teacher_assignments(period_id, document)
        assignment_ids = [item["id_distributivo"] for item in assignments]
        summaries = {
            "self_score": await self.scores.form_summary(assignment_ids, period_id, FormType.SELF),
            "hetero_score": await self.scores.form_summary(assignment_ids, period_id, FormType.HETERO),
            "co_score": await self.scores.form_summary(assignment_ids, period_id, FormType.CO),
            "authority_score": await self.scores.authority_summary(teacher["id_docente"], period_id),
        }
        notes = await self.scores.authority_notes(teacher["id_docente"], period_id)

        components = scoring.normalize_scores(ScoreSet(**{f: s.average for f, s in summaries.items()}))
        weighted = scoring.weighted_components(components)
        total = scoring.composite(components)

        items = []
        for field, key, label in EVALUATION_TYPES:
            summary = summaries[field]
            items.append(EvaluationTypeSummary(
                tipo=key,
                nombre=label,
                promedio=None if summary.average is None else scoring.round_score(getattr(components, field)),
                evaluaciones=summary.evaluations,
                ponderacion=scoring.WEIGHTS[field],
                contribucion=scoring.round_score(getattr(weighted, field)),
            ))

        logger.info(
            "teacher report built %s",
            kv(id_docente=teacher["id_docente"], id_periodo=period_id, distributivos=len(assignment_ids)),
        )
        return TeacherReport(
            id_docente=teacher["id_docente"],
            nombre=teacher["nombre"],
            cedula=teacher["cedula"],
            periodo=period,
            asignaturas=_subjects(assignments),
            evaluaciones=items,
            promedio_final=scoring.round_score(total),
            valoracion=scoring.rating_label(total),
            observaciones=notes,
        )
