"""
Career report aggregation.

For a career and a period: resolve the teachers, fetch their four evaluation
averages, normalize and weight them. A failed fetch for one teacher is turned
into a zeroed row plus a ``PartialDataFailure`` on the report; it never aborts
the batch. Fetches run one after the other on the request's session.
"""
import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from app.core.exceptions import EmptyRoster, NotFound, PartialDataFailure
from app.core.logging import kv
from app.repositories.scores import FormType
from app.schemas.report import Career, CareerReport, Period, RosterEntry, ScoreSet, TeacherScores
from app.services import scoring
from app.services.documents import build_docx_context

logger = logging.getLogger(__name__)


class RosterSource(Protocol):
    async def get_career(self, career_id: int) -> Optional[Career]: ...

    async def get_period(self, period_id: int) -> Optional[Period]: ...

    async def list_roster(self, career_id: int, period_id: int) -> List[RosterEntry]: ...

    async def list_roster_all_careers(self, period_id: int) -> List[RosterEntry]: ...


class ScoreSource(Protocol):
    async def form_average(self, assignment_id: int, period_id: int, form_type: FormType) -> Optional[float]: ...

    async def authority_average(self, teacher_id: int, period_id: int) -> Optional[float]: ...


class DocumentRenderer(Protocol):
    def render(self, context: dict) -> bytes: ...


def dedupe_roster(entries: List[RosterEntry]) -> List[RosterEntry]:
    """One entry per teacher, the one with the lowest assignment id."""
    kept: Dict[int, RosterEntry] = {}
    for entry in entries:
        current = kept.get(entry.teacher_id)
        if current is None or entry.assignment_id < current.assignment_id:
            kept[entry.teacher_id] = entry
    return list(kept.values())


def roster_order(entries: List[RosterEntry]) -> List[RosterEntry]:
    """Case-insensitive by full name, teacher id breaks ties."""
    return sorted(entries, key=lambda e: (e.full_name.casefold(), e.teacher_id))


def score_teacher(entry: RosterEntry, raw: ScoreSet, failure: Optional[PartialDataFailure] = None) -> TeacherScores:
    components = scoring.normalize_scores(raw)
    return TeacherScores(
        entry=entry,
        raw=raw,
        components=components,
        weighted=scoring.weighted_components(components),
        composite=scoring.composite(components),
        failed=failure is not None,
        error=failure.detail if failure else None,
    )


class CareerReportService:
    def __init__(
        self,
        roster: RosterSource,
        scores: ScoreSource,
        renderer: Optional[DocumentRenderer] = None,
        today: Callable[[], date] = date.today,
    ):
        self.roster = roster
        self.scores = scores
        self.renderer = renderer
        self.today = today

    async def _career_and_period(self, career_id: int, period_id: int) -> Tuple[Career, Period]:
        career = await self.roster.get_career(career_id)
        if career is None:
            raise NotFound("Carrera", career_id)
        period = await self.roster.get_period(period_id)
        if period is None:
            raise NotFound("Periodo", period_id)
        return career, period

    async def resolve_roster(self, career_id: int, period_id: int) -> List[RosterEntry]:
        await self._career_and_period(career_id, period_id)
        return roster_order(dedupe_roster(await self.roster.list_roster(career_id, period_id)))

    async def fetch_scores(self, entry: RosterEntry, period_id: int) -> ScoreSet:
        return ScoreSet(
            self_score=await self.scores.form_average(entry.assignment_id, period_id, FormType.SELF),
            hetero_score=await self.scores.form_average(entry.assignment_id, period_id, FormType.HETERO),
            co_score=await self.scores.form_average(entry.assignment_id, period_id, FormType.CO),
            authority_score=await self.scores.authority_average(entry.teacher_id, period_id),
        )

    async def _score_roster(self, entries: List[RosterEntry], period_id: int) -> Tuple[List[TeacherScores], List[str]]:
        rows: List[TeacherScores] = []
        failures: List[str] = []
        for entry in entries:
            try:
                raw = await self.fetch_scores(entry, period_id)
            except Exception as exc:
                failure = PartialDataFailure(entry.teacher_id, entry.assignment_id, exc)
                logger.exception(
                    "score fetch failed %s",
                    kv(id_docente=entry.teacher_id, id_distributivo=entry.assignment_id, id_periodo=period_id),
                )
                rows.append(score_teacher(entry, ScoreSet(), failure))
                failures.append(failure.detail)
                continue
            rows.append(score_teacher(entry, raw))
        return rows, failures

    async def build_report(self, career_id: int, period_id: int) -> CareerReport:
        career, period = await self._career_and_period(career_id, period_id)
        entries = roster_order(dedupe_roster(await self.roster.list_roster(career_id, period_id)))
        teachers, failures = await self._score_roster(entries, period_id)
        logger.info(
            "career report built %s",
            kv(id_carrera=career_id, id_periodo=period_id, docentes=len(teachers), fallos=len(failures)),
        )
        return CareerReport(career=career, period=period, teachers=teachers, failures=failures)

    async def build_period_reports(self, period_id: int) -> List[CareerReport]:
        """One report per active career with teachers in the period, ordered by career name."""
        period = await self.roster.get_period(period_id)
        if period is None:
            raise NotFound("Periodo", period_id)

        by_career: Dict[int, List[RosterEntry]] = {}
        names: Dict[int, str] = {}
        for entry in await self.roster.list_roster_all_careers(period_id):
            by_career.setdefault(entry.career_id, []).append(entry)
            names[entry.career_id] = entry.career_name or ""

        reports = []
        for career_id in sorted(by_career, key=lambda cid: (names[cid].casefold(), cid)):
            teachers, failures = await self._score_roster(
                roster_order(dedupe_roster(by_career[career_id])), period_id
            )
            reports.append(
                CareerReport(
                    career=Career(id_carrera=career_id, nombre_carrera=names[career_id]),
                    period=period,
                    teachers=teachers,
                    failures=failures,
                )
            )
        return reports

    async def generate_document(self, career_id: int, period_id: int, first_office_number: int) -> Tuple[CareerReport, bytes]:
        if self.renderer is None:
            raise RuntimeError("CareerReportService was built without a document renderer")
        report = await self.build_report(career_id, period_id)
        if not report.teachers:
            raise EmptyRoster(career_id, period_id)
        context = build_docx_context(report, first_office_number, self.today())
        return report, self.renderer.render(context)
