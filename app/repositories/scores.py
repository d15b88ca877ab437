from enum import IntEnum
from typing import List, NamedTuple, Optional, Sequence

from sqlalchemy import select, func, cast, distinct, Numeric
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.evaluation import (
    Answer,
    AuthorityEvaluation,
    CompletedEvaluation,
    Evaluation,
    Question,
    QUESTION_SCALE,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
)

# Scale answers are 0-5, reports use 0-100
SCALE_FACTOR = 20


class FormType(IntEnum):
    SELF = 1
    HETERO = 2
    CO = 3


class ScoreSummary(NamedTuple):
    average: Optional[float]   # 0-100, None when nothing was answered
    evaluations: int


class ScoreRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _average(self, stmt) -> Optional[float]:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError:
            # leave the session usable for the next teacher of the batch
            await self.db.rollback()
            raise
        avg = result.scalar_one()
        return None if avg is None else float(avg)

    async def form_average(self, assignment_id: int, period_id: int, form_type: FormType) -> Optional[float]:
        """Average of completed scale answers for an assignment, on 0-100. None when nothing was answered."""
        return await self._average(
            select(func.avg(cast(Answer.value, Numeric(10, 4))) * SCALE_FACTOR)
            .join(
                CompletedEvaluation,
                (CompletedEvaluation.evaluation_id == Answer.evaluation_id)
                & (CompletedEvaluation.evaluator_id == Answer.evaluator_id)
                & (CompletedEvaluation.assignment_id == Answer.assignment_id),
            )
            .join(Evaluation, Evaluation.id == Answer.evaluation_id)
            .join(Question, Question.id == Answer.question_id)
            .where(Evaluation.period_id == period_id)
            .where(Evaluation.form_id == int(form_type))
            .where(Answer.assignment_id == assignment_id)
            .where(Question.question_type == QUESTION_SCALE)
            .where(CompletedEvaluation.status == STATUS_COMPLETED)
        )

    async def authority_average(self, teacher_id: int, period_id: int) -> Optional[float]:
        return await self._average(
            select(func.avg(AuthorityEvaluation.score))
            .where(AuthorityEvaluation.period_id == period_id)
            .where(AuthorityEvaluation.teacher_id == teacher_id)
            .where(AuthorityEvaluation.status == STATUS_ACTIVE)
        )

    async def form_summary(
        self, assignment_ids: Sequence[int], period_id: int, form_type: FormType
    ) -> ScoreSummary:
        """Same average as ``form_average`` pooled over several assignments, plus the completed submissions."""
        if not assignment_ids:
            return ScoreSummary(None, 0)
        stmt = (
            select(
                func.avg(cast(Answer.value, Numeric(10, 4))) * SCALE_FACTOR,
                func.count(distinct(CompletedEvaluation.id)),
            )
            .join(
                CompletedEvaluation,
                (CompletedEvaluation.evaluation_id == Answer.evaluation_id)
                & (CompletedEvaluation.evaluator_id == Answer.evaluator_id)
                & (CompletedEvaluation.assignment_id == Answer.assignment_id),
            )
            .join(Evaluation, Evaluation.id == Answer.evaluation_id)
            .join(Question, Question.id == Answer.question_id)
            .where(Evaluation.period_id == period_id)
            .where(Evaluation.form_id == int(form_type))
            .where(Answer.assignment_id.in_(list(assignment_ids)))
            .where(Question.question_type == QUESTION_SCALE)
            .where(CompletedEvaluation.status == STATUS_COMPLETED)
        )
        return await self._summary(stmt)

    async def authority_summary(self, teacher_id: int, period_id: int) -> ScoreSummary:
        return await self._summary(
            select(func.avg(AuthorityEvaluation.score), func.count(AuthorityEvaluation.id))
            .where(AuthorityEvaluation.period_id == period_id)
            .where(AuthorityEvaluation.teacher_id == teacher_id)
            .where(AuthorityEvaluation.status == STATUS_ACTIVE)
        )

    async def authority_notes(self, teacher_id: int, period_id: int) -> List[str]:
        result = await self.db.execute(
            select(AuthorityEvaluation.notes)
            .where(AuthorityEvaluation.period_id == period_id)
            .where(AuthorityEvaluation.teacher_id == teacher_id)
            .where(AuthorityEvaluation.status == STATUS_ACTIVE)
            .order_by(AuthorityEvaluation.id)
        )
        return [note.strip() for note in result.scalars().all() if note and note.strip()]

    async def _summary(self, stmt) -> ScoreSummary:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        avg, count = result.one()
        return ScoreSummary(None if avg is None else float(avg), int(count or 0))
