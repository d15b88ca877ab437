import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, InvalidInput, NotFound
from app.core.logging import kv
from app.models.evaluation import (
    Answer,
    AuthorityEvaluation,
    CompletedEvaluation,
    Evaluation,
    Form,
    Question,
    QUESTION_SCALE,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
)
from app.schemas.evaluation import (
    AuthorityEvaluationCreate,
    AuthorityEvaluationResponse,
    EvaluationCreate,
    EvaluationResponse,
    EvaluationUpdate,
    SubmissionCreate,
    SubmissionResponse,
)

logger = logging.getLogger(__name__)

SCALE_MIN, SCALE_MAX = 0, 5


async def get_form(db: AsyncSession, form_id: int) -> Form:
    form = await db.get(Form, form_id)
    if form is None:
        raise NotFound("Formulario", form_id)
    return form


async def get_evaluation(db: AsyncSession, evaluation_id: int) -> Evaluation:
    evaluation = await db.get(Evaluation, evaluation_id)
    if evaluation is None:
        raise NotFound("Evaluación", evaluation_id)
    return evaluation


async def _ensure_unique(db: AsyncSession, form_id: int, period_id: int, exclude_id: Optional[int] = None):
    stmt = select(Evaluation.id).where(Evaluation.form_id == form_id).where(Evaluation.period_id == period_id)
    if exclude_id is not None:
        stmt = stmt.where(Evaluation.id != exclude_id)
    if (await db.execute(stmt.limit(1))).first() is not None:
        raise Conflict("Ya existe una evaluación para este formulario en el periodo")


def evaluation_response(evaluation: Evaluation, form_name: Optional[str] = None) -> EvaluationResponse:
    return EvaluationResponse(
        id_evaluacion=evaluation.id,
        id_formulario=evaluation.form_id,
        nombre_formulario=form_name,
        id_periodo=evaluation.period_id,
        fecha_inicio=evaluation.starts_at,
        fecha_fin=evaluation.ends_at,
        fecha_notificacion=evaluation.notified_at,
        estado=evaluation.status,
    )


async def list_evaluations(db: AsyncSession, period_id: Optional[int] = None) -> List[EvaluationResponse]:
    stmt = select(Evaluation, Form.name).join(Form, Form.id == Evaluation.form_id)
    if period_id is not None:
        stmt = stmt.where(Evaluation.period_id == period_id)
    result = await db.execute(stmt.order_by(Evaluation.period_id.desc(), Evaluation.form_id))
    return [evaluation_response(evaluation, name) for evaluation, name in result.all()]


async def create_evaluation(db: AsyncSession, data: EvaluationCreate) -> EvaluationResponse:
    form = await get_form(db, data.id_formulario)
    await _ensure_unique(db, data.id_formulario, data.id_periodo)
    evaluation = Evaluation(
        form_id=data.id_formulario,
        period_id=data.id_periodo,
        starts_at=data.fecha_inicio,
        ends_at=data.fecha_fin,
        status=data.estado,
    )
    db.add(evaluation)
    await db.commit()
    await db.refresh(evaluation)
    return evaluation_response(evaluation, form.name)


async def update_evaluation(db: AsyncSession, evaluation_id: int, data: EvaluationUpdate) -> EvaluationResponse:
    evaluation = await get_evaluation(db, evaluation_id)
    changes = data.model_dump(exclude_unset=True)

    form_id = changes.get("id_formulario") or evaluation.form_id
    period_id = changes.get("id_periodo") or evaluation.period_id
    form = await get_form(db, form_id)
    if (form_id, period_id) != (evaluation.form_id, evaluation.period_id):
        await _ensure_unique(db, form_id, period_id, exclude_id=evaluation_id)

    starts_at = changes.get("fecha_inicio", evaluation.starts_at)
    ends_at = changes.get("fecha_fin", evaluation.ends_at)
    if starts_at and ends_at and _naive(ends_at) < _naive(starts_at):
        raise InvalidInput("fecha_fin debe ser posterior a fecha_inicio")

    evaluation.form_id = form_id
    evaluation.period_id = period_id
    evaluation.starts_at = starts_at
    evaluation.ends_at = ends_at
    if "fecha_notificacion" in changes:
        evaluation.notified_at = changes["fecha_notificacion"]
    if changes.get("estado"):
        evaluation.status = changes["estado"]
    await db.commit()
    await db.refresh(evaluation)
    return evaluation_response(evaluation, form.name)


def _naive(value: datetime) -> datetime:
    # SQLite hands back naive datetimes, compare everything as UTC naive
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def delete_evaluation(db: AsyncSession, evaluation_id: int) -> None:
    await get_evaluation(db, evaluation_id)
    await db.execute(delete(Answer).where(Answer.evaluation_id == evaluation_id))
    await db.execute(delete(CompletedEvaluation).where(CompletedEvaluation.evaluation_id == evaluation_id))
    await db.execute(delete(Evaluation).where(Evaluation.id == evaluation_id))
    await db.commit()


def _check_scale_answer(question_id: int, value: str) -> None:
    text = value.strip()
    if not text.isdigit() or not SCALE_MIN <= int(text) <= SCALE_MAX:
        raise InvalidInput(
            f"La respuesta a la pregunta {question_id} debe ser un entero entre {SCALE_MIN} y {SCALE_MAX}"
        )


async def submit_answers(
    db: AsyncSession, evaluation_id: int, evaluator_id: int, data: SubmissionCreate
) -> SubmissionResponse:
    evaluation = await get_evaluation(db, evaluation_id)

    result = await db.execute(select(Question).where(Question.form_id == evaluation.form_id))
    questions = {q.id: q for q in result.scalars().all()}
    for answer in data.respuestas:
        question = questions.get(answer.id_pregunta)
        if question is None:
            raise InvalidInput(f"La pregunta {answer.id_pregunta} no pertenece al formulario de la evaluación")
        if question.question_type == QUESTION_SCALE:
            _check_scale_answer(answer.id_pregunta, answer.respuesta)

    existing = await db.execute(
        select(CompletedEvaluation.id)
        .where(CompletedEvaluation.evaluation_id == evaluation_id)
        .where(CompletedEvaluation.evaluator_id == evaluator_id)
        .where(CompletedEvaluation.assignment_id == data.id_distributivo)
        .where(CompletedEvaluation.status == STATUS_COMPLETED)
    )
    if existing.first() is not None:
        raise Conflict("La evaluación ya fue completada para este distributivo")

    for answer in data.respuestas:
        db.add(Answer(
            evaluation_id=evaluation_id,
            question_id=answer.id_pregunta,
            value=answer.respuesta.strip(),
            evaluator_id=evaluator_id,
            evaluated_id=data.evaluado_id,
            assignment_id=data.id_distributivo,
        ))
    db.add(CompletedEvaluation(
        evaluation_id=evaluation_id,
        evaluator_id=evaluator_id,
        evaluated_id=data.evaluado_id,
        assignment_id=data.id_distributivo,
        status=STATUS_COMPLETED,
        finished_at=datetime.now(timezone.utc),
    ))
    try:
        await db.commit()
    except sa_exc.IntegrityError:
        # a concurrent submission won the unique key
        await db.rollback()
        logger.warning(
            "duplicate submission rejected %s",
            kv(id_evaluacion=evaluation_id, evaluador=evaluator_id, id_distributivo=data.id_distributivo),
        )
        raise Conflict("La evaluación ya fue completada para este distributivo")
    logger.info(
        "evaluation submitted %s",
        kv(id_evaluacion=evaluation_id, evaluador=evaluator_id, id_distributivo=data.id_distributivo,
           respuestas=len(data.respuestas)),
    )
    return SubmissionResponse(
        id_evaluacion=evaluation_id,
        id_distributivo=data.id_distributivo,
        respuestas_guardadas=len(data.respuestas),
        estado=STATUS_COMPLETED,
    )


def authority_response(row: AuthorityEvaluation, action: Optional[str] = None) -> AuthorityEvaluationResponse:
    return AuthorityEvaluationResponse(
        id_evaluacion_autoridad=row.id,
        id_periodo=row.period_id,
        id_docente_evaluado=row.teacher_id,
        id_carrera=row.career_id,
        calificacion=float(row.score),
        evaluador_cedula=row.evaluator_document,
        observaciones=row.notes,
        accion=action,
    )


async def upsert_authority_evaluation(
    db: AsyncSession, data: AuthorityEvaluationCreate, evaluator_document: str
) -> Tuple[AuthorityEvaluation, str]:
    """One active rating per (period, teacher, evaluator); a second post updates it."""
    result = await db.execute(
        select(AuthorityEvaluation)
        .where(AuthorityEvaluation.period_id == data.id_periodo)
        .where(AuthorityEvaluation.teacher_id == data.id_docente_evaluado)
        .where(AuthorityEvaluation.evaluator_document == evaluator_document)
        .where(AuthorityEvaluation.status == STATUS_ACTIVE)
    )
    row = result.scalars().first()
    if row is None:
        row = AuthorityEvaluation(
            period_id=data.id_periodo,
            teacher_id=data.id_docente_evaluado,
            career_id=data.id_carrera,
            score=data.calificacion,
            evaluator_document=evaluator_document,
            notes=data.observaciones,
            status=STATUS_ACTIVE,
        )
        db.add(row)
        action = "creada"
    else:
        row.score = data.calificacion
        row.notes = data.observaciones
        if data.id_carrera is not None:
            row.career_id = data.id_carrera
        action = "actualizada"
    await db.commit()
    await db.refresh(row)
    return row, action


async def list_authority_evaluations(
    db: AsyncSession, period_id: int, teacher_id: Optional[int] = None
) -> List[AuthorityEvaluation]:
    stmt = (
        select(AuthorityEvaluation)
        .where(AuthorityEvaluation.period_id == period_id)
        .where(AuthorityEvaluation.status == STATUS_ACTIVE)
    )
    if teacher_id is not None:
        stmt = stmt.where(AuthorityEvaluation.teacher_id == teacher_id)
    result = await db.execute(stmt.order_by(AuthorityEvaluation.teacher_id, AuthorityEvaluation.id))
    return result.scalars().all()
