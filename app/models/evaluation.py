# app/models/evaluation.py
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

QUESTION_SCALE = "escala"   # 0–5 ordinal, counted by the averages
QUESTION_TEXT = "texto"     # open answer

STATUS_COMPLETED = "completada"
STATUS_ACTIVE = "ACTIVO"
STATUS_INACTIVE = "INACTIVO"


class Form(Base):
    __tablename__ = "formularios"

    id = Column("id_formulario", Integer, primary_key=True, index=True)
    name = Column("nombre", String(255), nullable=False)


class Question(Base):
    __tablename__ = "preguntas"

    id = Column("id_pregunta", Integer, primary_key=True, index=True)
    form_id = Column("id_formulario", Integer, ForeignKey("formularios.id_formulario"), nullable=False, index=True)
    text = Column("texto", Text, nullable=False)
    question_type = Column("tipo_pregunta", String(20), nullable=False, default=QUESTION_SCALE)


class Evaluation(Base):
    __tablename__ = "evaluaciones"

    id = Column("id_evaluacion", Integer, primary_key=True, index=True)
    form_id = Column("id_formulario", Integer, ForeignKey("formularios.id_formulario"), nullable=False)
    period_id = Column("id_periodo", Integer, nullable=False, index=True)
    starts_at = Column("fecha_inicio", DateTime(timezone=True), nullable=True)
    ends_at = Column("fecha_fin", DateTime(timezone=True), nullable=True)
    notified_at = Column("fecha_notificacion", DateTime(timezone=True), nullable=True)
    status = Column("estado", String(20), nullable=False, default="activa")

    __table_args__ = (
        UniqueConstraint("id_formulario", "id_periodo", name="uq_evaluacion_formulario_periodo"),
    )


class CompletedEvaluation(Base):
    """One submission of an evaluation by an evaluator for an assignment."""
    __tablename__ = "evaluaciones_realizadas"

    id = Column("id_evaluacion_realizada", Integer, primary_key=True, index=True)
    evaluation_id = Column("id_evaluacion", Integer, ForeignKey("evaluaciones.id_evaluacion"), nullable=False)
    evaluator_id = Column("evaluador_id", Integer, nullable=False)
    evaluated_id = Column("evaluado_id", Integer, nullable=True)
    assignment_id = Column("id_distributivo", Integer, nullable=False, index=True)
    status = Column("estado", String(20), nullable=False, default=STATUS_COMPLETED)
    started_at = Column("fecha_inicio", DateTime(timezone=True), server_default=func.now())
    finished_at = Column("fecha_fin", DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("id_evaluacion", "evaluador_id", "id_distributivo", name="uq_realizada_evaluador_distributivo"),
    )


class Answer(Base):
    __tablename__ = "respuestas"

    id = Column("id_respuesta", Integer, primary_key=True, index=True)
    evaluation_id = Column("id_evaluacion", Integer, ForeignKey("evaluaciones.id_evaluacion"), nullable=False, index=True)
    question_id = Column("id_pregunta", Integer, ForeignKey("preguntas.id_pregunta"), nullable=False)
    value = Column("respuesta", Text, nullable=False)
    evaluator_id = Column("evaluador_id", Integer, nullable=False)
    evaluated_id = Column("evaluado_id", Integer, nullable=True)
    assignment_id = Column("id_distributivo", Integer, nullable=False, index=True)


class AuthorityEvaluation(Base):
    __tablename__ = "evaluaciones_autoridades"

    id = Column("id_evaluacion_autoridad", Integer, primary_key=True, index=True)
    period_id = Column("id_periodo", Integer, nullable=False, index=True)
    teacher_id = Column("id_docente_evaluado", Integer, nullable=False, index=True)
    career_id = Column("id_carrera", Integer, nullable=True)
    score = Column("calificacion", Numeric(5, 2), nullable=False)  # 0–100
    evaluator_document = Column("evaluador_cedula", String(20), nullable=False)
    notes = Column("observaciones", Text, nullable=True)
    status = Column("estado", String(20), nullable=False, default=STATUS_ACTIVE)
    created_at = Column("fecha_creacion", DateTime(timezone=True), server_default=func.now())
    updated_at = Column("fecha_actualizacion", DateTime(timezone=True), onupdate=func.now())
