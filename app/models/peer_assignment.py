# app/models/peer_assignment.py
from sqlalchemy import Column, Integer, String, Date, Time, DateTime, func
from app.database import Base


class PeerAssignment(Base):
    """Co-evaluation pairing: a teacher observes a colleague during the period."""
    __tablename__ = "asignaciones_coevaluacion"

    id = Column("id_asignacion", Integer, primary_key=True, index=True)
    period_id = Column("id_periodo", Integer, nullable=False, index=True)
    evaluator_id = Column("id_docente_evaluador", Integer, nullable=False, index=True)
    evaluated_id = Column("id_docente_evaluado", Integer, nullable=False)
    subject_id = Column("id_asignatura", Integer, nullable=True)  # NULL = general pairing
    scheduled_on = Column("fecha", Date, nullable=True)
    starts_at = Column("hora_inicio", Time, nullable=True)
    ends_at = Column("hora_fin", Time, nullable=True)
    weekday = Column("dia", String(20), nullable=True)
    created_at = Column("fecha_creacion", DateTime(timezone=True), server_default=func.now())
