# app/models/coordinator.py
from sqlalchemy import Column, Integer, String, DateTime, func
from app.database import Base


class CoordinatorAssignment(Base):
    __tablename__ = "coordinadores_carreras"

    id = Column("id_coordinador_carrera", Integer, primary_key=True, index=True)
    document = Column("cedula_coordinador", String(20), nullable=False)
    first_names = Column("nombres_coordinador", String(150), nullable=False)
    last_names = Column("apellidos_coordinador", String(150), nullable=False)
    email = Column("correo_coordinador", String(150), nullable=False)
    career_id = Column("id_carrera", Integer, nullable=False, index=True)
    status = Column("estado", String(20), nullable=False, default="ACTIVO")  # ACTIVO, INACTIVO
    assigned_at = Column("fecha_asignacion", DateTime(timezone=True), server_default=func.now())
    updated_at = Column("fecha_actualizacion", DateTime(timezone=True), onupdate=func.now())
