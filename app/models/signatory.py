# app/models/signatory.py
from sqlalchemy import Column, Integer, String, DateTime, func
from app.database import Base


class ReportSignatory(Base):
    """Authority whose signature block closes the PDF reports of one user."""
    __tablename__ = "autoridades_reportes"

    id = Column("id_autoridad", Integer, primary_key=True, index=True)
    user_id = Column("id_usuario", Integer, nullable=False, index=True)
    name = Column("nombre_autoridad", String(200), nullable=False)
    title = Column("cargo_autoridad", String(200), nullable=False)
    position = Column("orden_firma", Integer, nullable=False)
    status = Column("estado", String(20), nullable=False, default="ACTIVO")  # ACTIVO, INACTIVO
    created_at = Column("created_at", DateTime(timezone=True), server_default=func.now())
    updated_at = Column("updated_at", DateTime(timezone=True), onupdate=func.now())
