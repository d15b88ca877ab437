from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.utils.sanitize import CleanStr


class EvaluationCreate(BaseModel):
    id_formulario: int
    id_periodo: int
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None
    estado: str = Field("activa", pattern="^(activa|inactiva|completada)$")

    @model_validator(mode="after")
    def check_dates(self):
        if self.fecha_inicio and self.fecha_fin and self.fecha_fin < self.fecha_inicio:
            raise ValueError("fecha_fin debe ser posterior a fecha_inicio")
        return self


class EvaluationUpdate(BaseModel):
    id_formulario: Optional[int] = None
    id_periodo: Optional[int] = None
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None
    fecha_notificacion: Optional[datetime] = None
    estado: Optional[str] = Field(None, pattern="^(activa|inactiva|completada)$")


class EvaluationResponse(BaseModel):
    id_evaluacion: int
    id_formulario: int
    nombre_formulario: Optional[str] = None
    id_periodo: int
    fecha_inicio: Optional[datetime]
    fecha_fin: Optional[datetime]
    fecha_notificacion: Optional[datetime] = None
    estado: str


class AnswerIn(BaseModel):
    id_pregunta: int
    respuesta: CleanStr = Field(..., min_length=1, max_length=2000)


class SubmissionCreate(BaseModel):
    id_distributivo: int
    evaluado_id: Optional[int] = None
    respuestas: List[AnswerIn] = Field(..., min_length=1)


class SubmissionResponse(BaseModel):
    id_evaluacion: int
    id_distributivo: int
    respuestas_guardadas: int
    estado: str


class AuthorityEvaluationCreate(BaseModel):
    id_periodo: int
    id_docente_evaluado: int
    id_carrera: Optional[int] = None
    calificacion: Decimal = Field(..., ge=0, le=100, decimal_places=2)
    observaciones: Optional[CleanStr] = Field(None, max_length=2000)


class AuthorityEvaluationResponse(BaseModel):
    id_evaluacion_autoridad: int
    id_periodo: int
    id_docente_evaluado: int
    id_carrera: Optional[int]
    calificacion: float
    evaluador_cedula: str
    observaciones: Optional[str]
    accion: Optional[str] = None
