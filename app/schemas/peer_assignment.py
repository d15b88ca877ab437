from pydantic import BaseModel, Field
from datetime import date, time
from typing import List, Optional

from app.utils.sanitize import CleanStr


class PeerAssignmentCreate(BaseModel):
    id_periodo: int = Field(..., gt=0)
    id_docente_evaluador: int = Field(..., gt=0)
    id_docente_evaluado: int = Field(..., gt=0)
    id_asignatura: Optional[int] = Field(None, gt=0)
    fecha: Optional[date] = None
    hora_inicio: Optional[time] = None
    hora_fin: Optional[time] = None
    dia: Optional[CleanStr] = Field(None, max_length=20)


class PeerAssignmentResponse(BaseModel):
    id_asignacion: int
    id_periodo: int
    id_docente_evaluador: int
    nombre_evaluador: str
    id_docente_evaluado: int
    nombre_evaluado: str
    id_asignatura: Optional[int]
    nombre_asignatura: Optional[str]
    fecha: Optional[date]
    hora_inicio: Optional[time]
    hora_fin: Optional[time]
    dia: Optional[str]


class PeerAssignmentCreated(BaseModel):
    success: bool = True
    message: str = "Asignación creada exitosamente"
    id_asignacion: int


class PeerTeacher(BaseModel):
    id_docente: int
    nombre: str


class PeerTeacherList(BaseModel):
    success: bool = True
    total: int
    data: List[PeerTeacher]
