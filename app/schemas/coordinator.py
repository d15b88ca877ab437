from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import List, Optional

from app.utils.sanitize import CleanStr


class CoordinatorAssignmentCreate(BaseModel):
    cedula: str = Field(..., min_length=5, max_length=20, pattern=r"^[0-9A-Za-z-]+$")
    nombres: CleanStr = Field(..., min_length=2, max_length=150)
    apellidos: CleanStr = Field(..., min_length=2, max_length=150)
    correo: EmailStr
    id_carrera: int = Field(..., gt=0)


class CoordinatorAssignmentResponse(BaseModel):
    id_coordinador_carrera: int
    cedula_coordinador: str
    nombres_coordinador: str
    apellidos_coordinador: str
    correo_coordinador: str
    id_carrera: int
    nombre_carrera: str
    estado: str
    fecha_asignacion: Optional[datetime]


class CoordinatorCandidate(BaseModel):
    cedula: str
    apellidos: Optional[str]
    nombres: Optional[str]
    correo: Optional[str]


class CareerOption(BaseModel):
    id_carrera: int
    nombre_carrera: str


class SelectOptionsResponse(BaseModel):
    coordinadores: List[CoordinatorCandidate]
    carreras: List[CareerOption]
