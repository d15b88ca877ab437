from pydantic import BaseModel, Field
from typing import Optional

from app.utils.sanitize import CleanStr


class FormCreate(BaseModel):
    nombre: CleanStr = Field(..., min_length=3, max_length=255)


class FormResponse(BaseModel):
    id_formulario: int
    nombre: str


class QuestionCreate(BaseModel):
    id_formulario: int
    texto: CleanStr = Field(..., min_length=3)
    tipo_pregunta: str = Field("escala", pattern="^(escala|texto)$")


class QuestionUpdate(BaseModel):
    texto: Optional[CleanStr] = Field(None, min_length=3)
    tipo_pregunta: Optional[str] = Field(None, pattern="^(escala|texto)$")


class QuestionResponse(BaseModel):
    id_pregunta: int
    id_formulario: int
    texto: str
    tipo_pregunta: str
