from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from app.utils.sanitize import CleanStr


class SignatoryCreate(BaseModel):
    nombre_autoridad: CleanStr = Field(..., min_length=2, max_length=200)
    cargo_autoridad: CleanStr = Field(..., min_length=2, max_length=200)
    # next free position when omitted
    orden_firma: Optional[int] = Field(None, gt=0)


class SignatoryResponse(BaseModel):
    id_autoridad: int
    nombre_autoridad: str
    cargo_autoridad: str
    orden_firma: int
    estado: str
    created_at: Optional[datetime] = None


class SignatoryList(BaseModel):
    success: bool = True
    data: List[SignatoryResponse]


class SignatoryOrder(BaseModel):
    id_autoridad: int = Field(..., gt=0)
    orden_firma: int = Field(..., gt=0)


class SignatoryOrderUpdate(BaseModel):
    actualizaciones: List[SignatoryOrder] = Field(..., min_length=1)
