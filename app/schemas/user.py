from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    correo: EmailStr
    cedula: str = Field(..., min_length=5, max_length=20, pattern=r"^[0-9A-Za-z-]+$")


class TokenUser(BaseModel):
    id: int
    correo: str | None = None
    cedula: str | None = None
    rol: int


class Token(BaseModel):
    access_token: str
    token_type: str
    user: TokenUser
