# app/core/auth.py
from typing import FrozenSet
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError

from app.core.security import decode_access_token
from app.schemas.user import TokenUser

# Profile ids (SEGURIDAD_USUARIOS.ID_PERFILES_USUARIOS)
ADMIN: FrozenSet[int] = frozenset({12, 18})
TEACHER: FrozenSet[int] = frozenset({13, 15})
COORDINATOR: FrozenSet[int] = frozenset({1, 17})
STUDENT: FrozenSet[int] = frozenset({14})

reusable_oauth2 = HTTPBearer()


async def get_current_user(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> TokenUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token inválido o expirado",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token.credentials)
        if payload.get("sub") is None:
            raise credentials_exception
        return TokenUser(
            id=int(payload["sub"]),
            correo=payload.get("correo"),
            cedula=payload.get("cedula"),
            rol=int(payload.get("rol")),
        )
    except (JWTError, ValidationError, TypeError, ValueError):
        raise credentials_exception


def require_roles(*groups: FrozenSet[int]):
    allowed = frozenset().union(*groups)

    async def checker(current_user: TokenUser = Depends(get_current_user)) -> TokenUser:
        if current_user.rol not in allowed:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Acceso denegado, rol no autorizado")
        return current_user

    return checker


get_current_admin = require_roles(ADMIN)
