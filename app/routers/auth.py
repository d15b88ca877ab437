# app/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from app.config import settings
from app.core.auth import get_current_user
from app.core.logging import kv
from app.core.rate_limit import get_client_ip, limiter
from app.core.security import create_access_token
from app.dependencies import get_institute_repository
from app.repositories.institute import InstituteRepository
from app.schemas.user import LoginRequest, Token, TokenUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    credentials: LoginRequest,
    repo: InstituteRepository = Depends(get_institute_repository),
):
    user = await repo.find_user(credentials.correo, credentials.cedula)
    if not user:
        logger.warning("login failed %s", kv(correo=credentials.correo, ip=get_client_ip(request)))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_user = TokenUser(id=user["id"], correo=user["correo"], cedula=user["cedula"], rol=user["rol"])
    access_token = create_access_token({
        "sub": str(token_user.id),
        "correo": token_user.correo,
        "cedula": token_user.cedula,
        "rol": token_user.rol,
    })
    logger.info("login %s", kv(usuario=token_user.id, rol=token_user.rol))
    return Token(access_token=access_token, token_type="bearer", user=token_user)


@router.get("/me", response_model=TokenUser)
async def read_users_me(current_user: TokenUser = Depends(get_current_user)):
    return current_user
