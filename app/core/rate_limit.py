# app/core/rate_limit.py
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from app.config import settings

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """
    Client IP from X-Real-IP, then the first X-Forwarded-For hop,
    then the socket peer.
    """
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


limiter = Limiter(key_func=get_client_ip, default_limits=[settings.RATE_LIMIT_DEFAULT])


def retry_after_seconds(limit_value: str) -> int:
    item = parse(limit_value)
    return item.get_expiry()


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    limit = getattr(exc, "limit", None)
    window = limit.limit.get_expiry() if limit is not None else retry_after_seconds(settings.RATE_LIMIT_DEFAULT)
    logger.warning("rate limit exceeded ip=%s path=%s limit=%s", get_client_ip(request), request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit excedido",
            "message": "Demasiadas solicitudes desde esta IP",
            "retryAfter": window,
        },
        headers={"Retry-After": str(window)},
    )
