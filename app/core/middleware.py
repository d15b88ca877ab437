# app/core/middleware.py
import logging
import time
from urllib.parse import unquote_plus

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.logging import kv
from app.core.rate_limit import get_client_ip
from app.utils.sanitize import find_suspicious

logger = logging.getLogger("app.security")

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: https:",
    "font-src 'self'",
    "connect-src 'self'",
    "frame-ancestors 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Cross-Origin-Resource-Policy": "cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request, level by status class."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        event = dict(
            ip=get_client_ip(request),
            method=request.method,
            path=request.url.path,
            user_agent=request.headers.get("user-agent"),
            referer=request.headers.get("referer"),
            content_type=request.headers.get("content-type"),
            content_length=request.headers.get("content-length"),
        )

        target = unquote_plus(request.url.path + "?" + request.url.query)
        pattern = find_suspicious(target)
        if pattern:
            logger.warning("suspicious request %s", kv(pattern=pattern, **event))

        response = await call_next(request)

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        line = kv(status=response.status_code, duration_ms=duration_ms, **event)
        if response.status_code >= 500:
            logger.error("request failed %s", line)
        elif response.status_code >= 400:
            logger.warning("request rejected %s", line)
        else:
            logger.info("request %s", line)
        return response
