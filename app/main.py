# app/main.py
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import exc as sa_exc

from app.config import settings
from app.core.exceptions import EvaluationSystemError
from app.core.logging import configure_logging, kv
from app.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.database import Base, write_engine
from app.models import coordinator, evaluation, peer_assignment, signatory  # noqa: F401  (register tables on Base.metadata)
from app.routers import (
    access,
    auth,
    career_report,
    coordinators,
    evaluations,
    filters,
    forms,
    grade_reports,
    peer_assignments,
    signatories,
    teacher_report,
)
from app.utils.sanitize import sanitize

configure_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(title="ISTLA - Sistema de Evaluación Docente", version="1.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS, security headers, logging, rate limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.exception_handler(EvaluationSystemError)
async def evaluation_error_handler(request: Request, exc: EvaluationSystemError):
    logger.warning("domain error %s", kv(code=exc.error_code, path=request.url.path, detail=exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error_code": exc.error_code, "message": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    # echoed input is escaped before it goes back to the client
    for error in errors:
        if "input" in error:
            error["input"] = sanitize(error["input"])
    return JSONResponse(status_code=422, content={"detail": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error %s", kv(method=request.method, path=request.url.path))
    return JSONResponse(
        status_code=500,
        content={
            "error": "Error interno del servidor",
            "status": 500,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# Include Routers
for module in (
    auth, access, forms, evaluations, coordinators, filters, career_report, grade_reports,
    peer_assignments, signatories, teacher_report,
):
    app.include_router(module.router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    if not settings.is_development:
        return
    # create tables in development (use Alembic elsewhere), ignore leftovers of partial runs
    async with write_engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.OperationalError as e:
            msg = str(getattr(e, "orig", e))
            if "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise


@app.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
    }


@app.get("/")
def read_root():
    return {"message": "API del Sistema de Evaluación Docente ISTLA"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
