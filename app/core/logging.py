# app/core/logging.py
import logging

from app.config import settings

LOG_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # SQL echo is controlled by SQL_ECHO, keep the engine logger quiet otherwise
    if not settings.SQL_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def kv(**fields) -> str:
    """Render fields as key=value pairs for one-line structured logs."""
    parts = []
    for key, value in fields.items():
        if value is None:
            continue
        text = str(value)
        if " " in text or "=" in text:
            text = '"' + text.replace('"', "'") + '"'
        parts.append(f"{key}={text}")
    return " ".join(parts)
