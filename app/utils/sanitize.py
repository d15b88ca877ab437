# app/utils/sanitize.py
import re
from typing import Annotated, Any

from pydantic import BeforeValidator

# "&" must go first so the entities below are not escaped twice
_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
    ("\\", "&#x5C;"),
)

SUSPICIOUS_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"<script",
        r"javascript:",
        r"on\w+\s*=",
        r"union\s+select",
        r"drop\s+table",
        r"insert\s+into",
        r"delete\s+from",
        r"update\s+set",
        r"exec\s*\(",
        r"eval\s*\(",
        r"document\.cookie",
        r"alert\s*\(",
        r"confirm\s*\(",
        r"prompt\s*\(",
    )
]


def escape_html(value: str) -> str:
    for char, entity in _REPLACEMENTS:
        value = value.replace(char, entity)
    return value


def sanitize(data: Any) -> Any:
    """Escape every string inside nested dicts/lists; other values pass through."""
    if isinstance(data, str):
        return escape_html(data)
    if isinstance(data, dict):
        return {key: sanitize(value) for key, value in data.items()}
    if isinstance(data, list):
        return [sanitize(item) for item in data]
    return data


def find_suspicious(text: str) -> str | None:
    for pattern in SUSPICIOUS_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


# Free-text request fields
CleanStr = Annotated[str, BeforeValidator(lambda v: escape_html(v.strip()) if isinstance(v, str) else v)]
