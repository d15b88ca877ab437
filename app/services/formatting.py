import re
import unicodedata
from datetime import date
from typing import List

HONORIFIC = "Ing."
OFFICE_PREFIX = "ISTLA-VR"

_HONORIFIC_RE = re.compile(r"^Ing\.\s*", re.IGNORECASE)

SPANISH_MONTHS = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def upper_name(full_name: str) -> str:
    return strip_honorific(full_name).upper()


def strip_honorific(full_name: str) -> str:
    return _HONORIFIC_RE.sub("", full_name).strip()


def title_case(text: str) -> str:
    """Lowercase every token, then uppercase its first character."""
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split())


def titled_name(full_name: str) -> str:
    """'Ing. JUAN pérez' -> 'Ing. Juan Pérez'"""
    return f"{HONORIFIC} {title_case(strip_honorific(full_name))}"


def office_number(year: int, start: int, position: int) -> str:
    return f"{OFFICE_PREFIX}-{year}-{start + position}-O"


def office_numbers(year: int, start: int, count: int) -> List[str]:
    return [office_number(year, start, i) for i in range(count)]


def long_spanish_date(day: date) -> str:
    # 05 de octubre de 2026
    return f"{day.day:02d} de {SPANISH_MONTHS[day.month - 1]} de {day.year}"


def report_filename(prefix: str, label: str, day: date, extension: str) -> str:
    ascii_label = unicodedata.normalize("NFKD", label).encode("ascii", "ignore").decode("ascii")
    safe = re.sub(r"\s+", "_", ascii_label.strip())
    safe = re.sub(r"[^\w\-]", "", safe)
    return f"{prefix}_{safe}_{day.isoformat()}.{extension}"
