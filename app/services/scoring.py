"""
Normalization and weighting of the four evaluation scores.

Everything here is pure: no I/O, and ``normalize``/``weighted_components``/
``composite`` never raise for any input.
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Dict

from app.schemas.report import ScoreSet, WeightedScores

# Auto 10%, Hetero 40%, Co 30%, Autoridades 20%
WEIGHTS: Dict[str, float] = {
    "self_score": 0.10,
    "hetero_score": 0.40,
    "co_score": 0.30,
    "authority_score": 0.20,
}

# (upper bound inclusive, label)
RATING_SCALE = (
    (20, "Deficiente"),
    (30, "Regular"),
    (50, "Buena"),
    (85, "Muy buena"),
    (100, "Excelente"),
)

_CENT = Decimal("0.01")
# enough digits to quantize any finite float (max exponent 308) to cents
_QUANTIZE_PREC = 400


def normalize(value: Any) -> float:
    """Finite number or numeric string -> float; anything else -> 0.0. Not clamped."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, InvalidOperation, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def normalize_scores(raw: ScoreSet) -> WeightedScores:
    return WeightedScores(**{field: normalize(getattr(raw, field)) for field in WEIGHTS})


def weighted_components(components: WeightedScores) -> WeightedScores:
    return WeightedScores(**{field: getattr(components, field) * weight for field, weight in WEIGHTS.items()})


def composite(components: WeightedScores) -> float:
    # full precision, rounding happens at presentation
    return sum(getattr(components, field) * weight for field, weight in WEIGHTS.items())


def round_score(value: float) -> float:
    """Half-up rounding to 2 decimals, as shown on the reports."""
    if not math.isfinite(value):
        return value
    with localcontext() as ctx:
        ctx.prec = _QUANTIZE_PREC
        return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def format_score(value: float) -> str:
    return f"{round_score(value):.2f}"


def rating_label(score: float) -> str:
    rounded = round_score(normalize(score))
    for upper, label in RATING_SCALE:
        if rounded <= upper:
            return label
    return RATING_SCALE[-1][1]
