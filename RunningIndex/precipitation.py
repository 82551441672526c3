"""Precipitation value parsing for KMA RN1/PCP fields."""
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

NO_PRECIP = "강수없음"  # "no precipitation"
LESS_THAN = "미만"  # "less than", e.g. "1mm 미만"

# KMA fills unobserved values with markers such as -998.9 or 999
MISSING_MARKER_LIMIT = 900

_NON_NUMERIC = re.compile(r"[^0-9.]")


@dataclass(frozen=True)
class PrecipAmount:
    mm: float


@dataclass(frozen=True)
class Unparseable:
    raw: str


PrecipResult = Union[PrecipAmount, Unparseable]


def is_missing_marker(value: float) -> bool:
    """True for KMA's out-of-range fill values (<= -900 or >= 900)."""
    return value <= -MISSING_MARKER_LIMIT or value >= MISSING_MARKER_LIMIT


def parse_precipitation(raw: Any) -> Optional[PrecipResult]:
    """
    Parse a precipitation value that may be numeric or descriptive text.

    KMA reports amounts such as "1.5", "2.0mm", "강수없음" or "1mm 미만".
    Descriptive "none" and "below 1 mm" both map to 0. Missing-value
    markers are treated as absent.

    Args:
        raw: Value as found in the provider payload

    Returns:
        PrecipAmount, Unparseable, or None when the value is absent
    """
    if raw is None:
        return None

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return _amount(float(raw), raw)

    text = str(raw).strip()
    if not text:
        return None
    if NO_PRECIP in text or LESS_THAN in text:
        return PrecipAmount(0.0)

    try:
        value = float(text)
    except ValueError:
        # Unit suffixes such as "2.0mm" or "50.0mm 이상"
        try:
            value = float(_NON_NUMERIC.sub("", text))
        except ValueError:
            return _unparseable(raw)
    return _amount(value, raw)


def _amount(value: float, raw: Any) -> Optional[PrecipResult]:
    if not math.isfinite(value):
        return _unparseable(raw)
    if is_missing_marker(value):
        logging.debug(f"Treating KMA missing marker {raw!r} as absent")
        return None
    return PrecipAmount(value)


def _unparseable(raw: Any) -> Unparseable:
    logging.warning(f"Unparseable precipitation value: {raw!r}")
    return Unparseable(str(raw))


def precipitation_mm(raw: Any) -> Optional[float]:
    """Amount in mm, or None when absent or unparseable."""
    result = parse_precipitation(raw)
    if isinstance(result, PrecipAmount):
        return result.mm
    return None
