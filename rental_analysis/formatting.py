"""
Display formatting and numeric input parsing.
"""

import math
import re
from typing import Any, Optional

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_currency(value: Optional[float]) -> str:
    """Format as US dollars with cents, e.g. $1,234.56 or -$50.00."""
    if _is_missing(value):
        return "$0.00"
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_percentage(value: Optional[float], decimals: int = 1) -> str:
    if _is_missing(value):
        value = 0.0
    return f"{value:.{decimals}f}%"


def format_number(value: Optional[float], decimals: int = 2) -> str:
    if _is_missing(value):
        value = 0.0
    return f"{value:,.{decimals}f}"


def parse_numeric_input(value: Any, fallback: float = 0.0) -> float:
    """
    Parse a form value the way a browser's parseFloat does.

    Leading whitespace is skipped and the longest numeric prefix is used,
    so "12abc" is 12. Anything without a numeric prefix gives the fallback,
    as do values outside float range such as "1e999".
    """
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return fallback
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return fallback
        number = float(match.group(1))
    else:
        return fallback

    return number if math.isfinite(number) else fallback


def clamp_value(value: float, minimum: float, maximum: float) -> float:
    return min(max(value, minimum), maximum)
