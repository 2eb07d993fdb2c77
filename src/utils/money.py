from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


def to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    s = str(value).strip()
    if not s:
        return None
    s = s.replace(",", "").replace("$", "")
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None


def sum_amounts(values: Any) -> float:
    """Sum amounts in Decimal so 0.1 + 0.2 style drift does not show up in totals."""
    total = Decimal("0")
    for v in values:
        d = to_decimal(v)
        if d is not None:
            total += d
    return float(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_usd(value: Any, digits: int = 2, dash: str = "-") -> str:
    """
    Render an expense amount or total for the templates, e.g. 1234.5 -> "$1,234.50".

    Missing amounts show `dash`; text that is not a number passes through unchanged.
    """
    d = to_decimal(value)
    if d is None:
        if value is None:
            return dash
        s = str(value).strip()
        return s if s else dash

    digits = max(0, int(digits))
    q = Decimal(1) if digits == 0 else Decimal("1").scaleb(-digits)
    d = d.quantize(q, rounding=ROUND_HALF_UP)

    sign = "-" if d < 0 else ""
    d_abs = -d if d < 0 else d
    return f"{sign}${d_abs:,.{digits}f}"
