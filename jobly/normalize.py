"""
Value normalization helpers.

Canonical forms for company handles and equity values, shared by payload
validation and the repositories.
"""

import re
from decimal import Context, Decimal, InvalidOperation
from typing import Any, Optional

HANDLE_RE = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")


def is_handle(value: Any) -> bool:
    return isinstance(value, str) and len(value) <= 25 and bool(HANDLE_RE.match(value))


def to_decimal(value: Any) -> Optional[Decimal]:
    """Decimal from str/int/float/Decimal; None if it is not a finite number.

    Floats go through str() so 0.45 becomes Decimal("0.45"), not the binary
    expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = str(value)
    try:
        d = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return d if d.is_finite() else None


def decimal_str(value: Any) -> Optional[str]:
    """Canonical decimal string: no exponent, no trailing zeros ("0.450" -> "0.45").

    Every significant digit of the input is kept.
    """
    d = to_decimal(value)
    if d is None:
        return None
    exact = Context(prec=max(len(d.as_tuple().digits), 1))
    text = format(d.normalize(exact), "f")
    return "0" if text in ("-0", "") else text
