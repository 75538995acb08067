"""Price computation and parsing of numeric values received in URL paths."""

import math
import re
from typing import Final

from price_calculator.core.exceptions import ValidationError

_HEX_DIGITS: Final[str] = r"[0-9a-f](?:_?[0-9a-f])*"

# Decimal literal; no whitespace or digit separators
_DECIMAL_LITERAL: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?", re.IGNORECASE
)
# Hex mantissa with a mandatory binary exponent; "_" only between digits
# or right after the 0x prefix
_HEX_LITERAL: Final[re.Pattern[str]] = re.compile(
    rf"[+-]?0x(?:_?{_HEX_DIGITS}(?:\.(?:{_HEX_DIGITS})?)?|\.{_HEX_DIGITS})"
    r"p[+-]?\d(?:_?\d)*",
    re.IGNORECASE,
)
# Only infinity may carry a sign
_SPECIAL_LITERAL: Final[re.Pattern[str]] = re.compile(
    r"[+-]?inf(?:inity)?|nan", re.IGNORECASE
)


def compute_total(base_price: float, tax_rate: float) -> float:
    """Compute the total price for a base price and a percentage tax rate.

    No rounding or clamping is applied; negative and non-finite inputs pass
    through unchanged.

    Examples:
        >>> compute_total(100.0, 20.0)
        120.0
        >>> compute_total(50.0, 0.0)
        50.0
    """
    return base_price + base_price * tax_rate / 100


def _invalid(field: str, raw: str, reason: str) -> ValidationError:
    return ValidationError(
        f"Invalid {field}",
        context={"field": field, "value": raw, "reason": reason},
    )


def parse_price_value(raw: str, field: str = "value") -> float:
    """Parse a path segment as a floating-point number.

    Accepts decimal literals with optional sign, fraction and exponent,
    hexadecimal literals with a ``p`` exponent (``0x1.8p1``, ``_`` allowed
    between hex digits), ``inf`` and ``infinity`` with optional sign, and
    unsigned ``nan``, all in any case.

    Args:
        raw: Text taken from the request path.
        field: Human-readable name of the configuration field, used in the
            error message.

    Returns:
        float: The parsed value.

    Raises:
        ValidationError: If the text is not a number or a finite literal is
            too large to represent.
    """
    if _HEX_LITERAL.fullmatch(raw):
        try:
            return float.fromhex(raw.replace("_", ""))
        except OverflowError as exc:
            raise _invalid(field, raw, "out of range") from exc

    if _SPECIAL_LITERAL.fullmatch(raw):
        return float(raw)

    if not _DECIMAL_LITERAL.fullmatch(raw):
        raise _invalid(field, raw, "not a number")

    value = float(raw)
    if math.isinf(value):
        raise _invalid(field, raw, "out of range")
    return value
