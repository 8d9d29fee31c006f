"""Number formatting for monetary placeholders.

Values are rendered either fully (``1,234,567``) or truncated with a
magnitude suffix (``1.23M``). Both forms group thousands with a comma, use a
dot as decimal separator regardless of the process locale, and keep at most
two fractional digits.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, localcontext

THOUSAND = 1_000.0
MILLION = 1_000_000.0
BILLION = 1_000_000_000.0
TRILLION = 1_000_000_000_000.0

# (upper bound, divisor, suffix); values at or past the last bound use trillions
TRUNCATION_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (MILLION, THOUSAND, "K"),
    (BILLION, MILLION, "M"),
    (TRILLION, BILLION, "B"),
)

_TWO_PLACES = Decimal("0.01")


def format_readable(value: float | int | Decimal) -> str:
    """Format a number with comma grouping and up to two decimals.

    Rounds half-even on the exact value of the number, so ``0.015`` (stored
    as 0.01499...) renders as ``0.01``.

    Examples:
        ``1000`` -> ``1,000``; ``1000000000`` -> ``1,000,000,000``;
        ``1234.5`` -> ``1,234.5``.
    """
    number = value if isinstance(value, Decimal) else Decimal(value)

    if number.is_nan():
        return "NaN"
    if number.is_infinite():
        return "-∞" if number < 0 else "∞"

    with localcontext() as ctx:
        ctx.prec = 400
        rounded = number.quantize(_TWO_PLACES, rounding=ROUND_HALF_EVEN)

    text = f"{rounded:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_truncated(value: float | int) -> str:
    """Format a number with a K/M/B/T magnitude suffix.

    Anything below a million, including values under a thousand, is
    expressed in thousands.

    Examples:
        ``1000`` -> ``1K``; ``500`` -> ``0.5K``; ``1234567`` -> ``1.23M``;
        ``1234567890.12`` -> ``1.23B``.
    """
    number = float(value)
    for bound, divisor, suffix in TRUNCATION_BUCKETS:
        if number < bound:
            return format_readable(number / divisor) + suffix
    return format_readable(number / TRILLION) + "T"


def format_value(value: float | int, truncate: bool) -> str:
    """Format a monetary value according to the truncation preference."""
    if truncate:
        return format_truncated(value)
    return format_readable(value)
