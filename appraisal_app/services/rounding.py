from decimal import Decimal, ROUND_HALF_UP

from appraisal_app.utils import parse_number

CENT = Decimal('0.01')
ZERO = Decimal('0')


def _d(x) -> Decimal:
    """Convert to Decimal safely; None, blank and non-numeric values count as zero."""
    if isinstance(x, Decimal):
        return x if x.is_finite() else ZERO
    number = parse_number(x)
    if number is None:
        return ZERO
    return Decimal(str(number))


def round_int(x) -> int:
    """Round half-up to a whole number."""
    return int(_d(x).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def round2(x) -> float:
    """Round half-up to 2 decimal places."""
    return float(_d(x).quantize(CENT, rounding=ROUND_HALF_UP))


def fixed2(x) -> str:
    """2-decimal string form, e.g. '95.00'."""
    return str(_d(x).quantize(CENT, rounding=ROUND_HALF_UP))
