from typing import Iterable, Optional, Tuple

from appraisal_app.constants import MONTHS, MONTHS_BY_KEY, PeriodMonth, PeriodType
from appraisal_app.utils import normalize_period_type

QUARTER_MONTHS = {
    1: ("jan", "feb", "mar"),
    2: ("apr", "may", "jun"),
    3: ("jul", "aug", "sep"),
    4: ("oct", "nov", "dec"),
}

HALF_MONTHS = {
    1: ("jan", "feb", "mar", "apr", "may", "jun"),
    2: ("jul", "aug", "sep", "oct", "nov", "dec"),
}


def _selector(value) -> Optional[int]:
    """Accepts 2, "2", "Q2", "H2"; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().upper()
    if text[:1] in ("Q", "H"):
        text = text[1:]
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


def resolve_active_months(period_type, quarter=None, half=None) -> Tuple[PeriodMonth, ...]:
    """
    Months that count toward totals for a reporting period, in calendar order.

    - Quarterly: the selected quarter's three months (unknown quarter -> Q1)
    - Semi-annually: the selected half's six months (unknown half -> H1)
    - Annual, or any other period type: all twelve months
    """
    resolved = normalize_period_type(period_type)

    if resolved == PeriodType.QUARTERLY:
        keys = QUARTER_MONTHS.get(_selector(quarter), QUARTER_MONTHS[1])
    elif resolved == PeriodType.SEMI_ANNUALLY:
        keys = HALF_MONTHS.get(_selector(half), HALF_MONTHS[1])
    else:
        return MONTHS

    return tuple(MONTHS_BY_KEY[k] for k in keys)


def active_month_keys(active_months: Optional[Iterable]) -> Tuple[str, ...]:
    """
    Normalise an active month set to its keys. Accepts PeriodMonth tuples,
    {"key": ...} dicts or bare keys, so API payloads can be passed straight in.
    """
    keys = []
    for month in active_months or ():
        if isinstance(month, PeriodMonth):
            key = month.key
        elif isinstance(month, dict):
            key = month.get("key")
        else:
            key = month
        key = str(key or "").strip().lower()
        if key in MONTHS_BY_KEY and key not in keys:
            keys.append(key)
    return tuple(keys)
