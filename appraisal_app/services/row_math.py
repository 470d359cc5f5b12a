import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Tuple, Union

from appraisal_app.constants import MONTH_KEYS, KpiCalcType
from appraisal_app.services.appraisal_types import (
    KpiMode, ParMode, PerformanceRow, RowMode, StandardMode,
)
from appraisal_app.services.period_months import active_month_keys
from appraisal_app.services.rounding import ZERO, _d, fixed2, round2, round_int
from appraisal_app.services.weight_scale import resolve_weight
from appraisal_app.utils import parse_number

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')
HALF = Decimal('0.5')


# ---------- Per-month percent ----------

def kpi_raw_percent(calc_type: str, target: Decimal, actual: Decimal) -> Decimal:
    """
    Unrounded KPI percent for one month.

    - PERCENTAGE_WEIGHTED: actual × target / 100
    - TARGET_RATIO:        actual / target × 100 (0 when target <= 0)
    - COMPLIANCE:          100 once actual reaches target, otherwise the
                           plain ratio; with target <= 0 it is all-or-nothing
    """
    if calc_type == KpiCalcType.TARGET_RATIO:
        return actual / target * HUNDRED if target > 0 else ZERO

    if calc_type == KpiCalcType.COMPLIANCE:
        if target <= 0:
            return HUNDRED if actual >= target else ZERO
        if actual >= target:
            return HUNDRED
        return actual / target * HUNDRED

    return actual * target / HUNDRED


def month_percent(mode: RowMode, target, actual) -> Union[int, str]:
    """
    Percent shown under one month. Standard and PAR are whole numbers,
    KPI is a 2-decimal string (e.g. "87.50").
    """
    target, actual = _d(target), _d(actual)

    if isinstance(mode, KpiMode):
        return fixed2(kpi_raw_percent(mode.calc_type, target, actual))

    if isinstance(mode, ParMode):
        # inverted: lower actual against target is better
        if target > 0 and actual > 0:
            return round_int(target / actual * HUNDRED)
        return 0

    return round_int(actual / target * HUNDRED) if target > 0 else 0


# ---------- Totals ----------

def month_sums(row: PerformanceRow, keys: Iterable[str]) -> Tuple[Decimal, Decimal]:
    target_sum, actual_sum = ZERO, ZERO
    for key in keys:
        entry = row.month(key)
        target_sum += _d(entry.target)
        actual_sum += _d(entry.actual)
    return target_sum, actual_sum


def resolve_totals(mode: RowMode, target_sum: Decimal, actual_sum: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Row totals from the active-month sums.

    - PAR: target total is rounded only when |total| >= 0.5; smaller
      fractional totals are kept as they are.
    - KPI: operator overrides win as soon as one is present and non-zero;
      a missing override falls back to its month sum.
    """
    if isinstance(mode, ParMode):
        target_total = target_sum if abs(target_sum) < HALF else Decimal(round_int(target_sum))
        return target_total, actual_sum

    if isinstance(mode, KpiMode):
        target_override = parse_number(mode.target_total_override)
        actual_override = parse_number(mode.actual_total_override)
        if not (target_override or actual_override):
            return target_sum, actual_sum
        target_total = _d(target_override) if target_override is not None else target_sum
        actual_total = _d(actual_override) if actual_override is not None else actual_sum
        return target_total, actual_total

    return target_sum, actual_sum


def percent_achieved(mode: RowMode, target_total: Decimal, actual_total: Decimal) -> int:
    if isinstance(mode, ParMode):
        if target_total > 0 and actual_total > 0:
            return round_int(target_total / actual_total * HUNDRED * _d(mode.par_weight))
        return 0

    # Standard and KPI share the plain ratio (KPI on its possibly overridden totals)
    if target_total > 0:
        return round_int(actual_total / target_total * HUNDRED)
    return 0


# ---------- Public API ----------

def recalc_row(row: PerformanceRow, active_months) -> PerformanceRow:
    """
    Return a copy of `row` with every derived field recomputed:

    1) month_percent for all twelve months (inactive months are still
       shown, they just do not count toward totals)
    2) target_total / actual_total over the active months
    3) percent_achieved, actual_rating = percent_achieved
    4) weight from the 1..6 scale, weighted_average = percent × weight (2dp)

    The input row is never modified.
    """
    mode = row.mode
    if not isinstance(mode, (StandardMode, ParMode, KpiMode)):
        mode = StandardMode()

    percents = {
        key: month_percent(mode, row.month(key).target, row.month(key).actual)
        for key in MONTH_KEYS
    }

    keys = active_month_keys(active_months)
    target_total, actual_total = resolve_totals(mode, *month_sums(row, keys))
    achieved = percent_achieved(mode, target_total, actual_total)
    weight = resolve_weight(achieved)

    logger.debug(
        "Recalculated %s row %r: %s%% achieved, weight %s",
        mode.kind, row.key_result_area, achieved, weight,
    )

    return replace(
        row,
        mode=mode,
        month_percent=percents,
        target_total=float(target_total),
        actual_total=float(actual_total),
        percent_achieved=achieved,
        actual_rating=achieved,
        weight=weight,
        weighted_average=round2(achieved * weight),
    )


def recalc_rows(rows: Iterable[PerformanceRow], active_months) -> Tuple[PerformanceRow, ...]:
    keys = active_month_keys(active_months)
    return tuple(recalc_row(row, keys) for row in rows)
