from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from appraisal_app.constants import CANONICAL_SECTION_NAMES
from appraisal_app.services.appraisal_types import PerformanceRow, PerformanceSection
from appraisal_app.services.rounding import _d, round2
from appraisal_app.services.row_math import recalc_rows


def _normalize(name) -> str:
    return str(name or "").strip().lower()


def canonical_section_name(name) -> Optional[str]:
    """The template spelling of `name`, or None when it is not one of the three."""
    key = _normalize(name)
    for canonical in CANONICAL_SECTION_NAMES:
        if _normalize(canonical) == key:
            return canonical
    return None


def section_subtotals(rows: Iterable[PerformanceRow]) -> Tuple[int, float]:
    """
    (sum of row weights, sum of row weighted averages).
    Every row counts, including blank placeholder rows.
    """
    total_weight = 0
    total_weighted = Decimal('0')
    for row in rows:
        total_weight += int(row.weight or 0)
        total_weighted += _d(row.weighted_average)
    return total_weight, round2(total_weighted)


def recalc_section(section: PerformanceSection, active_months=None) -> PerformanceSection:
    """
    Re-derive the section subtotals. When `active_months` is given the rows
    are first recalculated against it, so a period change flows through.
    """
    rows = tuple(section.rows)
    if active_months is not None:
        rows = recalc_rows(rows, active_months)
    subtotal_weight, subtotal_weighted_average = section_subtotals(rows)
    return replace(
        section,
        rows=rows,
        subtotal_weight=subtotal_weight,
        subtotal_weighted_average=subtotal_weighted_average,
    )


def recalc_sections(sections: Iterable[PerformanceSection], active_months=None) -> List[PerformanceSection]:
    return [recalc_section(section, active_months) for section in sections]


def build_section_templates() -> List[PerformanceSection]:
    """The three Section B categories, each with one blank row, for a new appraisal."""
    return [PerformanceSection(name=name, rows=(PerformanceRow(),)) for name in CANONICAL_SECTION_NAMES]
