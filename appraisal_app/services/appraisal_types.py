"""
In-memory value types the scoring engine works on.

Everything here is immutable; the math services return new instances via
`dataclasses.replace` instead of mutating their arguments. Callers (the
form / API layer) own editing and history.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from appraisal_app.constants import MONTH_KEYS, KpiCalcType, SpecialType
from appraisal_app.utils import parse_number


@dataclass(frozen=True)
class MonthEntry:
    target: Optional[float] = None   # None = blank cell, computes as 0
    actual: Optional[float] = None

    @property
    def is_blank(self) -> bool:
        return self.target is None and self.actual is None


def blank_months() -> Dict[str, MonthEntry]:
    return {key: MonthEntry() for key in MONTH_KEYS}


# ── Row modes (tagged union) ─────────────────────────────────────────────

@dataclass(frozen=True)
class StandardMode:
    kind = SpecialType.STANDARD


@dataclass(frozen=True)
class ParMode:
    """Inverted ratio row; `par_weight` multiplies the percent achieved."""
    par_weight: float = 0.0
    kind = SpecialType.PAR


@dataclass(frozen=True)
class KpiMode:
    """
    KPI row. The totals overrides are operator-entered Total Target /
    Total Actual values which win over the month sums (see row_math).
    """
    calc_type: str = KpiCalcType.PERCENTAGE_WEIGHTED
    target_total_override: Optional[float] = None
    actual_total_override: Optional[float] = None
    kind = SpecialType.KPI


RowMode = Union[StandardMode, ParMode, KpiMode]


@dataclass(frozen=True)
class PerformanceRow:
    pillar: str = ""
    key_result_area: str = ""
    target_description: str = ""
    mode: RowMode = field(default_factory=StandardMode)
    months: Dict[str, MonthEntry] = field(default_factory=blank_months)

    # derived by row_math.recalc_row
    month_percent: Dict[str, Union[int, str]] = field(default_factory=dict)
    target_total: float = 0.0
    actual_total: float = 0.0
    percent_achieved: int = 0
    weight: int = 0
    actual_rating: int = 0
    weighted_average: float = 0.0

    @property
    def special_type(self) -> str:
        return self.mode.kind

    @property
    def is_blank(self) -> bool:
        return (
            not (self.pillar or self.key_result_area or self.target_description)
            and all(entry.is_blank for entry in self.months.values())
        )

    def month(self, key: str) -> MonthEntry:
        return self.months.get(key) or MonthEntry()


@dataclass(frozen=True)
class PerformanceSection:
    name: str
    rows: Tuple[PerformanceRow, ...] = ()
    subtotal_weight: int = 0
    subtotal_weighted_average: float = 0.0


@dataclass(frozen=True)
class SoftSkillScore:
    skill_name: str
    description: str = ""
    rating: Optional[float] = None   # None or blank = not rated yet
    weight: int = 0
    weighted_score: float = 0.0

    @property
    def is_rated(self) -> bool:
        return parse_number(self.rating) is not None


@dataclass(frozen=True)
class AppraisalScore:
    strategic_objectives_score: int = 0   # Section B, 70% share
    behavioral_score: int = 0             # Section C, 30% share
    overall_rating: int = 0
    # breakdown
    total_weight: int = 0
    total_weighted_average: float = 0.0
    soft_skill_weight: int = 0
    soft_skill_weighted_score: float = 0.0


@dataclass(frozen=True)
class ImportResult:
    sections: Tuple[PerformanceSection, ...] = ()
    unrecognized_section_names: Tuple[str, ...] = ()
