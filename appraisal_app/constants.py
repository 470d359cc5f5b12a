from decimal import Decimal
from typing import NamedTuple

from django.db import models

# ── Lookup / Enum helpers ────────────────────────────────────────────────

class PeriodType(models.TextChoices):
    QUARTERLY     = "Quarterly",     "Quarterly"
    SEMI_ANNUALLY = "Semi-annually", "Semi-annually"
    ANNUAL        = "Annual",        "Annual"

class SpecialType(models.TextChoices):
    STANDARD = "STANDARD", "Standard"
    PAR      = "PAR",      "PAR"
    KPI      = "KPI",      "KPI"

class KpiCalcType(models.TextChoices):
    PERCENTAGE_WEIGHTED = "percentage-weighted", "Percentage-based weighted"
    TARGET_RATIO        = "target-ratio",        "Target-ratio"
    COMPLIANCE          = "compliance",          "Compliance"


# ── Calendar ─────────────────────────────────────────────────────────────

class PeriodMonth(NamedTuple):
    key: str
    label: str


# Single ordered month domain shared by the period resolver, the row
# calculator and the table codec.
MONTHS = (
    PeriodMonth("jan", "Jan"), PeriodMonth("feb", "Feb"), PeriodMonth("mar", "Mar"),
    PeriodMonth("apr", "Apr"), PeriodMonth("may", "May"), PeriodMonth("jun", "Jun"),
    PeriodMonth("jul", "Jul"), PeriodMonth("aug", "Aug"), PeriodMonth("sep", "Sep"),
    PeriodMonth("oct", "Oct"), PeriodMonth("nov", "Nov"), PeriodMonth("dec", "Dec"),
)
MONTH_KEYS = tuple(m.key for m in MONTHS)
MONTHS_BY_KEY = {m.key: m for m in MONTHS}


# ── Section B template ───────────────────────────────────────────────────

MEMBERSHIP_SECTION = "Membership & Customer Satisfaction"
FINANCE_SECTION    = "Finance & Credit"
OPERATIONS_SECTION = "Business Operations, Audit, ICT & HR"

CANONICAL_SECTION_NAMES = (MEMBERSHIP_SECTION, FINANCE_SECTION, OPERATIONS_SECTION)


# ── Weighting ────────────────────────────────────────────────────────────

# (inclusive upper bound, weight); anything above the last bound gets TOP_WEIGHT
WEIGHT_BANDS = (
    (Decimal("70"), 1),
    (Decimal("80"), 2),
    (Decimal("90"), 3),
    (Decimal("100"), 4),
    (Decimal("110"), 5),
)
TOP_WEIGHT = 6

STRATEGIC_OBJECTIVES_SHARE = Decimal("0.7")   # Section B
BEHAVIORAL_SHARE           = Decimal("0.3")   # Section C
