import math
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from rest_framework import serializers

from appraisal_app.constants import KpiCalcType, PeriodType, SpecialType

# Spellings accepted from the form, the API and imported spreadsheets,
# keyed by their lower-cased form.
SPECIAL_TYPE_ALIASES = {
    "": SpecialType.STANDARD,
    "standard": SpecialType.STANDARD,
    "par": SpecialType.PAR,
    "kpi": SpecialType.KPI,
}

KPI_CALC_TYPE_ALIASES = {
    "percentage": KpiCalcType.PERCENTAGE_WEIGHTED,
    "percentage-based": KpiCalcType.PERCENTAGE_WEIGHTED,
    "percentage-based weighted": KpiCalcType.PERCENTAGE_WEIGHTED,
    "percentage weighted": KpiCalcType.PERCENTAGE_WEIGHTED,
    "percentage-weighted": KpiCalcType.PERCENTAGE_WEIGHTED,
    "percentage_weighted": KpiCalcType.PERCENTAGE_WEIGHTED,
    "weighted": KpiCalcType.PERCENTAGE_WEIGHTED,
    "1": KpiCalcType.PERCENTAGE_WEIGHTED,
    "target": KpiCalcType.TARGET_RATIO,
    "target-ratio": KpiCalcType.TARGET_RATIO,
    "target_ratio": KpiCalcType.TARGET_RATIO,
    "ratio": KpiCalcType.TARGET_RATIO,
    "2": KpiCalcType.TARGET_RATIO,
    "compliance": KpiCalcType.COMPLIANCE,
    "compliant": KpiCalcType.COMPLIANCE,
    "3": KpiCalcType.COMPLIANCE,
}

PERIOD_TYPE_ALIASES = {
    "quarter": PeriodType.QUARTERLY,
    "quarterly": PeriodType.QUARTERLY,
    "semi-annual": PeriodType.SEMI_ANNUALLY,
    "semi-annually": PeriodType.SEMI_ANNUALLY,
    "semi_annually": PeriodType.SEMI_ANNUALLY,
    "semi annually": PeriodType.SEMI_ANNUALLY,
    "semiannual": PeriodType.SEMI_ANNUALLY,
    "half-yearly": PeriodType.SEMI_ANNUALLY,
    "annual": PeriodType.ANNUAL,
    "annually": PeriodType.ANNUAL,
    "yearly": PeriodType.ANNUAL,
}


def match_choice(choices: Mapping[str, str], aliases: Mapping[str, str], value) -> Optional[str]:
    """
    Resolve `value` to a choice key by trying, in order: the key itself,
    the exact label, the label ignoring case, then the alias table.
    Returns None when nothing matches.
    """
    data_str = "" if value is None else str(value).strip()
    if data_str in choices:
        return data_str
    for key, label in choices.items():
        if label == data_str:
            return key
    for key, label in choices.items():
        if str(label).lower() == data_str.lower():
            return key
    return aliases.get(data_str.lower())


def normalize_special_type(value) -> str:
    """Unknown or blank special types are Standard rows."""
    return match_choice(dict(SpecialType.choices), SPECIAL_TYPE_ALIASES, value) or SpecialType.STANDARD


def normalize_kpi_calc_type(value) -> Optional[str]:
    return match_choice(dict(KpiCalcType.choices), KPI_CALC_TYPE_ALIASES, value)


def normalize_period_type(value) -> str:
    """Anything that is not quarterly or semi-annual reports on the full year."""
    return match_choice(dict(PeriodType.choices), PERIOD_TYPE_ALIASES, value) or PeriodType.ANNUAL


def format_kpi_calc_type(value) -> str:
    """Display label, e.g. 'Target-ratio'; blank when the value is not a calc type."""
    key = normalize_kpi_calc_type(value)
    return KpiCalcType(key).label if key else ""


def parse_number(value) -> Optional[float]:
    """
    Lenient numeric parsing for partially-filled forms.
    - None / blank string -> None (an empty cell)
    - anything that is not a finite number -> 0.0
    - "95%" and " 1,250 " style strings are accepted
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, InvalidOperation):
            return 0.0
        return number if math.isfinite(number) else 0.0

    text = str(value).strip()
    if text == "":
        return None
    text = text.rstrip("%").replace(",", "").strip()
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


# ── DRF fields ───────────────────────────────────────────────────────────

class LabelChoiceField(serializers.ChoiceField):
    """
    ChoiceField that also accepts the human label (any case) and the
    aliases of its subclass. With `fallback` set, unknown input resolves
    to the fallback instead of failing validation.
    """
    aliases: Mapping[str, str] = {}
    fallback: Optional[str] = None

    def to_internal_value(self, data):
        key = match_choice(self.choices, self.aliases, data)
        if key is not None:
            return key
        if self.fallback is not None:
            return self.fallback
        self.fail('invalid_choice', input=data)

    def to_representation(self, value):
        return self.choices.get(value, super().to_representation(value))


class SpecialTypeField(LabelChoiceField):
    aliases = SPECIAL_TYPE_ALIASES
    fallback = SpecialType.STANDARD

    def __init__(self, **kwargs):
        kwargs.setdefault("choices", SpecialType.choices)
        super().__init__(**kwargs)

    def to_representation(self, value):
        return normalize_special_type(value)


class KpiCalcTypeField(LabelChoiceField):
    aliases = KPI_CALC_TYPE_ALIASES
    fallback = KpiCalcType.PERCENTAGE_WEIGHTED

    def __init__(self, **kwargs):
        kwargs.setdefault("choices", KpiCalcType.choices)
        super().__init__(**kwargs)


class PeriodTypeField(LabelChoiceField):
    aliases = PERIOD_TYPE_ALIASES
    fallback = PeriodType.ANNUAL

    def __init__(self, **kwargs):
        kwargs.setdefault("choices", PeriodType.choices)
        super().__init__(**kwargs)


class LenientNumberField(serializers.Field):
    """Number input that never fails: blank -> None, garbage -> 0."""

    def __init__(self, **kwargs):
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_null", True)
        if not kwargs["required"]:
            kwargs.setdefault("default", None)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return parse_number(data)

    def to_representation(self, value):
        return parse_number(value)
