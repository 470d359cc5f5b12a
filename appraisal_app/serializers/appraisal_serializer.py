from dataclasses import asdict

from rest_framework import serializers

from appraisal_app.constants import MONTH_KEYS, KpiCalcType, PeriodType, SpecialType
from appraisal_app.services.appraisal_types import (
    AppraisalScore, KpiMode, MonthEntry, ParMode, PerformanceRow, PerformanceSection,
    SoftSkillScore, StandardMode, blank_months,
)
from appraisal_app.services.period_months import resolve_active_months
from appraisal_app.utils import (
    KpiCalcTypeField, LenientNumberField, PeriodTypeField, SpecialTypeField, format_kpi_calc_type,
)

# Flat keys older form versions stored rows with -> nested payload keys
LEGACY_ROW_KEYS = {
    "keyResultArea": "key_result_area",
    "target": "target_description",
    "targetDescription": "target_description",
    "specialType": "special_type",
    "kpiCalcType": "kpi_calc_type",
    "parWeight": "par_weight",
    "parTarget": "par_weight",
    "targetTotal": "target_total_override",
    "actualTotal": "actual_total_override",
}


class PeriodSerializer(serializers.Serializer):
    period_type = PeriodTypeField(required=False, allow_null=True, default=PeriodType.ANNUAL)
    quarter     = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    half        = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    year        = serializers.CharField(required=False, allow_blank=True, default="")

    def to_internal_value(self, data):
        # the form calls them periodQuarter / periodSemi
        if hasattr(data, "get"):
            data = {
                "period_type": data.get("period_type", data.get("periodType")),
                "quarter": data.get("quarter", data.get("periodQuarter")),
                "half": data.get("half", data.get("periodSemi")),
                "year": data.get("year", data.get("periodYear")) or "",
            }
            data = {k: v for k, v in data.items() if v is not None}
        return super().to_internal_value(data)

    def active_months(self):
        data = self.validated_data
        return resolve_active_months(data.get("period_type"), data.get("quarter"), data.get("half"))


class MonthEntrySerializer(serializers.Serializer):
    target = LenientNumberField()
    actual = LenientNumberField()


class PerformanceRowSerializer(serializers.Serializer):
    pillar                = serializers.CharField(required=False, allow_blank=True, default="")
    key_result_area       = serializers.CharField(required=False, allow_blank=True, default="")
    target_description    = serializers.CharField(required=False, allow_blank=True, default="")
    special_type          = SpecialTypeField(required=False, allow_null=True, default=SpecialType.STANDARD)
    kpi_calc_type         = KpiCalcTypeField(required=False, allow_null=True, default=KpiCalcType.PERCENTAGE_WEIGHTED)
    par_weight            = LenientNumberField()
    target_total_override = LenientNumberField()
    actual_total_override = LenientNumberField()
    months                = serializers.DictField(child=MonthEntrySerializer(), required=False, default=dict)

    def to_internal_value(self, data):
        if hasattr(data, "get"):
            data = fold_legacy_row(data)
        return super().to_internal_value(data)

    def to_representation(self, instance):
        return row_to_data(instance)


class PerformanceSectionSerializer(serializers.Serializer):
    name = serializers.CharField()
    rows = PerformanceRowSerializer(many=True, required=False, default=list)

    def to_representation(self, instance):
        return section_to_data(instance)


class SoftSkillSerializer(serializers.Serializer):
    skill_name  = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    rating      = LenientNumberField()

    def to_internal_value(self, data):
        if hasattr(data, "get") and "skill_name" not in data:
            data = {**data, "skill_name": data.get("name") or data.get("skillName") or ""}
        return super().to_internal_value(data)

    def to_representation(self, instance):
        return soft_skill_to_data(instance)


class AppraisalPayloadSerializer(serializers.Serializer):
    """Body of the scoring endpoints: period + Section B + Section C."""
    period      = PeriodSerializer(required=False)
    sections    = PerformanceSectionSerializer(many=True, required=False, default=list)
    soft_skills = SoftSkillSerializer(many=True, required=False, default=list)

    def active_months(self):
        period = self.validated_data.get("period") or {}
        return resolve_active_months(period.get("period_type"), period.get("quarter"), period.get("half"))

    def to_sections(self):
        return [section_from_data(s) for s in self.validated_data.get("sections", [])]

    def to_soft_skills(self):
        return [soft_skill_from_data(s) for s in self.validated_data.get("soft_skills", [])]


# ---------- payload <-> engine values ----------

def fold_legacy_row(data) -> dict:
    """
    Accept rows saved by older form versions (janTarget, janActual, keyResultArea,
    ...) alongside the nested `months` shape; nested keys win.
    """
    folded = dict(data)
    for legacy, key in LEGACY_ROW_KEYS.items():
        if legacy in folded and key not in folded:
            folded[key] = folded[legacy]
        folded.pop(legacy, None)

    months = dict(folded.get("months") or {})
    for key in MONTH_KEYS:
        target = folded.pop(f"{key}Target", None)
        actual = folded.pop(f"{key}Actual", None)
        if key not in months and (target is not None or actual is not None):
            months[key] = {"target": target, "actual": actual}
    folded["months"] = months
    return folded


def row_from_data(data) -> PerformanceRow:
    special_type = data.get("special_type") or SpecialType.STANDARD
    if special_type == SpecialType.PAR:
        mode = ParMode(par_weight=data.get("par_weight") or 0.0)
    elif special_type == SpecialType.KPI:
        mode = KpiMode(
            calc_type=data.get("kpi_calc_type") or KpiCalcType.PERCENTAGE_WEIGHTED,
            target_total_override=data.get("target_total_override"),
            actual_total_override=data.get("actual_total_override"),
        )
    else:
        mode = StandardMode()

    months = blank_months()
    for key, entry in (data.get("months") or {}).items():
        key = str(key).strip().lower()
        if key in months:
            months[key] = MonthEntry(target=entry.get("target"), actual=entry.get("actual"))

    return PerformanceRow(
        pillar=data.get("pillar", ""),
        key_result_area=data.get("key_result_area", ""),
        target_description=data.get("target_description", ""),
        mode=mode,
        months=months,
    )


def section_from_data(data) -> PerformanceSection:
    return PerformanceSection(
        name=data["name"],
        rows=tuple(row_from_data(r) for r in data.get("rows", [])),
    )


def soft_skill_from_data(data) -> SoftSkillScore:
    return SoftSkillScore(
        skill_name=data.get("skill_name", ""),
        description=data.get("description", ""),
        rating=data.get("rating"),
    )


def row_to_data(row: PerformanceRow) -> dict:
    mode = row.mode
    return {
        "pillar": row.pillar,
        "key_result_area": row.key_result_area,
        "target_description": row.target_description,
        "special_type": row.special_type.value,
        "kpi_calc_type": mode.calc_type if isinstance(mode, KpiMode) else None,
        "kpi_calc_type_label": format_kpi_calc_type(mode.calc_type) if isinstance(mode, KpiMode) else "",
        "par_weight": mode.par_weight if isinstance(mode, ParMode) else None,
        "target_total_override": mode.target_total_override if isinstance(mode, KpiMode) else None,
        "actual_total_override": mode.actual_total_override if isinstance(mode, KpiMode) else None,
        "months": {
            key: {
                "target": row.month(key).target,
                "actual": row.month(key).actual,
                "percent": row.month_percent.get(key, 0),
            }
            for key in MONTH_KEYS
        },
        "target_total": row.target_total,
        "actual_total": row.actual_total,
        "percent_achieved": row.percent_achieved,
        "weight": row.weight,
        "actual_rating": row.actual_rating,
        "weighted_average": row.weighted_average,
    }


def section_to_data(section: PerformanceSection) -> dict:
    return {
        "name": section.name,
        "rows": [row_to_data(r) for r in section.rows],
        "subtotal_weight": section.subtotal_weight,
        "subtotal_weighted_average": section.subtotal_weighted_average,
    }


def soft_skill_to_data(skill: SoftSkillScore) -> dict:
    return asdict(skill)


def score_to_data(score: AppraisalScore) -> dict:
    return asdict(score)
