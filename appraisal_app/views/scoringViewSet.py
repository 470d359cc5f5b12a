import json
import logging

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from appraisal_app.serializers.appraisal_serializer import (
    AppraisalPayloadSerializer, PerformanceSectionSerializer, PeriodSerializer,
    score_to_data, section_from_data, section_to_data, soft_skill_from_data, soft_skill_to_data,
    SoftSkillSerializer,
)
from appraisal_app.services.appraisal_math import compose_score
from appraisal_app.services.section_math import recalc_sections
from appraisal_app.services.section_table import export_table, import_table, merge_imported_sections
from appraisal_app.services.soft_skill_math import dedupe_soft_skills, recalc_soft_skill
from appraisal_app.services.table_readers import parse_table_upload, render_csv, render_xlsx

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ScoringViewSet(viewsets.ViewSet):
    """
    Stateless scoring over a posted appraisal form:

    • GET  /scoring/months/       → active months for a period
    • POST /scoring/recalculate/  → recalculated rows, subtotals, soft skills, overall score
    • POST /scoring/export/       → Section B as CSV (default) or XLSX (?file_type=xlsx)
    • POST /scoring/import/       → CSV/XLSX upload merged into the posted sections
    """
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=["get"], url_path="months")
    def months(self, request, *args, **kwargs):
        period = PeriodSerializer(data=request.query_params)
        period.is_valid(raise_exception=True)
        months = period.active_months()
        return Response({
            "period_type": period.validated_data["period_type"],
            "months": [{"key": m.key, "label": m.label} for m in months],
        })

    @action(detail=False, methods=["post"], url_path="recalculate")
    def recalculate(self, request, *args, **kwargs):
        payload = AppraisalPayloadSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        sections = recalc_sections(payload.to_sections(), payload.active_months())
        soft_skills = [recalc_soft_skill(s) for s in dedupe_soft_skills(payload.to_soft_skills())]
        score = compose_score(sections, soft_skills)

        return Response({
            "sections": [section_to_data(s) for s in sections],
            "soft_skills": [soft_skill_to_data(s) for s in soft_skills],
            "score": score_to_data(score),
        })

    @action(detail=False, methods=["post"], url_path="export")
    def export(self, request, *args, **kwargs):
        payload = AppraisalPayloadSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        months = payload.active_months()
        sections = recalc_sections(payload.to_sections(), months)
        table = export_table(sections, months)

        period = payload.validated_data.get("period") or {}
        filename = settings.APPRAISAL_EXPORT_FILENAME.format(
            year=period.get("year") or "",
            period_type=period.get("period_type") or "Annual",
        )

        if request.query_params.get("file_type", "csv").lower() == "xlsx":
            response = HttpResponse(render_xlsx(table), content_type=XLSX_CONTENT_TYPE)
            response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
        else:
            response = HttpResponse(render_csv(table), content_type="text/csv; charset=utf-8")
            response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
        return response

    @action(detail=False, methods=["post"], url_path="import")
    def import_sections(self, request, *args, **kwargs):
        try:
            table = parse_table_upload(request)
            raw_period = _json_field(request.data, "period") or request.data
            raw_sections = _json_field(request.data, "sections") or []
            raw_skills = _json_field(request.data, "soft_skills") or []
        except ValueError as e:
            logger.exception("Section B import failed")
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        period = PeriodSerializer(data=raw_period)
        period.is_valid(raise_exception=True)
        months = period.active_months()

        existing = PerformanceSectionSerializer(data=raw_sections, many=True)
        existing.is_valid(raise_exception=True)
        skills = SoftSkillSerializer(data=raw_skills, many=True)
        skills.is_valid(raise_exception=True)

        result = import_table(table, months)
        sections = merge_imported_sections(
            recalc_sections([section_from_data(s) for s in existing.validated_data], months),
            result.sections,
        )
        soft_skills = [recalc_soft_skill(soft_skill_from_data(s)) for s in skills.validated_data]

        return Response({
            "status": "imported",
            "sections": [section_to_data(s) for s in sections],
            "unrecognized_section_names": list(result.unrecognized_section_names),
            "score": score_to_data(compose_score(sections, soft_skills)),
        }, status=status.HTTP_200_OK)


def _json_field(data, name):
    """Multipart forms carry nested values as JSON strings."""
    value = data.get(name) if hasattr(data, "get") else None
    if isinstance(value, str):
        try:
            return json.loads(value) if value.strip() else None
        except json.JSONDecodeError:
            raise ValueError(f'"{name}" is not valid JSON.') from None
    return value
