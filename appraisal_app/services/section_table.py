# appraisal_app/services/section_table.py
"""
Flat-table (CSV / spreadsheet) export and import of Section B.

Table shape:
    Section, Pillar, Key Result Area, Target, Special Type, KPI Calc Type,
    PAR Weight, <Mon> Target, <Mon> Actual, <Mon> % (per active month),
    Total Target, Total Actual, % Achieved, Weight, Rating, Weighted Average

Every data row repeats its section name; each section is followed by one
subtotal row that only fills Weight and Weighted Average.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from appraisal_app.constants import CANONICAL_SECTION_NAMES, MONTHS_BY_KEY, KpiCalcType, SpecialType
from appraisal_app.services.appraisal_types import (
    ImportResult, KpiMode, MonthEntry, ParMode, PerformanceRow, PerformanceSection,
    StandardMode, blank_months,
)
from appraisal_app.services.period_months import active_month_keys
from appraisal_app.services.rounding import _d, fixed2
from appraisal_app.services.row_math import recalc_row
from appraisal_app.services.section_math import canonical_section_name, recalc_section
from appraisal_app.utils import (
    format_kpi_calc_type, normalize_kpi_calc_type, normalize_special_type, parse_number,
)

logger = logging.getLogger(__name__)

LEADING_HEADERS = [
    "Section", "Pillar", "Key Result Area", "Target",
    "Special Type", "KPI Calc Type", "PAR Weight",
]
TRAILING_HEADERS = [
    "Total Target", "Total Actual", "% Achieved", "Weight", "Rating", "Weighted Average",
]

MONTH_HEADER_RE = re.compile(r"^([A-Za-z]{3})\s+(Target|Actual|%)$", re.IGNORECASE)
SUBTOTAL_PREFIX = "subtotal:"

# canonical column -> accepted header spellings (lower-case)
HEADER_ALIASES = {
    "section":            ("section",),
    "pillar":             ("pillar",),
    "key_result_area":    ("key result area", "kra"),
    "target_description": ("target", "target description"),
    "special_type":       ("special type", "special", "row type", "special row type"),
    "kpi_calc_type":      ("kpi calc type", "kpi calculation type", "kpi type", "kpi calculation"),
    "par_weight":         ("par weight", "par target", "par target value", "par value"),
    "total_target":       ("total target",),
    "total_actual":       ("total actual",),
}


# ---------- Export ----------

def format_number(value) -> str:
    """Plain text for a numeric cell; blank inputs stay blank ('', not '0')."""
    if value is None:
        return ""
    number = _d(value).normalize()
    if number == 0:
        return "0"
    return format(number, "f")


def table_headers(active_months) -> List[str]:
    month_headers = []
    for key in active_month_keys(active_months):
        label = MONTHS_BY_KEY[key].label
        month_headers += [f"{label} Target", f"{label} Actual", f"{label} %"]
    return LEADING_HEADERS + month_headers + TRAILING_HEADERS


def _row_cells(section_name: str, row: PerformanceRow, keys: Sequence[str]) -> List[str]:
    mode = row.mode
    special_type = "" if isinstance(mode, StandardMode) else row.special_type
    kpi_calc_type = format_kpi_calc_type(mode.calc_type) if isinstance(mode, KpiMode) else ""
    par_weight = format_number(mode.par_weight) if isinstance(mode, ParMode) else ""

    month_cells = []
    for key in keys:
        entry = row.month(key)
        month_cells += [
            format_number(entry.target),
            format_number(entry.actual),
            f"{row.month_percent.get(key, 0)}%",
        ]

    return [
        section_name,
        row.pillar,
        row.key_result_area,
        row.target_description,
        special_type,
        kpi_calc_type,
        par_weight,
        *month_cells,
        format_number(row.target_total),
        format_number(row.actual_total),
        f"{row.percent_achieved}%",
        str(row.weight),
        str(row.actual_rating),
        fixed2(row.weighted_average),
    ]


def export_table(sections: Iterable[PerformanceSection], active_months) -> List[List[str]]:
    """
    Header row followed by every section's rows and its subtotal row.
    Rows are written as they are; recalculate first if they may be stale.
    """
    keys = active_month_keys(active_months)
    headers = table_headers(keys)
    weight_idx = headers.index("Weight")
    weighted_idx = headers.index("Weighted Average")

    table = [headers]
    for section in sections:
        for row in section.rows:
            table.append(_row_cells(section.name, row, keys))

        subtotal = [""] * len(headers)
        subtotal[weight_idx] = str(section.subtotal_weight)
        subtotal[weighted_idx] = fixed2(section.subtotal_weighted_average)
        table.append(subtotal)
    return table


# ---------- Import ----------

def _cell(raw: Sequence[Any], idx: Optional[int]) -> str:
    if idx is None or idx >= len(raw) or raw[idx] is None:
        return ""
    return str(raw[idx]).strip()


def _locate_columns(headers: Sequence[Any]) -> Dict[str, Optional[int]]:
    normalized = [str(h if h is not None else "").strip().lower() for h in headers]
    columns = {}
    for canonical, spellings in HEADER_ALIASES.items():
        columns[canonical] = next((i for i, h in enumerate(normalized) if h in spellings), None)
    return columns


def _locate_month_columns(headers: Sequence[Any], keys: Sequence[str]) -> List[Dict[str, Any]]:
    """Target/Actual columns of active months; % columns are derived and skipped."""
    month_cols = []
    for idx, header in enumerate(headers):
        match = MONTH_HEADER_RE.match(str(header if header is not None else "").strip())
        if not match:
            continue
        month_key = match.group(1).lower()
        kind = match.group(2).lower()
        if month_key not in keys or kind == "%":
            continue
        month_cols.append({"idx": idx, "month": month_key, "kind": kind})
    return month_cols


def _kpi_overrides(raw_target: str, raw_actual: str) -> Tuple[Optional[float], Optional[float]]:
    """
    Imported KPI totals. A blank cell means "use the month sum" (None). A zero
    total only overrides while the other total is non-zero; when neither is,
    both fall back to the month sums. Exported rows re-import unchanged.
    """
    target = parse_number(raw_target)
    actual = parse_number(raw_actual)
    if not (target or actual):
        return None, None
    return target, actual


def _parse_row(raw: Sequence[Any], columns, month_cols, keys) -> PerformanceRow:
    months = blank_months()
    for col in month_cols:
        entry = months[col["month"]]
        value = parse_number(_cell(raw, col["idx"]))
        if col["kind"] == "target":
            months[col["month"]] = MonthEntry(target=value, actual=entry.actual)
        else:
            months[col["month"]] = MonthEntry(target=entry.target, actual=value)

    special_type = normalize_special_type(_cell(raw, columns["special_type"]))
    if special_type == SpecialType.PAR:
        mode = ParMode(par_weight=parse_number(_cell(raw, columns["par_weight"])) or 0.0)
    elif special_type == SpecialType.KPI:
        target_override, actual_override = _kpi_overrides(
            _cell(raw, columns["total_target"]), _cell(raw, columns["total_actual"]),
        )
        mode = KpiMode(
            calc_type=normalize_kpi_calc_type(_cell(raw, columns["kpi_calc_type"])) or KpiCalcType.PERCENTAGE_WEIGHTED,
            target_total_override=target_override,
            actual_total_override=actual_override,
        )
    else:
        mode = StandardMode()

    row = PerformanceRow(
        pillar=_cell(raw, columns["pillar"]),
        key_result_area=_cell(raw, columns["key_result_area"]),
        target_description=_cell(raw, columns["target_description"]),
        mode=mode,
        months=months,
    )
    # imported numbers are inputs only; every derived field is recomputed
    return recalc_row(row, keys)


def import_table(raw_table: Sequence[Sequence[Any]], active_months) -> ImportResult:
    """
    Parse a decoded table (list of rows, first row = headers) into sections.

    - Only the three template section names are accepted; other names are
      reported in `unrecognized_section_names` and their rows dropped.
    - Subtotal rows, rows without a section and rows with no pillar, KRA or
      target text are skipped.
    - Only months in `active_months` are read.
    - Sections without any parsed row are not returned.
    """
    if not raw_table or len(raw_table) < 2:
        return ImportResult()

    keys = active_month_keys(active_months)
    headers = list(raw_table[0] or [])
    columns = _locate_columns(headers)
    month_cols = _locate_month_columns(headers, keys)

    grouped: Dict[str, List[PerformanceRow]] = {}
    unknown: List[str] = []

    for line_no, raw in enumerate(raw_table[1:], start=2):
        raw = list(raw or [])
        section_name = _cell(raw, columns["section"])
        if not section_name or section_name.lower().startswith(SUBTOTAL_PREFIX):
            continue

        canonical = canonical_section_name(section_name)
        if canonical is None:
            if section_name not in unknown:
                unknown.append(section_name)
            logger.warning("Line %s: unrecognized section %r skipped", line_no, section_name)
            continue

        if not any(_cell(raw, columns[c]) for c in ("pillar", "key_result_area", "target_description")):
            continue

        grouped.setdefault(canonical, []).append(_parse_row(raw, columns, month_cols, keys))

    sections = tuple(
        recalc_section(PerformanceSection(name=name, rows=tuple(grouped[name])))
        for name in CANONICAL_SECTION_NAMES
        if grouped.get(name)
    )
    logger.info(
        "Imported %s row(s) into %s section(s); %s unrecognized section name(s)",
        sum(len(s.rows) for s in sections), len(sections), len(unknown),
    )
    return ImportResult(sections=sections, unrecognized_section_names=tuple(unknown))


def merge_imported_sections(
    existing: Iterable[PerformanceSection],
    imported: Iterable[PerformanceSection],
) -> List[PerformanceSection]:
    """
    Replace, section by section, the rows of `existing` with the imported ones.
    Sections missing from the import are left untouched; imported sections
    the caller did not have yet are appended.
    """
    replacements = {}
    for section in imported:
        if section.rows:
            replacements[canonical_section_name(section.name) or section.name] = section

    merged = []
    for section in existing:
        key = canonical_section_name(section.name) or section.name
        replacement = replacements.pop(key, None)
        merged.append(section if replacement is None else replacement)
    merged.extend(replacements.values())
    return merged
