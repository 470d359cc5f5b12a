import pytest

from appraisal_app.constants import (
    FINANCE_SECTION, MEMBERSHIP_SECTION, OPERATIONS_SECTION, KpiCalcType,
)
from appraisal_app.services.appraisal_types import KpiMode, ParMode, PerformanceSection
from appraisal_app.services.section_math import recalc_section
from appraisal_app.services.section_table import (
    export_table, format_number, import_table, merge_imported_sections, table_headers,
)


@pytest.fixture
def membership(make_row, q1_months):
    row = make_row(jan=(100, 95), feb=(100, 95), mar=(100, 95))
    return recalc_section(PerformanceSection(name=MEMBERSHIP_SECTION, rows=(row,)), q1_months)


def import_row(headers, **cells):
    row = [""] * len(headers)
    for header, value in cells.items():
        row[headers.index(header)] = value
    return row


class TestExport:
    def test_headers_follow_active_months(self, q1_months):
        headers = table_headers(q1_months)
        assert headers[:7] == [
            "Section", "Pillar", "Key Result Area", "Target", "Special Type", "KPI Calc Type", "PAR Weight",
        ]
        assert headers[7:16] == [
            "Jan Target", "Jan Actual", "Jan %",
            "Feb Target", "Feb Actual", "Feb %",
            "Mar Target", "Mar Actual", "Mar %",
        ]
        assert headers[16:] == [
            "Total Target", "Total Actual", "% Achieved", "Weight", "Rating", "Weighted Average",
        ]

    def test_row_and_subtotal(self, membership, q1_months):
        table = export_table([membership], q1_months)
        assert len(table) == 3

        data = dict(zip(table[0], table[1]))
        assert data["Section"] == MEMBERSHIP_SECTION
        assert data["Special Type"] == ""
        assert data["Jan Target"] == "100"
        assert data["Jan Actual"] == "95"
        assert data["Jan %"] == "95%"
        assert data["Total Target"] == "300"
        assert data["% Achieved"] == "95%"
        assert data["Weight"] == "4"
        assert data["Weighted Average"] == "380.00"

        subtotal = dict(zip(table[0], table[2]))
        assert subtotal["Weight"] == "4"
        assert subtotal["Weighted Average"] == "380.00"
        assert [v for k, v in subtotal.items() if k not in ("Weight", "Weighted Average")] == [""] * 20

    def test_special_rows(self, make_row, q1_months):
        kpi = make_row(mode=KpiMode(calc_type=KpiCalcType.TARGET_RATIO), jan=(80, 70))
        par = make_row(mode=ParMode(par_weight=0.5), jan=(50, 40))
        section = recalc_section(PerformanceSection(name=FINANCE_SECTION, rows=(kpi, par)), q1_months)
        table = export_table([section], q1_months)

        kpi_cells = dict(zip(table[0], table[1]))
        assert kpi_cells["Special Type"] == "KPI"
        assert kpi_cells["KPI Calc Type"] == "Target-ratio"
        assert kpi_cells["Jan %"] == "87.50%"

        par_cells = dict(zip(table[0], table[2]))
        assert par_cells["Special Type"] == "PAR"
        assert par_cells["PAR Weight"] == "0.5"

    def test_format_number(self):
        assert format_number(None) == ""
        assert format_number(0) == "0"
        assert format_number(100.0) == "100"
        assert format_number(49.6) == "49.6"


class TestImport:
    def test_export_then_import_keeps_scores(self, membership, q1_months):
        result = import_table(export_table([membership], q1_months), q1_months)
        assert result.unrecognized_section_names == ()
        assert len(result.sections) == 1

        section = result.sections[0]
        assert section.name == MEMBERSHIP_SECTION
        assert section.subtotal_weight == membership.subtotal_weight
        assert section.subtotal_weighted_average == membership.subtotal_weighted_average
        assert section.rows[0].percent_achieved == 95
        assert section.rows[0].key_result_area == "Grow membership"

    def test_unknown_section_reported(self, q1_months):
        headers = table_headers(q1_months)
        table = [
            headers,
            import_row(headers, Section="Sales", Pillar="Growth", **{"Jan Target": "10"}),
            import_row(headers, Section="Sales", Pillar="Other"),
        ]
        result = import_table(table, q1_months)
        assert result.sections == ()
        assert result.unrecognized_section_names == ("Sales",)

    def test_skips_subtotal_and_empty_rows(self, q1_months):
        headers = table_headers(q1_months)
        table = [
            headers,
            import_row(headers, Section="finance & credit", Pillar="Loans",
                       **{"Jan Target": "100", "Jan Actual": "90"}),
            import_row(headers, Section="Finance & Credit"),
            import_row(headers, Section="SUBTOTAL: Finance & Credit", Weight="3"),
            import_row(headers, Weight="3", **{"Weighted Average": "270.00"}),
        ]
        result = import_table(table, q1_months)
        assert [s.name for s in result.sections] == [FINANCE_SECTION]
        assert len(result.sections[0].rows) == 1
        assert result.sections[0].rows[0].percent_achieved == 90
        assert result.unrecognized_section_names == ()

    def test_inactive_month_columns_ignored(self, annual_months, q1_months, make_row):
        row = make_row(jan=(100, 100), apr=(100, 10))
        section = recalc_section(PerformanceSection(name=OPERATIONS_SECTION, rows=(row,)), annual_months)
        result = import_table(export_table([section], annual_months), q1_months)

        imported = result.sections[0].rows[0]
        assert imported.month("apr").target is None
        assert imported.percent_achieved == 100

    def test_kpi_totals(self, q1_months):
        headers = table_headers(q1_months)
        months = {"Jan Target": "100", "Jan Actual": "80", "Feb Target": "100", "Feb Actual": "90",
                  "Mar Target": "100", "Mar Actual": "100"}
        table = [
            headers,
            import_row(headers, Section=FINANCE_SECTION, Pillar="Override", **{
                "Special Type": "kpi", "KPI Calc Type": "Target-ratio", "Total Target": "200", **months,
            }),
            import_row(headers, Section=FINANCE_SECTION, Pillar="Zero total", **{
                "Special Type": "KPI", "KPI Calc Type": "2", "Total Target": "0", **months,
            }),
        ]
        override, zero_total = import_table(table, q1_months).sections[0].rows

        assert override.mode.calc_type == KpiCalcType.TARGET_RATIO
        assert override.mode.target_total_override == 200
        assert override.mode.actual_total_override is None
        assert override.percent_achieved == 135

        assert zero_total.mode.target_total_override is None
        assert zero_total.target_total == 300
        assert zero_total.percent_achieved == 90

    def test_sections_in_template_order(self, q1_months):
        headers = table_headers(q1_months)
        table = [
            headers,
            import_row(headers, Section=OPERATIONS_SECTION, Pillar="Audit"),
            import_row(headers, Section=MEMBERSHIP_SECTION, Pillar="Growth"),
        ]
        names = [s.name for s in import_table(table, q1_months).sections]
        assert names == [MEMBERSHIP_SECTION, OPERATIONS_SECTION]

    def test_header_only_table(self, q1_months):
        result = import_table([table_headers(q1_months)], q1_months)
        assert result.sections == ()


class TestMerge:
    def test_replaces_by_name_and_appends_new(self, make_row):
        old = PerformanceSection(name=MEMBERSHIP_SECTION, rows=(make_row(pillar="old"),))
        finance = PerformanceSection(name=FINANCE_SECTION, rows=(make_row(pillar="keep"),))
        new = PerformanceSection(name=MEMBERSHIP_SECTION, rows=(make_row(pillar="new"),))
        ops = PerformanceSection(name=OPERATIONS_SECTION, rows=(make_row(pillar="ops"),))

        merged = merge_imported_sections([old, finance], [new, ops])
        assert [s.rows[0].pillar for s in merged] == ["new", "keep", "ops"]

    def test_empty_import_keeps_existing(self, make_row):
        finance = PerformanceSection(name=FINANCE_SECTION, rows=(make_row(),))
        assert merge_imported_sections([finance], [PerformanceSection(name=FINANCE_SECTION)]) == [finance]


ROUND_TRIP_FIELDS = (
    "pillar", "key_result_area", "target_description", "months", "month_percent",
    "target_total", "actual_total", "percent_achieved", "weight", "actual_rating", "weighted_average",
)


class TestRoundTrip:
    def test_par_and_kpi_rows_survive_export_and_import(self, make_row, q1_months):
        rows = (
            make_row(mode=ParMode(par_weight=1), pillar="PAR small", jan=(0.3, 0.2)),
            make_row(mode=KpiMode(calc_type=KpiCalcType.TARGET_RATIO, target_total_override=200),
                     pillar="KPI override", jan=(100, 80), feb=(100, 90), mar=(100, 100)),
            make_row(mode=KpiMode(calc_type=KpiCalcType.COMPLIANCE),
                     pillar="KPI sums", jan=(80, 40), feb=(80, 90)),
            make_row(mode=KpiMode(target_total_override=0, actual_total_override=50),
                     pillar="KPI zero target", jan=(100, 80)),
        )
        section = recalc_section(PerformanceSection(name=FINANCE_SECTION, rows=rows), q1_months)
        result = import_table(export_table([section], q1_months), q1_months)

        imported = result.sections[0]
        assert len(imported.rows) == len(section.rows)
        for before, after in zip(section.rows, imported.rows):
            for name in ROUND_TRIP_FIELDS:
                assert getattr(after, name) == getattr(before, name), (before.pillar, name)
            assert after.special_type == before.special_type
        assert imported.subtotal_weight == section.subtotal_weight
        assert imported.subtotal_weighted_average == section.subtotal_weighted_average

        par, _, sums, zero_target = imported.rows
        assert par.target_total == pytest.approx(0.3)
        assert par.mode.par_weight == 1
        assert sums.mode.calc_type == KpiCalcType.COMPLIANCE
        assert zero_target.mode.target_total_override == 0
        assert zero_target.percent_achieved == 0

    def test_zero_total_with_non_zero_other_total_overrides(self, q1_months):
        headers = table_headers(q1_months)
        table = [
            headers,
            import_row(headers, Section=FINANCE_SECTION, Pillar="Zero target", **{
                "Special Type": "KPI", "Total Target": "0", "Total Actual": "50",
                "Jan Target": "100", "Jan Actual": "80",
            }),
        ]
        row = import_table(table, q1_months).sections[0].rows[0]
        assert (row.target_total, row.actual_total) == (0, 50)
        assert row.percent_achieved == 0
