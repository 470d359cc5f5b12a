import pytest

from appraisal_app.constants import MONTH_KEYS, PeriodMonth, PeriodType
from appraisal_app.services.period_months import active_month_keys, resolve_active_months


def keys_of(months):
    return [m.key for m in months]


class TestResolveActiveMonths:
    @pytest.mark.parametrize("quarter, expected", [
        (1, ["jan", "feb", "mar"]),
        ("2", ["apr", "may", "jun"]),
        ("Q3", ["jul", "aug", "sep"]),
        (4, ["oct", "nov", "dec"]),
    ])
    def test_quarters(self, quarter, expected):
        assert keys_of(resolve_active_months(PeriodType.QUARTERLY, quarter=quarter)) == expected

    @pytest.mark.parametrize("half, expected", [
        (1, ["jan", "feb", "mar", "apr", "may", "jun"]),
        ("H2", ["jul", "aug", "sep", "oct", "nov", "dec"]),
    ])
    def test_halves(self, half, expected):
        assert keys_of(resolve_active_months(PeriodType.SEMI_ANNUALLY, half=half)) == expected

    def test_unknown_selector_defaults_to_first(self):
        assert keys_of(resolve_active_months("Quarterly", quarter=9)) == ["jan", "feb", "mar"]
        assert keys_of(resolve_active_months("Quarterly", quarter="x")) == ["jan", "feb", "mar"]
        assert keys_of(resolve_active_months("Semi-annually", half=None))[0] == "jan"

    def test_annual_and_unknown_types_cover_the_year(self):
        assert keys_of(resolve_active_months(PeriodType.ANNUAL)) == list(MONTH_KEYS)
        assert keys_of(resolve_active_months("Monthly")) == list(MONTH_KEYS)
        assert keys_of(resolve_active_months(None)) == list(MONTH_KEYS)

    def test_selector_ignored_for_other_type(self):
        # a stale quarter on an annual period does nothing
        assert len(resolve_active_months(PeriodType.ANNUAL, quarter=2)) == 12

    def test_period_type_spellings(self):
        assert keys_of(resolve_active_months("quarterly", quarter=2)) == ["apr", "may", "jun"]
        assert len(resolve_active_months("semi-annual", half=2)) == 6


class TestActiveMonthKeys:
    def test_accepts_mixed_shapes_and_dedupes(self):
        months = [PeriodMonth("jan", "Jan"), {"key": "feb"}, "MAR", "jan", "bogus"]
        assert active_month_keys(months) == ("jan", "feb", "mar")

    def test_none_is_empty(self):
        assert active_month_keys(None) == ()
