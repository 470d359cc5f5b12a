import pytest

from appraisal_app.services.weight_scale import resolve_weight


class TestResolveWeight:
    @pytest.mark.parametrize("value, expected", [
        (0, 1), (70, 1), (70.01, 2), (80, 2), (85, 3), (90, 3),
        (95, 4), (100, 4), (105, 5), (110, 5), (110.5, 6), (125, 6), (10_000, 6),
    ])
    def test_bands(self, value, expected):
        assert resolve_weight(value) == expected

    def test_negative_and_non_numeric_fall_in_lowest_band(self):
        assert resolve_weight(-50) == 1
        assert resolve_weight("abc") == 1
        assert resolve_weight(None) == 1
        assert resolve_weight("") == 1

    def test_accepts_percent_strings(self):
        assert resolve_weight("95%") == 4

    def test_monotonic(self):
        weights = [resolve_weight(v) for v in range(-10, 200)]
        assert weights == sorted(weights)
        assert set(weights) == {1, 2, 3, 4, 5, 6}
