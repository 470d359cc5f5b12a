from appraisal_app.constants import TOP_WEIGHT, WEIGHT_BANDS
from appraisal_app.services.rounding import _d
from appraisal_app.utils import parse_number


def resolve_weight(value) -> int:
    """
    Map a percentage (strategic-objective row) or a rating (soft skill)
    to its 1..6 weight:

        <=70 -> 1, <=80 -> 2, <=90 -> 3, <=100 -> 4, <=110 -> 5, above -> 6

    Zero, negative and non-numeric input land in the lowest band.
    """
    number = _d(parse_number(value) or 0)
    for upper, weight in WEIGHT_BANDS:
        if number <= upper:
            return weight
    return TOP_WEIGHT
