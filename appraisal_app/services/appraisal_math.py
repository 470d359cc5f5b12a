from decimal import Decimal
from typing import Iterable, Tuple

from appraisal_app.constants import BEHAVIORAL_SHARE, STRATEGIC_OBJECTIVES_SHARE
from appraisal_app.services.appraisal_types import AppraisalScore, PerformanceSection, SoftSkillScore
from appraisal_app.services.rounding import _d, round2, round_int
from appraisal_app.services.soft_skill_math import soft_skill_totals


def calculate_strategic_objectives_score(sections: Iterable[PerformanceSection]) -> Tuple[int, int, Decimal]:
    """
    Section B total:
        round( Σ subtotal_weighted_average / Σ subtotal_weight × 0.7 )
    0 when no section carries any weight.

    Returns (score, total_weight, total_weighted_average).
    """
    total_weight = 0
    total_weighted = Decimal('0')
    for section in sections:
        total_weight += round_int(section.subtotal_weight)
        total_weighted += _d(section.subtotal_weighted_average)

    if total_weight <= 0:
        return 0, total_weight, total_weighted
    score = round_int(total_weighted / Decimal(total_weight) * STRATEGIC_OBJECTIVES_SHARE)
    return score, total_weight, total_weighted


def calculate_behavioral_score(soft_skills: Iterable[SoftSkillScore]) -> Tuple[int, int, Decimal]:
    """
    Section C total over rated soft skills:
        round( Σ weighted_score / Σ weight × 0.3 )

    Returns (score, total_weight, total_weighted_score).
    """
    total_weight, total_weighted = soft_skill_totals(soft_skills)
    if total_weight <= 0:
        return 0, total_weight, total_weighted
    score = round_int(total_weighted / Decimal(total_weight) * BEHAVIORAL_SHARE)
    return score, total_weight, total_weighted


def compose_score(sections: Iterable[PerformanceSection], soft_skills: Iterable[SoftSkillScore]) -> AppraisalScore:
    """
    Overall rating = Section B (70%) + Section C (30%), all whole
    percentage points. Sections are taken as given: run recalc_section
    first if rows changed.
    """
    strategic, total_weight, total_weighted = calculate_strategic_objectives_score(sections)
    behavioral, skill_weight, skill_weighted = calculate_behavioral_score(soft_skills)

    return AppraisalScore(
        strategic_objectives_score=strategic,
        behavioral_score=behavioral,
        overall_rating=round_int(strategic + behavioral),
        total_weight=total_weight,
        total_weighted_average=round2(total_weighted),
        soft_skill_weight=skill_weight,
        soft_skill_weighted_score=round2(skill_weighted),
    )
