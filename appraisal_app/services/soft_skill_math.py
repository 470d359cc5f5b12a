from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Tuple

from appraisal_app.services.appraisal_types import SoftSkillScore
from appraisal_app.services.rounding import _d, round2
from appraisal_app.services.weight_scale import resolve_weight


def recalc_soft_skill(skill: SoftSkillScore) -> SoftSkillScore:
    """
    Weight comes from the rating on the same 1..6 scale as target rows;
    weighted score = rating × weight (2dp). Unrated skills carry 0 / 0.00.
    """
    if not skill.is_rated:
        return replace(skill, weight=0, weighted_score=0.0)
    weight = resolve_weight(skill.rating)
    return replace(skill, weight=weight, weighted_score=round2(_d(skill.rating) * weight))


def dedupe_soft_skills(skills: Iterable[SoftSkillScore]) -> List[SoftSkillScore]:
    """
    Drop catalogue entries repeating an earlier name + description pair
    (case-insensitive). Entries with neither are all kept.
    """
    seen = set()
    unique = []
    for skill in skills:
        name = (skill.skill_name or "").strip().lower()
        desc = (skill.description or "").strip().lower()
        if not name and not desc:
            unique.append(skill)
            continue
        if (name, desc) in seen:
            continue
        seen.add((name, desc))
        unique.append(skill)
    return unique


def soft_skill_totals(skills: Iterable[SoftSkillScore]) -> Tuple[int, Decimal]:
    """
    (sum of weights, sum of weighted scores) over rated skills only.
    Weights are re-derived from the ratings, stored values are not trusted.
    """
    total_weight = 0
    total_weighted = Decimal('0')
    for skill in skills:
        if not skill.is_rated:
            continue
        scored = recalc_soft_skill(skill)
        total_weight += scored.weight
        total_weighted += _d(scored.weighted_score)
    return total_weight, total_weighted
