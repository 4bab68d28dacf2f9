"""Weighted overall score and score-to-level mapping."""

from __future__ import annotations

import math
from typing import Dict, Iterable

from .rules import CATEGORY_WEIGHTS, LEVEL_THRESHOLDS, LOWEST_LEVEL
from .schemas import SkillScore
from ...shared.utils import round_half_up


def score_to_level(score: float) -> str:
    """Map any 1-5 score (category or overall) to its qualitative level.

    Each boundary belongs to the higher label: 4.5 is exceptional, 4.49 strong.
    NaN maps to the lowest level.
    """
    for minimum, level in LEVEL_THRESHOLDS:
        if score >= minimum:
            return level
    return LOWEST_LEVEL


def calculate_overall_score(
    skill_scores: Iterable[SkillScore],
    weights: Dict[str, float] | None = None,
) -> float:
    """Weighted mean of the supplied category scores, rounded to one decimal.

    Only the weights of categories present are used as the denominator. An
    empty input returns ``math.nan``; callers must check with ``math.isnan``.
    """
    table = weights or CATEGORY_WEIGHTS
    weighted_sum = 0.0
    total_weight = 0.0
    for skill in skill_scores:
        weight = table.get(skill.category, 0.0)
        weighted_sum += skill.score * weight
        total_weight += weight

    if total_weight == 0:
        return math.nan
    return round_half_up(weighted_sum / total_weight, 1)
