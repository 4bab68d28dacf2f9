"""Skill signal scoring facade.

Category rules live in `scoring_core.py`; this module applies them, clamps
and rounds the results, and aggregates them into the overall score.
"""

from __future__ import annotations

import logging
from typing import List

from .aggregator import calculate_overall_score, score_to_level
from .rules import CATEGORY_WEIGHTS, MAX_SCORE, MIN_SCORE, SKILL_CATEGORIES
from .schemas import AggregatedScore, SkillScore
from .scoring_core import CATEGORY_SCORERS, _clamp
from .signals import AssessmentSignals
from ...shared.utils import round_half_up

logger = logging.getLogger(__name__)


def calculate_skill_score(category: str, signals: AssessmentSignals) -> SkillScore:
    scorer = CATEGORY_SCORERS.get(category)
    if scorer is None:
        raise ValueError(f"Unknown skill category: {category}")

    raw = scorer(signals)
    score = int(round_half_up(_clamp(raw["score"], MIN_SCORE, MAX_SCORE)))
    return SkillScore(
        category=category,
        score=score,
        level=score_to_level(score),
        evidence=list(raw["evidence"]),
        notes=raw["notes"],
    )


def calculate_all_skill_scores(signals: AssessmentSignals) -> List[SkillScore]:
    """Return exactly one SkillScore per category, in canonical order.

    Missing sub-records never raise; the affected categories default to 3.
    """
    return [calculate_skill_score(category, signals) for category in SKILL_CATEGORIES]


def score_signals(signals: AssessmentSignals) -> AggregatedScore:
    skill_scores = calculate_all_skill_scores(signals)
    overall = calculate_overall_score(skill_scores)
    logger.info(
        "Scored assessment %s: overall=%s (%s)",
        signals.assessment_id,
        overall,
        ", ".join(f"{s.category}={s.score}" for s in skill_scores),
    )
    return AggregatedScore(
        overall_score=overall,
        overall_level=score_to_level(overall),
        skill_scores=skill_scores,
        weights_used=dict(CATEGORY_WEIGHTS),
    )
