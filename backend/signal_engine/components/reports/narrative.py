"""
Narrative feedback and recommendation generation.

Both generators call Claude for prose and fall back to deterministic text
derived from the skill scores whenever the call fails, the response does
not validate, or narrative generation is disabled.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError

from .prompts import build_narrative_prompt, build_recommendations_prompt
from .schemas import NarrativeFeedback, Recommendation, RecommendationList
from ..integrations.claude.service import ClaudeService
from ..scoring.schemas import SkillScore
from ..scoring.signals import AssessmentSignals
from ...platform.config import settings
from ...shared.utils import humanize_slug, loads_fenced_json

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = (
    "The candidate completed the assessment. Detailed narrative analysis is not available "
    "due to a processing error."
)
FALLBACK_PRIORITIES = ("high", "medium", "low")


def fallback_narrative(skill_scores: List[SkillScore]) -> NarrativeFeedback:
    return NarrativeFeedback(
        overall_summary=FALLBACK_SUMMARY,
        strengths=[f"Strong {humanize_slug(s.category)} skills" for s in skill_scores if s.score >= 4],
        areas_for_improvement=[f"{humanize_slug(s.category)} needs development" for s in skill_scores if s.score <= 2],
        notable_observations=[],
    )


def fallback_recommendations(skill_scores: List[SkillScore]) -> List[Recommendation]:
    """One recommendation per lowest-scoring category, at most three."""
    lowest = sorted(skill_scores, key=lambda s: s.score)[: len(FALLBACK_PRIORITIES)]
    recommendations = []
    for priority, score in zip(FALLBACK_PRIORITIES, lowest):
        label = humanize_slug(score.category)
        recommendations.append(
            Recommendation(
                category=score.category,
                priority=priority,
                title=f"Improve {label}",
                description=score.notes,
                actionable_steps=[
                    f"Review feedback on {label}",
                    "Practice with similar scenarios",
                    "Seek mentorship in this area",
                ],
            )
        )
    return recommendations


def _default_claude() -> ClaudeService:
    return ClaudeService(api_key=settings.ANTHROPIC_API_KEY)


async def _ask_claude(claude: Optional[ClaudeService], prompt: str):
    """Run the blocking Anthropic call off the event loop and decode its JSON body."""
    if claude is None and not settings.ANTHROPIC_API_KEY:
        raise RuntimeError("ANTHROPIC_API_KEY is not configured")
    service = claude or _default_claude()
    result = await asyncio.to_thread(service.generate_json, prompt)
    if not result.get("success"):
        raise RuntimeError(result.get("error") or "Claude request failed")
    return loads_fenced_json(result.get("content") or "")


async def generate_narrative_feedback(
    signals: AssessmentSignals,
    skill_scores: List[SkillScore],
    claude: Optional[ClaudeService] = None,
) -> Tuple[NarrativeFeedback, bool]:
    """Return ``(narrative, used_fallback)``."""
    if settings.mvp_flags.disable_narrative_generation:
        return fallback_narrative(skill_scores), True

    try:
        payload = await _ask_claude(claude, build_narrative_prompt(signals, skill_scores))
        return NarrativeFeedback.model_validate(payload), False
    except (ValueError, ValidationError, RuntimeError) as exc:
        logger.warning("Narrative generation failed for %s, using fallback: %s", signals.assessment_id, exc)
        return fallback_narrative(skill_scores), True


async def generate_recommendations(
    skill_scores: List[SkillScore],
    narrative: NarrativeFeedback,
    claude: Optional[ClaudeService] = None,
) -> Tuple[List[Recommendation], bool]:
    """Return ``(recommendations, used_fallback)``."""
    if settings.mvp_flags.disable_narrative_generation:
        return fallback_recommendations(skill_scores), True

    sorted_scores = sorted(skill_scores, key=lambda s: s.score)
    weaknesses = sorted_scores[: len(FALLBACK_PRIORITIES)]
    prompt = build_recommendations_prompt(sorted_scores, weaknesses, narrative.notable_observations)
    try:
        payload = await _ask_claude(claude, prompt)
        recommendations = RecommendationList.model_validate(payload).recommendations
    except (ValueError, ValidationError, RuntimeError) as exc:
        logger.warning("Recommendation generation failed, using fallback: %s", exc)
        return fallback_recommendations(skill_scores), True
    if not recommendations:
        return fallback_recommendations(skill_scores), True
    return recommendations, False
