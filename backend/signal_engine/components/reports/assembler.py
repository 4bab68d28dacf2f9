"""Assemble the final assessment report from raw signals."""

from __future__ import annotations

import logging
import math
from typing import Optional

from .narrative import generate_narrative_feedback, generate_recommendations
from .schemas import AssessmentReport, ReportMetrics
from ..integrations.claude.service import ClaudeService
from ..scoring.service import score_signals
from ..scoring.signals import AssessmentSignals, CIStatus
from ...shared.utils import round_half_up, utcnow

logger = logging.getLogger(__name__)

_CI_TO_TESTS_STATUS = {"success": "passing", "failure": "failing"}


def tests_status(ci: Optional[CIStatus]) -> str:
    if ci is None:
        return "unknown"
    if ci.overall_status in _CI_TO_TESTS_STATUS:
        return _CI_TO_TESTS_STATUS[ci.overall_status]
    if ci.checks_count == 0:
        return "none"
    return "unknown"


def _minutes(seconds: Optional[float]) -> Optional[int]:
    if not seconds:
        return None
    return int(round_half_up(seconds / 60))


def build_metrics(signals: AssessmentSignals) -> ReportMetrics:
    timing = signals.timing
    return ReportMetrics(
        total_duration_minutes=_minutes(timing.total_duration_seconds) if timing else None,
        working_phase_minutes=_minutes(timing.working_phase_seconds) if timing else None,
        coworkers_contacted=signals.conversations.unique_coworkers_contacted if signals.conversations else 0,
        ai_tools_used=bool(signals.recording and signals.recording.ai_tools_used),
        tests_status=tests_status(signals.ci_status),
        code_review_score=signals.code_review.overall_score if signals.code_review else None,
    )


async def generate_assessment_report(
    signals: AssessmentSignals,
    candidate_name: Optional[str] = None,
    claude: Optional[ClaudeService] = None,
) -> AssessmentReport:
    """Score every category, aggregate, and attach narrative, recommendations and metrics.

    Narrative and recommendation failures degrade to deterministic text; the
    report itself is always produced.
    """
    aggregated = score_signals(signals)
    narrative, narrative_fallback = await generate_narrative_feedback(signals, aggregated.skill_scores, claude)
    recommendations, recommendations_fallback = await generate_recommendations(
        aggregated.skill_scores, narrative, claude
    )

    overall = aggregated.overall_score
    has_overall = not math.isnan(overall)
    report = AssessmentReport(
        generated_at=utcnow().isoformat(),
        assessment_id=signals.assessment_id,
        candidate_name=candidate_name,
        overall_score=overall if has_overall else None,
        overall_level=aggregated.overall_level if has_overall else None,
        skill_scores=aggregated.skill_scores,
        narrative=narrative,
        recommendations=recommendations,
        metrics=build_metrics(signals),
        narrative_fallback=narrative_fallback,
        recommendations_fallback=recommendations_fallback,
    )
    logger.info(
        "Generated report for assessment %s (overall=%s, narrative_fallback=%s, recommendations_fallback=%s)",
        signals.assessment_id,
        report.overall_score,
        narrative_fallback,
        recommendations_fallback,
    )
    return report
