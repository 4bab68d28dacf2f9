"""Skill scoring rules, one per category (all deterministic arithmetic).

GUARDRAIL: No model calls here. Every rule reads AssessmentSignals, starts
from DEFAULT_SCORE and records why the score moved (or did not) as evidence.
Rules return unrounded scores; clamping and rounding happen in service.py.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .rules import (
    ACTIVE_RATIO_PENALTY_BELOW,
    AI_TOOL_KEYWORDS,
    AI_TOOLS_PRESENT_SCORE,
    CI_FAILURE_PENALTY,
    CI_SUCCESS_BONUS,
    COLLABORATION_THRESHOLDS,
    DEFAULT_SCORE,
    DEFENSE_BONUS,
    DEFENSE_EXCHANGES_FOR_BONUS,
    MAX_SCORE,
    MIN_SCORE,
    NO_COLLABORATION_SCORE,
    STUCK_AVG_DURATION_PENALTY_SECONDS,
    STUCK_MOMENT_COUNT_PENALTY,
    TECHNICAL_DIFFICULTY_PENALTY_COUNT,
)
from .signals import AssessmentSignals
from ...shared.utils import round_half_up

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clamp(v: float, lo: float = MIN_SCORE, hi: float = MAX_SCORE) -> float:
    return max(lo, min(hi, float(v)))


def _fmt(v: float) -> str:
    """Render 4.0 as "4" and 3.5 as "3.5" in evidence strings."""
    return f"{float(v):g}"


def _result(score: float, evidence: List[str], notes: str) -> Dict[str, Any]:
    return {"score": score, "evidence": evidence, "notes": notes}


# ---------------------------------------------------------------------------
# Category scorers
# ---------------------------------------------------------------------------

def _score_communication(signals: AssessmentSignals) -> Dict[str, Any]:
    score: float = DEFAULT_SCORE
    evidence: List[str] = []
    hr = signals.hr_interview

    if hr is not None and hr.communication_score is not None:
        score = hr.communication_score
        evidence.append(f"HR interview communication score: {_fmt(hr.communication_score)}/5")
    if hr is not None and hr.professionalism_score is not None:
        evidence.append(f"Professional demeanor: {_fmt(hr.professionalism_score)}/5")

    conversations = signals.conversations
    if conversations is not None and conversations.coworker_chats:
        evidence.append(
            f"Engaged with {conversations.unique_coworkers_contacted} coworkers across "
            f"{conversations.total_coworker_interactions} interactions"
        )

    if not evidence:
        evidence.append("No HR interview communication score available; defaulted to adequate")

    notes = (hr.communication_notes if hr is not None else None) or (
        "Communication skills assessed during HR interview and coworker interactions."
    )
    return _result(score, evidence, notes)


def _score_problem_decomposition(signals: AssessmentSignals) -> Dict[str, Any]:
    score: float = DEFAULT_SCORE
    evidence: List[str] = []
    review = signals.code_review
    stuck_moments = signals.recording.stuck_moments if signals.recording is not None else []

    if review is not None and review.code_quality_score is not None and review.pattern_score is not None:
        score = (review.code_quality_score + review.pattern_score) / 2
        evidence.append(f"Code quality: {_fmt(review.code_quality_score)}/5, Patterns: {_fmt(review.pattern_score)}/5")
    else:
        evidence.append("No code quality/pattern scores available; defaulted to adequate")

    if stuck_moments:
        avg_stuck = sum(m.duration_seconds for m in stuck_moments) / len(stuck_moments)
        evidence.append(f"{len(stuck_moments)} stuck moments with avg duration {int(round_half_up(avg_stuck))}s")
        if len(stuck_moments) >= STUCK_MOMENT_COUNT_PENALTY or avg_stuck > STUCK_AVG_DURATION_PENALTY_SECONDS:
            score = max(MIN_SCORE, score - 1)

    return _result(score, evidence, "Problem decomposition assessed through code structure and working patterns.")


def _score_ai_leverage(signals: AssessmentSignals) -> Dict[str, Any]:
    evidence: List[str] = []
    recording = signals.recording
    ai_tools_used = bool(recording.ai_tools_used) if recording is not None else False
    tool_usage = recording.tool_usage if recording is not None else []
    ai_tools = [
        t.tool for t in tool_usage
        if any(keyword in t.tool.lower() for keyword in AI_TOOL_KEYWORDS)
    ]

    if ai_tools_used or ai_tools:
        score: float = AI_TOOLS_PRESENT_SCORE
        evidence.append(f"AI tools detected in workflow: {', '.join(ai_tools) or 'Yes'}")
    else:
        # Not using AI tools is neutral, not penalized
        score = DEFAULT_SCORE
        evidence.append("No AI tool usage detected")

    review = signals.code_review
    if review is not None and review.summary is not None and review.summary.ai_tool_usage_evident:
        evidence.append("AI-assisted code patterns detected in code review")

    return _result(score, evidence, "AI leverage assessed through tool usage patterns and code analysis.")


def _score_code_quality(signals: AssessmentSignals) -> Dict[str, Any]:
    score: float = DEFAULT_SCORE
    evidence: List[str] = []
    review = signals.code_review
    ci = signals.ci_status

    if review is not None:
        score = review.overall_score
        evidence.append(f"Code review overall score: {_fmt(review.overall_score)}/5")
        if review.code_quality_score is not None and review.security_score is not None:
            evidence.append(f"Quality: {_fmt(review.code_quality_score)}/5, Security: {_fmt(review.security_score)}/5")
        if review.summary is not None and review.summary.strengths:
            evidence.append(f"Strengths: {'; '.join(review.summary.strengths[:2])}")
    else:
        evidence.append("No code review available; defaulted to adequate")

    if ci is not None:
        evidence.append(f"CI status: {ci.overall_status}")
        if ci.overall_status == "success":
            score = min(MAX_SCORE, score + CI_SUCCESS_BONUS)
        elif ci.overall_status == "failure":
            score = max(MIN_SCORE, score - CI_FAILURE_PENALTY)

    notes = (
        review.summary.overall_assessment
        if review is not None and review.summary is not None and review.summary.overall_assessment
        else "Code quality assessed through automated review."
    )
    return _result(score, evidence, notes)


def _score_xfn_collaboration(signals: AssessmentSignals) -> Dict[str, Any]:
    evidence: List[str] = []
    conversations = signals.conversations
    notes = "Cross-functional collaboration assessed through coworker engagement patterns."

    if conversations is None:
        evidence.append("No conversation data available; defaulted to adequate")
        return _result(DEFAULT_SCORE, evidence, notes)

    contacted = conversations.unique_coworkers_contacted
    score: float = NO_COLLABORATION_SCORE
    for minimum, threshold_score in COLLABORATION_THRESHOLDS:
        if contacted >= minimum:
            score = threshold_score
            break

    if contacted >= 3:
        evidence.append(f"Excellent collaboration: contacted {contacted} different coworkers")
    elif contacted == 2:
        evidence.append(f"Good collaboration: contacted {contacted} coworkers")
    elif contacted == 1:
        evidence.append("Limited collaboration: only contacted 1 coworker")
    else:
        evidence.append("Minimal collaboration: did not reach out to coworkers")

    if conversations.total_coworker_interactions > 5:
        evidence.append(f"{conversations.total_coworker_interactions} total interactions with team")

    return _result(score, evidence, notes)


def _score_time_management(signals: AssessmentSignals) -> Dict[str, Any]:
    score: float = DEFAULT_SCORE
    evidence: List[str] = []
    recording = signals.recording

    if recording is not None and recording.focus_score is not None:
        score = recording.focus_score
        evidence.append(f"Focus score: {_fmt(recording.focus_score)}/5")

    active = recording.total_active_time if recording is not None else 0
    idle = recording.total_idle_time if recording is not None else 0
    if active > 0 and idle > 0:
        ratio = active / (active + idle)
        evidence.append(f"Active time ratio: {int(round_half_up(ratio * 100))}%")
        if ratio < ACTIVE_RATIO_PENALTY_BELOW:
            score = max(MIN_SCORE, score - 1)

    timing = signals.timing
    if timing is not None and timing.working_phase_seconds:
        evidence.append(f"Working phase duration: {int(round_half_up(timing.working_phase_seconds / 60))} minutes")

    if not evidence:
        evidence.append("No recording analysis available; defaulted to adequate")

    return _result(score, evidence, "Time management assessed through focus patterns and activity distribution.")


def _score_technical_decision_making(signals: AssessmentSignals) -> Dict[str, Any]:
    score: float = DEFAULT_SCORE
    evidence: List[str] = []
    review = signals.code_review
    stuck_moments = signals.recording.stuck_moments if signals.recording is not None else []

    if review is not None and review.pattern_score is not None:
        score = review.pattern_score
        evidence.append(f"Pattern/architecture score: {_fmt(review.pattern_score)}/5")
    if review is not None and review.maintainability_score is not None:
        score = (score + review.maintainability_score) / 2
        evidence.append(f"Maintainability: {_fmt(review.maintainability_score)}/5")

    technical = [m for m in stuck_moments if m.potential_cause == "technical_difficulty"]
    if len(technical) > TECHNICAL_DIFFICULTY_PENALTY_COUNT:
        score = max(MIN_SCORE, score - 1)
        evidence.append(f"{len(technical)} technical difficulties encountered")

    if not evidence:
        evidence.append("No architecture/maintainability review available; defaulted to adequate")

    return _result(
        score,
        evidence,
        "Technical decision-making assessed through code architecture and problem-solving patterns.",
    )


def _score_presentation(signals: AssessmentSignals) -> Dict[str, Any]:
    score: float = DEFAULT_SCORE
    evidence: List[str] = []
    hr = signals.hr_interview
    defense_length = len(signals.conversations.defense_transcript) if signals.conversations is not None else 0

    if hr is not None and hr.communication_score is not None:
        score = hr.communication_score
        evidence.append(f"Interview communication: {_fmt(hr.communication_score)}/5")
    if hr is not None and hr.technical_depth_score is not None:
        score = (score + hr.technical_depth_score) / 2
        evidence.append(f"Technical depth in discussions: {_fmt(hr.technical_depth_score)}/5")

    if defense_length > 0:
        evidence.append(f"Defense call: {defense_length} exchanges")
        if defense_length >= DEFENSE_EXCHANGES_FOR_BONUS:
            score = min(MAX_SCORE, score + DEFENSE_BONUS)

    if not evidence:
        evidence.append("No interview depth or defense call data available; defaulted to adequate")

    return _result(score, evidence, "Presentation skills assessed through interview and defense performance.")


CATEGORY_SCORERS = {
    "communication": _score_communication,
    "problem_decomposition": _score_problem_decomposition,
    "ai_leverage": _score_ai_leverage,
    "code_quality": _score_code_quality,
    "xfn_collaboration": _score_xfn_collaboration,
    "time_management": _score_time_management,
    "technical_decision_making": _score_technical_decision_making,
    "presentation": _score_presentation,
}
