"""Prompt templates and signal formatters for narrative and recommendation text."""

from __future__ import annotations

from typing import List, Optional

from ..scoring.schemas import SkillScore
from ..scoring.signals import (
    AssessmentSignals,
    CodeReviewSignals,
    ConversationSignals,
    HRSignals,
    RecordingSignals,
    TimingSignals,
)
from ...shared.utils import humanize_slug, round_half_up

NARRATIVE_PROMPT = """You are an expert assessment evaluator generating feedback for a developer candidate who completed a realistic "day at work" simulation.

Based on the following assessment data, generate:
1. An overall summary (2-3 paragraphs) that captures the candidate's overall performance
2. Top 3-5 specific strengths demonstrated
3. Top 3-5 areas for improvement with constructive framing
4. 2-3 notable observations (interesting patterns, behaviors, or choices)

Be specific, cite evidence, and maintain a professional but encouraging tone. Focus on actionable insights.

## Assessment Data

### Skill Scores
{skill_scores}

### HR Interview
{hr_interview}

### Code Review
{code_review}

### Work Session Observations
{recording}

### Collaboration
{collaboration}

### Timing
{timing}

## Response Format
Respond in JSON format:
{
  "overall_summary": "<2-3 paragraph executive summary>",
  "strengths": ["<strength 1>", "<strength 2>"],
  "areas_for_improvement": ["<area 1>", "<area 2>"],
  "notable_observations": ["<observation 1>", "<observation 2>"]
}

IMPORTANT: Return ONLY valid JSON, no additional text or markdown formatting."""

RECOMMENDATIONS_PROMPT = """You are a career coach generating actionable recommendations for a developer based on their assessment results.

For each area needing improvement, provide:
1. A clear, specific recommendation title
2. A description explaining why this matters
3. 2-3 actionable steps the candidate can take

Focus on the lowest-scoring skills and most impactful improvements. Be constructive and practical.

## Assessment Data

### Skill Scores (lowest to highest)
{skill_scores}

### Notable Weaknesses
{weaknesses}

### Key Observations
{observations}

## Response Format
Respond in JSON format with 3-5 recommendations:
{
  "recommendations": [
    {
      "category": "<one of: communication, problem_decomposition, ai_leverage, code_quality, xfn_collaboration, time_management, technical_decision_making, presentation>",
      "priority": "<high|medium|low>",
      "title": "<clear, specific title>",
      "description": "<why this matters, 1-2 sentences>",
      "actionable_steps": ["<step 1>", "<step 2>", "<step 3>"]
    }
  ]
}

IMPORTANT: Return ONLY valid JSON, no additional text or markdown formatting."""


def _fmt(value: float) -> str:
    return f"{float(value):g}"


def _minutes(seconds: float) -> int:
    return int(round_half_up(seconds / 60))


def format_skill_scores(skill_scores: List[SkillScore]) -> str:
    return "\n".join(
        f"- {humanize_slug(s.category)}: {s.score}/5 ({s.level})\n  Evidence: {'; '.join(s.evidence)}"
        for s in skill_scores
    )


def format_hr_interview(hr: Optional[HRSignals]) -> str:
    if hr is None:
        return "HR interview data not available."
    parts = []
    if hr.communication_score:
        parts.append(f"Communication: {_fmt(hr.communication_score)}/5")
    if hr.professionalism_score:
        parts.append(f"Professionalism: {_fmt(hr.professionalism_score)}/5")
    if hr.technical_depth_score:
        parts.append(f"Technical depth: {_fmt(hr.technical_depth_score)}/5")
    if hr.cv_consistency_score:
        parts.append(f"CV consistency: {_fmt(hr.cv_consistency_score)}/5")
    if hr.communication_notes:
        parts.append(f"Notes: {hr.communication_notes}")
    if hr.culture_fit_notes:
        parts.append(f"Culture fit: {hr.culture_fit_notes}")
    if hr.interview_duration_seconds:
        parts.append(f"Duration: {_minutes(hr.interview_duration_seconds)} minutes")
    return "\n".join(parts) if parts else "HR interview completed, no detailed scores available."


def format_code_review(review: Optional[CodeReviewSignals]) -> str:
    if review is None:
        return "Code review not available."
    parts = [f"Overall: {_fmt(review.overall_score)}/5"]
    for label, value in (
        ("Quality", review.code_quality_score),
        ("Patterns", review.pattern_score),
        ("Security", review.security_score),
        ("Maintainability", review.maintainability_score),
    ):
        if value is not None:
            parts.append(f"{label}: {_fmt(value)}/5")
    summary = review.summary
    if summary is not None:
        if summary.strengths:
            parts.append(f"Strengths: {'; '.join(summary.strengths)}")
        if summary.areas_for_improvement:
            parts.append(f"Areas for improvement: {'; '.join(summary.areas_for_improvement)}")
        if summary.test_coverage:
            parts.append(f"Test coverage: {summary.test_coverage}")
    return "\n".join(parts)


def format_recording(recording: Optional[RecordingSignals]) -> str:
    if recording is None:
        return "Screen recording analysis not available."
    parts = []
    if recording.focus_score is not None:
        parts.append(f"Focus score: {_fmt(recording.focus_score)}/5")
    parts.append(f"Active time: {_minutes(recording.total_active_time)} min")
    parts.append(f"Idle time: {_minutes(recording.total_idle_time)} min")
    parts.append(f"AI tools used: {'Yes' if recording.ai_tools_used else 'No'}")
    if recording.tool_usage:
        parts.append(f"Tools used: {', '.join(t.tool for t in recording.tool_usage[:5])}")
    if recording.stuck_moments:
        parts.append(f"Stuck moments: {len(recording.stuck_moments)}")
        causes = list(dict.fromkeys(m.potential_cause for m in recording.stuck_moments))
        parts.append(f"Common causes: {', '.join(causes)}")
    if recording.key_observations:
        parts.append(f"Key observations: {'; '.join(recording.key_observations[:3])}")
    return "\n".join(parts)


def format_collaboration(conversations: Optional[ConversationSignals]) -> str:
    if conversations is None:
        return "Conversation data not available."
    parts = [
        f"Coworkers contacted: {conversations.unique_coworkers_contacted}",
        f"Total interactions: {conversations.total_coworker_interactions}",
    ]
    if conversations.coworker_chats:
        chats = "; ".join(
            f"{c.coworker_name} ({c.coworker_role}): {len(c.messages)} messages" for c in conversations.coworker_chats
        )
        parts.append(f"Interactions: {chats}")
    if conversations.defense_transcript:
        parts.append(f"Defense call: {len(conversations.defense_transcript)} exchanges")
    return "\n".join(parts)


def format_timing(timing: Optional[TimingSignals]) -> str:
    if timing is None:
        return "Timing data not available."
    parts = [f"Started: {timing.started_at.isoformat()}"]
    if timing.completed_at:
        parts.append(f"Completed: {timing.completed_at.isoformat()}")
    if timing.total_duration_seconds:
        parts.append(f"Total duration: {_minutes(timing.total_duration_seconds)} minutes")
    if timing.working_phase_seconds:
        parts.append(f"Working phase: {_minutes(timing.working_phase_seconds)} minutes")
    return "\n".join(parts)


def build_narrative_prompt(signals: AssessmentSignals, skill_scores: List[SkillScore]) -> str:
    replacements = {
        "{skill_scores}": format_skill_scores(skill_scores),
        "{hr_interview}": format_hr_interview(signals.hr_interview),
        "{code_review}": format_code_review(signals.code_review),
        "{recording}": format_recording(signals.recording),
        "{collaboration}": format_collaboration(signals.conversations),
        "{timing}": format_timing(signals.timing),
    }
    prompt = NARRATIVE_PROMPT
    for token, value in replacements.items():
        prompt = prompt.replace(token, value)
    return prompt


def build_recommendations_prompt(
    sorted_scores: List[SkillScore],
    weaknesses: List[SkillScore],
    observations: List[str],
) -> str:
    return (
        RECOMMENDATIONS_PROMPT.replace(
            "{skill_scores}", "\n".join(f"{s.category}: {s.score}/5 - {s.notes}" for s in sorted_scores)
        )
        .replace("{weaknesses}", "\n".join(f"{s.category}: {'; '.join(s.evidence)}" for s in weaknesses))
        .replace("{observations}", "\n".join(observations) or "None recorded.")
    )
