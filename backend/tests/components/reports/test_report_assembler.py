"""Report assembly: narrative fallbacks, metrics, formatting and persistence."""

import json
import math
from datetime import datetime, timezone

import pytest

from signal_engine.components.reports import assembler
from signal_engine.components.reports.assembler import build_metrics, generate_assessment_report
from signal_engine.components.reports.formatting import format_report_for_display
from signal_engine.components.reports.narrative import FALLBACK_SUMMARY, generate_recommendations
from signal_engine.components.reports.repository import get_report_row, save_report
from signal_engine.components.reports.schemas import NarrativeFeedback
from signal_engine.components.scoring.schemas import AggregatedScore, SkillScore
from signal_engine.components.scoring.signals import (
    AssessmentSignals,
    CIStatus,
    CodeReviewSignals,
    ConversationSignals,
    HRSignals,
    RecordingSignals,
    TimingSignals,
)
from signal_engine.platform.config import settings


class FakeClaude:
    """Synchronous stand-in for ClaudeService.generate_json."""

    def __init__(self, *payloads):
        self.payloads = list(payloads)
        self.prompts = []

    def generate_json(self, prompt, system=None):
        self.prompts.append(prompt)
        payload = self.payloads.pop(0)
        if isinstance(payload, dict) and "success" in payload:
            return payload
        content = payload if isinstance(payload, str) else json.dumps(payload)
        return {"success": True, "content": content, "model": "fake", "error": None}


NARRATIVE = {
    "overall_summary": "A careful engineer who verified every change.",
    "strengths": ["Clear status updates"],
    "areas_for_improvement": ["Time boxing"],
    "notable_observations": ["Wrote a failing test first"],
}
RECOMMENDATIONS = {
    "recommendations": [
        {
            "category": "time_management",
            "priority": "high",
            "title": "Time-box investigation",
            "description": "Long detours delayed the fix.",
            "actionable_steps": ["Set a 20 minute timer", "Escalate after it expires"],
        }
    ]
}


def _signals(**parts):
    return AssessmentSignals(assessment_id="asmt-9", user_id="user-9", **parts)


async def test_report_with_claude_text():
    claude = FakeClaude(NARRATIVE, "```json\n" + json.dumps(RECOMMENDATIONS) + "\n```")

    report = await generate_assessment_report(_signals(), candidate_name="Ada", claude=claude)

    assert report.narrative.overall_summary == NARRATIVE["overall_summary"]
    assert report.recommendations[0].title == "Time-box investigation"
    assert report.narrative_fallback is False
    assert report.recommendations_fallback is False
    assert report.overall_score == 3.0
    assert report.overall_level == "adequate"
    assert len(report.skill_scores) == 8
    assert "HR interview data not available." in claude.prompts[0]
    assert "Wrote a failing test first" in claude.prompts[1]


async def test_missing_api_key_uses_fallbacks():
    report = await generate_assessment_report(_signals())

    assert report.narrative_fallback is True
    assert report.recommendations_fallback is True
    assert report.narrative.overall_summary == FALLBACK_SUMMARY
    assert report.narrative.strengths == []
    assert report.narrative.areas_for_improvement == []
    assert [(r.category, r.priority) for r in report.recommendations] == [
        ("communication", "high"),
        ("problem_decomposition", "medium"),
        ("ai_leverage", "low"),
    ]
    first = report.recommendations[0]
    assert first.title == "Improve communication"
    assert first.actionable_steps == [
        "Review feedback on communication",
        "Practice with similar scenarios",
        "Seek mentorship in this area",
    ]


async def test_fallback_narrative_reflects_scores():
    signals = _signals(
        hr_interview=HRSignals(communication_score=5, technical_depth_score=5),
        conversations=ConversationSignals(unique_coworkers_contacted=0),
    )

    report = await generate_assessment_report(signals)

    assert "Strong communication skills" in report.narrative.strengths
    assert "Strong presentation skills" in report.narrative.strengths
    assert report.narrative.areas_for_improvement == ["xfn collaboration needs development"]
    assert report.recommendations[0].category == "xfn_collaboration"


@pytest.mark.parametrize(
    "payloads",
    [
        ("not json", RECOMMENDATIONS),
        ({"strengths": ["missing summary"]}, RECOMMENDATIONS),
        ({"success": False, "content": "", "model": None, "error": "overloaded"}, RECOMMENDATIONS),
    ],
)
async def test_bad_narrative_falls_back_independently(payloads):
    report = await generate_assessment_report(_signals(), claude=FakeClaude(*payloads))

    assert report.narrative_fallback is True
    assert report.narrative.overall_summary == FALLBACK_SUMMARY
    assert report.recommendations_fallback is False


async def test_empty_recommendation_list_falls_back():
    report = await generate_assessment_report(_signals(), claude=FakeClaude(NARRATIVE, {"recommendations": []}))

    assert report.narrative_fallback is False
    assert report.recommendations_fallback is True
    assert len(report.recommendations) == 3


async def test_disabled_narrative_generation_skips_claude(monkeypatch):
    monkeypatch.setattr(settings, "MVP_DISABLE_NARRATIVE_GENERATION", True)
    claude = FakeClaude(NARRATIVE, RECOMMENDATIONS)

    report = await generate_assessment_report(_signals(), claude=claude)

    assert claude.prompts == []
    assert report.narrative_fallback is True
    assert report.recommendations_fallback is True


async def test_nan_overall_score_is_reported_as_missing(monkeypatch):
    monkeypatch.setattr(
        assembler,
        "score_signals",
        lambda signals: AggregatedScore(
            overall_score=math.nan, overall_level="needs_improvement", skill_scores=[], weights_used={}
        ),
    )

    report = await generate_assessment_report(_signals())

    assert report.overall_score is None
    assert report.overall_level is None
    assert report.recommendations == []
    assert "## Overall Score: not available" in format_report_for_display(report)


async def test_recommendation_prompt_lists_three_lowest_categories_as_weaknesses():
    scores = [
        SkillScore(category=category, score=score, level="strong", evidence=[f"{category} evidence"])
        for category, score in [
            ("communication", 5),
            ("problem_decomposition", 4),
            ("ai_leverage", 5),
            ("code_quality", 4),
            ("xfn_collaboration", 5),
            ("time_management", 5),
            ("technical_decision_making", 4),
            ("presentation", 5),
        ]
    ]
    claude = FakeClaude(RECOMMENDATIONS)

    await generate_recommendations(scores, NarrativeFeedback(overall_summary="ok"), claude=claude)

    weaknesses = claude.prompts[0].split("### Notable Weaknesses")[1].split("### Key Observations")[0]
    assert [line.split(":")[0] for line in weaknesses.strip().splitlines()] == [
        "problem_decomposition",
        "code_quality",
        "technical_decision_making",
    ]


@pytest.mark.parametrize(
    "ci,expected",
    [
        (None, "unknown"),
        (CIStatus(overall_status="success", checks_count=4), "passing"),
        (CIStatus(overall_status="failure", checks_count=4), "failing"),
        (CIStatus(overall_status="pending", checks_count=0), "none"),
        (CIStatus(overall_status="pending", checks_count=2), "unknown"),
        (CIStatus(overall_status="unknown", checks_count=1), "unknown"),
    ],
)
def test_ci_status_maps_to_tests_status(ci, expected):
    assert assembler.tests_status(ci) == expected


def test_build_metrics():
    signals = _signals(
        timing=TimingSignals(
            started_at=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
            total_duration_seconds=3630,
            working_phase_seconds=1770,
        ),
        conversations=ConversationSignals(unique_coworkers_contacted=2),
        recording=RecordingSignals(ai_tools_used=True),
        code_review=CodeReviewSignals(overall_score=3.5),
        ci_status=CIStatus(overall_status="success", checks_count=2),
    )

    metrics = build_metrics(signals)

    assert metrics.total_duration_minutes == 61
    assert metrics.working_phase_minutes == 30
    assert metrics.coworkers_contacted == 2
    assert metrics.ai_tools_used is True
    assert metrics.tests_status == "passing"
    assert metrics.code_review_score == 3.5


def test_metrics_without_signals():
    metrics = build_metrics(_signals())
    assert metrics.total_duration_minutes is None
    assert metrics.working_phase_minutes is None
    assert metrics.coworkers_contacted == 0
    assert metrics.ai_tools_used is False
    assert metrics.tests_status == "unknown"
    assert metrics.code_review_score is None


async def test_markdown_rendering():
    claude = FakeClaude(NARRATIVE, RECOMMENDATIONS)
    report = await generate_assessment_report(
        _signals(code_review=CodeReviewSignals(overall_score=4)), candidate_name="Ada", claude=claude
    )

    text = format_report_for_display(report)

    assert text.startswith("# Assessment Report")
    assert "Candidate: Ada" in text
    assert f"## Overall Score: {report.overall_score}/5 ({report.overall_level})" in text
    assert "- **code_quality**: 4/5 (strong)" in text
    assert "## Strengths\n- Clear status updates" in text
    assert "## Areas for Improvement\n- Time boxing" in text
    assert "### Time-box investigation (high priority)" in text
    assert "**Action steps:**\n- Set a 20 minute timer" in text
    assert "- Code review score: 4.0/5" in text
    assert "- AI tools used: No" in text


async def test_save_report_upserts(db):
    first = await generate_assessment_report(_signals())
    row = await save_report(db, first, user_id="user-9")
    assert row.overall_score == 3.0
    assert row.report["assessment_id"] == "asmt-9"

    second = await generate_assessment_report(
        _signals(hr_interview=HRSignals(communication_score=5)), candidate_name="Ada"
    )
    await save_report(db, second, user_id="user-9")

    stored = await get_report_row(db, "asmt-9")
    assert stored.id == row.id
    assert stored.report["candidate_name"] == "Ada"
    assert stored.overall_score == second.overall_score
    assert await get_report_row(db, "unknown") is None
