"""Markdown rendering of an assessment report."""

from __future__ import annotations

from typing import List

from .schemas import AssessmentReport


def _bullets(items: List[str]) -> List[str]:
    return [f"- {item}" for item in items]


def format_report_for_display(report: AssessmentReport) -> str:
    lines = ["# Assessment Report", "", f"Generated: {report.generated_at}"]
    if report.candidate_name:
        lines.append(f"Candidate: {report.candidate_name}")
    lines.append("")

    if report.overall_score is None:
        lines.append("## Overall Score: not available")
    else:
        lines.append(f"## Overall Score: {report.overall_score}/5 ({report.overall_level})")
    lines.append("")

    lines.append("## Skill Scores")
    lines.extend(f"- **{s.category}**: {s.score}/5 ({s.level})" for s in report.skill_scores)
    lines.append("")

    lines.extend(["## Summary", report.narrative.overall_summary, ""])

    if report.narrative.strengths:
        lines.append("## Strengths")
        lines.extend(_bullets(report.narrative.strengths))
        lines.append("")

    if report.narrative.areas_for_improvement:
        lines.append("## Areas for Improvement")
        lines.extend(_bullets(report.narrative.areas_for_improvement))
        lines.append("")

    if report.recommendations:
        lines.append("## Recommendations")
        for rec in report.recommendations:
            lines.append(f"### {rec.title} ({rec.priority} priority)")
            lines.append(rec.description)
            if rec.actionable_steps:
                lines.append("**Action steps:**")
                lines.extend(_bullets(rec.actionable_steps))
            lines.append("")

    metrics = report.metrics
    lines.append("## Metrics")
    if metrics.total_duration_minutes is not None:
        lines.append(f"- Total duration: {metrics.total_duration_minutes} minutes")
    if metrics.working_phase_minutes is not None:
        lines.append(f"- Working phase: {metrics.working_phase_minutes} minutes")
    lines.append(f"- Coworkers contacted: {metrics.coworkers_contacted}")
    lines.append(f"- AI tools used: {'Yes' if metrics.ai_tools_used else 'No'}")
    lines.append(f"- Tests status: {metrics.tests_status}")
    if metrics.code_review_score is not None:
        lines.append(f"- Code review score: {metrics.code_review_score}/5")

    return "\n".join(lines)
