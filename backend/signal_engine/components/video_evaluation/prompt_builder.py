"""Rubric evaluation prompt, generated from database rubric data."""

from __future__ import annotations

from typing import List

from .schemas import (
    RUBRIC_EVALUATION_PROMPT_VERSION,
    DimensionWithRubric,
    RedFlagData,
    RubricPromptInput,
    VideoContext,
)


def _format_number(value: float) -> str:
    return f"{float(value):g}"


def build_dimension_section(dimension: DimensionWithRubric, index: int) -> str:
    header = f"### {index + 1}. {dimension.slug.upper()} - {dimension.name}\n{dimension.description}\n"
    levels = []
    for level in sorted(dimension.levels, key=lambda lvl: lvl.level):
        bullets = "\n".join(f"  - {e}" for e in level.evidence)
        levels.append(
            f"**Level {level.level} - {level.label}**\n\n"
            f"*Pattern: {level.pattern}*\n\n"
            f"Evidence may include:\n{bullets}"
        )
    return header + "\n" + "\n\n".join(levels)


def build_red_flags_section(red_flags: List[RedFlagData]) -> str:
    if not red_flags:
        return ""
    flags = "\n".join(f"- **{f.name}** (`{f.slug}`): {f.description}" for f in red_flags)
    return (
        "## RED FLAGS\n\n"
        "These are binary indicators (present/not present). Report ANY that are observed, "
        "regardless of dimension scores.\n\n"
        f"{flags}"
    )


def build_video_context_section(context: VideoContext | None) -> str:
    if context is None or context.is_empty():
        return ""
    lines = []
    if context.video_duration_minutes:
        lines.append(f"- Video Duration: {_format_number(context.video_duration_minutes)} minutes")
    if context.task_description:
        lines.append(f"- Task Description: {context.task_description}")
    if context.expected_outcomes:
        outcomes = "\n".join(f"  - {o}" for o in context.expected_outcomes)
        lines.append(f"- Expected Outcomes:\n{outcomes}")
    return "---\n\n## VIDEO CONTEXT\n\n" + "\n".join(lines) + "\n\n---\n"


def build_output_schema(dimensions: List[DimensionWithRubric], red_flags: List[RedFlagData]) -> str:
    dimension_entries = ",\n".join(
        f'''    "{d.slug}": {{
      "score": "<integer 1-4 or null if insufficient evidence>",
      "summary": "<1 sentence summarizing this dimension's performance>",
      "confidence": "high" | "medium" | "low",
      "rationale": "<why this score was given, with specific evidence>",
      "observable_behaviors": [
        {{ "timestamp": "MM:SS", "behavior": "<specific observed behavior at this timestamp>" }}
      ],
      "trainable_gap": "<boolean - true if this is a skill that can be improved>",
      "green_flags": ["<positive signal>"],
      "red_flags": ["<concern>"]
    }}'''
        for d in dimensions
    )
    if red_flags:
        red_flag_schema = '''  "detected_red_flags": [
    {
      "slug": "<red flag slug from the list above>",
      "evidence": "<specific evidence observed>",
      "timestamps": ["MM:SS"]
    }
  ],'''
    else:
        red_flag_schema = '  "detected_red_flags": [],'

    return f'''```json
{{
  "evaluation_version": "{RUBRIC_EVALUATION_PROMPT_VERSION}",
  "overall_score": "<number 1.0-4.0, one decimal place - weighted average of non-null dimension scores>",
  "dimension_scores": {{
{dimension_entries}
  }},
{red_flag_schema}
  "top_strengths": [
    {{ "dimension": "<dimension name>", "score": "<integer 1-4>", "description": "<why this is a strength>" }}
  ],
  "growth_areas": [
    {{ "dimension": "<dimension name>", "score": "<integer 1-4>", "description": "<the gap and what improvement looks like>" }}
  ],
  "overall_summary": "<5-8 complete sentences synthesizing the candidate's performance across all dimensions>",
  "evaluation_confidence": "high" | "medium" | "low",
  "insufficient_evidence_notes": "<explanation if any dimensions could not be fully evaluated, or null>"
}}
```'''


VALIDATION_CHECKLIST = """## VALIDATION CHECKLIST

Before outputting your evaluation, verify:
- [ ] Every scored dimension has at least one observable_behavior with a timestamp
- [ ] Each observable_behavior is a {timestamp, behavior} object, NOT a plain string
- [ ] Every dimension has a concise 1-sentence summary
- [ ] No behaviors are cited that weren't visible in the recording
- [ ] Scores are independent (a score in one area doesn't influence another)
- [ ] overall_score is the weighted average of all non-null dimension scores
- [ ] top_strengths contains 2-4 items from highest-scoring dimensions
- [ ] growth_areas contains 1-3 items from lowest-scoring dimensions
- [ ] Confidence is set to "low" for any dimension with limited evidence

IMPORTANT: Return ONLY valid JSON. No additional text, explanation, or markdown code blocks around the response."""


def build_rubric_evaluation_prompt(rubric: RubricPromptInput) -> str:
    dimension_sections = "\n\n---\n\n".join(
        build_dimension_section(d, i) for i, d in enumerate(rubric.dimensions)
    )
    sections = [
        f"You are an objective, evidence-based evaluator assessing a candidate's recorded work session "
        f"for a **{rubric.role_family_name}** role. Your evaluation must be fair, consistent, and grounded "
        f"exclusively in observable behaviors.",
        """## CRITICAL RULES

### Evidence Requirements
- You MUST cite specific timestamps (MM:SS format) for EVERY behavior you score
- Each observable behavior MUST be paired with its timestamp as a {timestamp, behavior} object
- You MUST only evaluate behaviors that are DIRECTLY OBSERVABLE in the recording
- If a dimension cannot be evaluated due to insufficient evidence, score it as null and set confidence to "low"

### Scoring Principles
- Each dimension is scored on a **1-4 scale** (Foundational to Expert)
- Score based on the **pattern description**, use the evidence bullets as reference points
- Each dimension MUST be scored independently of other dimensions

### Prohibited Assumptions
- NO seniority assumptions based on appearance, speech patterns, or demographics
- NO implicit bias: evaluate only observable behaviors""",
        f"## {len(rubric.dimensions)}-DIMENSION RUBRIC ({rubric.role_family_name})\n\n{dimension_sections}",
    ]
    red_flags_section = build_red_flags_section(rubric.red_flags)
    if red_flags_section:
        sections.append(red_flags_section)
    context_section = build_video_context_section(rubric.video_context)
    if context_section:
        sections.append(context_section)
    sections.append(
        "## OUTPUT REQUIREMENTS\n\n"
        "You MUST respond with ONLY a valid JSON object matching this exact schema. "
        "No additional text, markdown formatting, or explanation outside the JSON.\n\n"
        + build_output_schema(rubric.dimensions, rubric.red_flags)
    )
    sections.append(VALIDATION_CHECKLIST)
    return "\n\n".join(sections)
