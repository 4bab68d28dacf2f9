"""Single source of truth for skill categories, weights and explanations."""

from __future__ import annotations

from typing import Any, Dict

from .rules import CATEGORY_WEIGHTS, LEVEL_THRESHOLDS, LOWEST_LEVEL, SKILL_CATEGORIES

SKILL_CATEGORY_METADATA: Dict[str, Dict[str, Any]] = {
    "communication": {
        "label": "Communication",
        "description": "Clarity and professionalism in the HR interview and coworker conversations.",
        "signals": ["hr_interview.communication_score", "hr_interview.professionalism_score", "conversations"],
    },
    "problem_decomposition": {
        "label": "Problem Decomposition",
        "description": "Breaking the task into workable pieces, judged from code structure and time spent stuck.",
        "signals": ["code_review.code_quality_score", "code_review.pattern_score", "recording.stuck_moments"],
    },
    "ai_leverage": {
        "label": "AI Leverage",
        "description": "Use of AI tools in the workflow. Not using AI tools is neutral.",
        "signals": ["recording.ai_tools_used", "recording.tool_usage", "code_review.summary.ai_tool_usage_evident"],
    },
    "code_quality": {
        "label": "Code Quality",
        "description": "Automated code review score nudged by the CI outcome.",
        "signals": ["code_review.overall_score", "ci_status.overall_status"],
    },
    "xfn_collaboration": {
        "label": "Cross-functional Collaboration",
        "description": "How many different coworkers the candidate reached out to.",
        "signals": ["conversations.unique_coworkers_contacted", "conversations.total_coworker_interactions"],
    },
    "time_management": {
        "label": "Time Management",
        "description": "Focus during the recorded session and the share of active versus idle time.",
        "signals": ["recording.focus_score", "recording.total_active_time", "recording.total_idle_time"],
    },
    "technical_decision_making": {
        "label": "Technical Decision-Making",
        "description": "Architecture and maintainability choices, penalized by repeated technical blockers.",
        "signals": ["code_review.pattern_score", "code_review.maintainability_score", "recording.stuck_moments"],
    },
    "presentation": {
        "label": "Presentation",
        "description": "Explaining the work in the interview and the defense call.",
        "signals": ["hr_interview.communication_score", "hr_interview.technical_depth_score", "conversations.defense_transcript"],
    },
}


def scoring_metadata_payload() -> Dict[str, Any]:
    return {
        "categories": [
            {
                "key": key,
                "weight": CATEGORY_WEIGHTS[key],
                **SKILL_CATEGORY_METADATA[key],
            }
            for key in SKILL_CATEGORIES
        ],
        "levels": [{"min_score": minimum, "level": level} for minimum, level in LEVEL_THRESHOLDS]
        + [{"min_score": None, "level": LOWEST_LEVEL}],
        "scale": {"min": 1, "max": 5},
    }
