"""Pydantic models describing skill scores and the aggregation result."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field

SkillCategory = Literal[
    "communication",
    "problem_decomposition",
    "ai_leverage",
    "code_quality",
    "xfn_collaboration",
    "time_management",
    "technical_decision_making",
    "presentation",
]

SkillLevel = Literal["exceptional", "strong", "adequate", "developing", "needs_improvement"]


class SkillScore(BaseModel):
    category: SkillCategory
    score: int = Field(ge=1, le=5)
    level: SkillLevel
    evidence: List[str] = Field(default_factory=list)
    notes: str = ""


class AggregatedScore(BaseModel):
    # NaN when no skill scores were supplied
    overall_score: float
    overall_level: SkillLevel
    skill_scores: List[SkillScore]
    weights_used: Dict[str, float]
