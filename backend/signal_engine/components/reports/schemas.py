"""Pydantic models for the assembled assessment report."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..scoring.schemas import SkillCategory, SkillLevel, SkillScore

TestsStatus = Literal["passing", "failing", "none", "unknown"]


class NarrativeFeedback(BaseModel):
    overall_summary: str
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    notable_observations: List[str] = Field(default_factory=list)


class Recommendation(BaseModel):
    category: SkillCategory
    priority: Literal["high", "medium", "low"]
    title: str
    description: str
    actionable_steps: List[str] = Field(default_factory=list)


class RecommendationList(BaseModel):
    recommendations: List[Recommendation]


class ReportMetrics(BaseModel):
    total_duration_minutes: Optional[int] = None
    working_phase_minutes: Optional[int] = None
    coworkers_contacted: int = 0
    ai_tools_used: bool = False
    tests_status: TestsStatus = "unknown"
    code_review_score: Optional[float] = None


class AssessmentReport(BaseModel):
    generated_at: str
    assessment_id: str
    candidate_name: Optional[str] = None
    # None when no skill scores could be aggregated
    overall_score: Optional[float] = None
    overall_level: Optional[SkillLevel] = None
    skill_scores: List[SkillScore]
    narrative: NarrativeFeedback
    recommendations: List[Recommendation]
    metrics: ReportMetrics
    # True when narrative/recommendations came from deterministic fallbacks
    narrative_fallback: bool = False
    recommendations_fallback: bool = False
