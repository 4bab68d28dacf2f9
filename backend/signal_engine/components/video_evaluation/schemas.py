"""Pydantic models for rubric input and the parsed video evaluation output."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ConfidenceLabel = Literal["high", "medium", "low"]

RUBRIC_EVALUATION_PROMPT_VERSION = "3.0.0"


# ---------------------------------------------------------------------------
# Rubric (prompt input)
# ---------------------------------------------------------------------------

class RubricLevelData(BaseModel):
    level: int
    label: str
    pattern: str
    evidence: List[str] = Field(default_factory=list)


class DimensionWithRubric(BaseModel):
    slug: str
    name: str
    description: str = ""
    is_universal: bool = False
    levels: List[RubricLevelData] = Field(default_factory=list)


class RedFlagData(BaseModel):
    slug: str
    name: str
    description: str = ""


class VideoContext(BaseModel):
    video_duration_minutes: Optional[float] = None
    task_description: Optional[str] = None
    expected_outcomes: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.video_duration_minutes or self.task_description or self.expected_outcomes)


class RubricPromptInput(BaseModel):
    role_family_name: str
    role_family_slug: str
    dimensions: List[DimensionWithRubric] = Field(default_factory=list)
    red_flags: List[RedFlagData] = Field(default_factory=list)
    video_context: Optional[VideoContext] = None

    def dimension_lookup(self) -> Dict[str, DimensionWithRubric]:
        return {d.slug: d for d in self.dimensions}


# ---------------------------------------------------------------------------
# Evaluation output
# ---------------------------------------------------------------------------

class EvidenceConfidence(BaseModel):
    """Confidence label plus whether the model actually stated it.

    ``asserted=False`` means the field was absent and "medium" was assumed.
    """

    label: ConfidenceLabel = "medium"
    asserted: bool = False


class TimestampedBehavior(BaseModel):
    timestamp: str = ""
    behavior: str = ""


class DimensionResult(BaseModel):
    dimension_slug: str
    # Slug until enriched from the rubric
    dimension_name: str
    score: Optional[int] = None
    summary: str = ""
    confidence: EvidenceConfidence = Field(default_factory=EvidenceConfidence)
    rationale: str = ""
    observable_behaviors: List[TimestampedBehavior] = Field(default_factory=list)
    timestamps: List[str] = Field(default_factory=list)
    trainable_gap: bool = False
    green_flags: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)


class DetectedRedFlag(BaseModel):
    slug: str
    name: str
    description: str = ""
    evidence: str = ""
    timestamps: List[str] = Field(default_factory=list)


class DimensionHighlight(BaseModel):
    dimension: str = ""
    score: float = 0
    description: str = ""


class RubricAssessmentOutput(BaseModel):
    evaluation_version: str = RUBRIC_EVALUATION_PROMPT_VERSION
    role_family_slug: str
    overall_score: float
    dimension_scores: List[DimensionResult] = Field(default_factory=list)
    detected_red_flags: List[DetectedRedFlag] = Field(default_factory=list)
    top_strengths: List[DimensionHighlight] = Field(default_factory=list)
    growth_areas: List[DimensionHighlight] = Field(default_factory=list)
    overall_summary: str
    evaluation_confidence: EvidenceConfidence = Field(default_factory=EvidenceConfidence)
    insufficient_evidence_notes: Optional[str] = None

    def scored_dimensions(self) -> List[DimensionResult]:
        return [d for d in self.dimension_scores if d.score is not None]
