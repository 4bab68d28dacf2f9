"""Input bundle of collected assessment signals.

Each sub-record is supplied by an external collector (HR interview, recording
analysis, code review, CI, conversation store). Any of them may be absent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class VerifiedClaim(BaseModel):
    claim: str
    status: Literal["verified", "unverified", "inconsistent", "flagged"]
    notes: Optional[str] = None


class HRSignals(BaseModel):
    communication_score: Optional[float] = None
    communication_notes: Optional[str] = None
    cv_consistency_score: Optional[float] = None
    cv_verification_notes: Optional[str] = None
    professionalism_score: Optional[float] = None
    technical_depth_score: Optional[float] = None
    culture_fit_notes: Optional[str] = None
    interview_duration_seconds: Optional[int] = None
    verified_claims: List[VerifiedClaim] = Field(default_factory=list)


class ActivityEntry(BaseModel):
    timestamp: str
    activity: str
    description: Optional[str] = None


class ToolUsage(BaseModel):
    tool: str
    usage_count: int = 0
    context_notes: Optional[str] = None


StuckCause = Literal[
    "unclear_requirements",
    "technical_difficulty",
    "debugging",
    "searching_for_solution",
    "context_switching",
    "environment_issues",
    "unknown",
]


class StuckMoment(BaseModel):
    start_time: str
    end_time: str
    description: str = ""
    potential_cause: StuckCause = "unknown"
    duration_seconds: float = 0


class RecordingSignals(BaseModel):
    activity_timeline: List[ActivityEntry] = Field(default_factory=list)
    tool_usage: List[ToolUsage] = Field(default_factory=list)
    stuck_moments: List[StuckMoment] = Field(default_factory=list)
    total_active_time: float = 0
    total_idle_time: float = 0
    focus_score: Optional[float] = None
    ai_tools_used: bool = False
    key_observations: List[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
    role: str
    content: str
    timestamp: Optional[str] = None


class CoworkerChat(BaseModel):
    coworker_name: str
    coworker_role: str
    messages: List[ChatMessage] = Field(default_factory=list)
    type: Literal["text", "voice"] = "text"


class ConversationSignals(BaseModel):
    coworker_chats: List[CoworkerChat] = Field(default_factory=list)
    defense_transcript: List[ChatMessage] = Field(default_factory=list)
    total_coworker_interactions: int = 0
    unique_coworkers_contacted: int = 0


class CodeReviewSummary(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    overall_assessment: Optional[str] = None
    test_coverage: Optional[str] = None
    ai_tool_usage_evident: bool = False


class CodeReviewSignals(BaseModel):
    overall_score: float
    code_quality_score: Optional[float] = None
    pattern_score: Optional[float] = None
    security_score: Optional[float] = None
    maintainability_score: Optional[float] = None
    summary: Optional[CodeReviewSummary] = None
    maintainability_breakdown: Dict[str, Any] = Field(default_factory=dict)


class CIStatus(BaseModel):
    overall_status: Literal["success", "failure", "pending", "unknown"] = "unknown"
    checks_count: int = 0


class TimingSignals(BaseModel):
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_duration_seconds: Optional[float] = None
    working_phase_seconds: Optional[float] = None


class AssessmentSignals(BaseModel):
    assessment_id: str
    user_id: Optional[str] = None
    scenario_name: Optional[str] = None

    hr_interview: Optional[HRSignals] = None
    conversations: Optional[ConversationSignals] = None
    recording: Optional[RecordingSignals] = None
    code_review: Optional[CodeReviewSignals] = None
    ci_status: Optional[CIStatus] = None
    pr_url: Optional[str] = None
    timing: Optional[TimingSignals] = None
