import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..platform.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class VideoAssessmentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AssessmentLogEventType(str, enum.Enum):
    STARTED = "started"
    PROMPT_SENT = "prompt_sent"
    RESPONSE_RECEIVED = "response_received"
    PARSING_STARTED = "parsing_started"
    PARSING_COMPLETED = "parsing_completed"
    COMPLETED = "completed"
    ERROR = "error"


class VideoAssessment(Base):
    __tablename__ = "video_assessments"

    id = Column(String(32), primary_key=True, default=_new_id)
    # Simulation assessment this video belongs to (one video assessment per assessment)
    assessment_id = Column(String, unique=True, index=True, nullable=False)
    candidate_id = Column(String, index=True, nullable=True)
    video_url = Column(String, nullable=False)
    task_description = Column(Text, nullable=True)
    role_family_slug = Column(String, nullable=True)
    status = Column(Enum(VideoAssessmentStatus), default=VideoAssessmentStatus.PENDING, nullable=False, index=True)
    retry_count = Column(Integer, default=0, nullable=False)
    last_failure_reason = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    scores = relationship("DimensionScore", back_populates="video_assessment", cascade="all, delete-orphan")
    summary = relationship("VideoAssessmentSummary", back_populates="video_assessment", uselist=False, cascade="all, delete-orphan")
    logs = relationship("VideoAssessmentLog", back_populates="video_assessment", cascade="all, delete-orphan")
    api_calls = relationship("VideoAssessmentApiCall", back_populates="video_assessment", cascade="all, delete-orphan")


class DimensionScore(Base):
    __tablename__ = "dimension_scores"
    __table_args__ = (
        UniqueConstraint("video_assessment_id", "dimension", name="uq_dimension_score_assessment_dimension"),
    )

    id = Column(Integer, primary_key=True, index=True)
    video_assessment_id = Column(String(32), ForeignKey("video_assessments.id", ondelete="CASCADE"), index=True, nullable=False)
    dimension = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    confidence = Column(String, default="medium", nullable=False)
    # False when the model omitted confidence and "medium" was assumed
    confidence_asserted = Column(Boolean, default=True, nullable=False)
    observable_behaviors = Column(Text, nullable=False, default="[]")
    timestamps = Column(JSON, nullable=False, default=list)
    trainable_gap = Column(Boolean, default=False, nullable=False)
    rationale = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    video_assessment = relationship("VideoAssessment", back_populates="scores")


class VideoAssessmentSummary(Base):
    __tablename__ = "video_assessment_summaries"

    id = Column(Integer, primary_key=True, index=True)
    video_assessment_id = Column(
        String(32), ForeignKey("video_assessments.id", ondelete="CASCADE"), unique=True, index=True, nullable=False
    )
    overall_summary = Column(Text, nullable=False)
    raw_ai_response = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    video_assessment = relationship("VideoAssessment", back_populates="summary")


class VideoAssessmentLog(Base):
    __tablename__ = "video_assessment_logs"

    id = Column(Integer, primary_key=True, index=True)
    video_assessment_id = Column(String(32), ForeignKey("video_assessments.id", ondelete="CASCADE"), index=True, nullable=False)
    event_type = Column(Enum(AssessmentLogEventType), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    duration_ms = Column(Integer, nullable=True)
    event_metadata = Column("metadata", JSON, nullable=True)

    video_assessment = relationship("VideoAssessment", back_populates="logs")


class VideoAssessmentApiCall(Base):
    __tablename__ = "video_assessment_api_calls"

    id = Column(Integer, primary_key=True, index=True)
    video_assessment_id = Column(String(32), ForeignKey("video_assessments.id", ondelete="CASCADE"), index=True, nullable=False)
    request_timestamp = Column(DateTime(timezone=True), nullable=False)
    response_timestamp = Column(DateTime(timezone=True), nullable=True)
    duration_ms = Column(Integer, nullable=True)
    prompt_text = Column(Text, nullable=False)
    model_version = Column(String, nullable=False)
    response_text = Column(Text, nullable=True)
    status_code = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    stack_trace = Column(Text, nullable=True)

    video_assessment = relationship("VideoAssessment", back_populates="api_calls")
