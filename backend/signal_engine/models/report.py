from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.sql import func

from ..platform.database import Base


class AssessmentReport(Base):
    __tablename__ = "assessment_reports"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(String, index=True, nullable=True)
    overall_score = Column(Float, nullable=True)
    overall_level = Column(String, nullable=True)
    report = Column(JSON, nullable=False)
    generated_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AssessmentEmbedding(Base):
    __tablename__ = "assessment_embeddings"

    id = Column(Integer, primary_key=True, index=True)
    video_assessment_id = Column(
        String(32), ForeignKey("video_assessments.id", ondelete="CASCADE"), unique=True, index=True, nullable=False
    )
    observable_behaviors_text = Column(Text, nullable=False)
    overall_summary_text = Column(Text, nullable=False)
    embedding = Column(JSON, nullable=False)
    embedding_model = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
