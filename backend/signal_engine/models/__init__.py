from .video_assessment import (
    AssessmentLogEventType,
    DimensionScore,
    VideoAssessment,
    VideoAssessmentApiCall,
    VideoAssessmentLog,
    VideoAssessmentStatus,
    VideoAssessmentSummary,
)
from .rubric import RoleFamily, RoleFamilyDimension, RubricDimension, RubricLevel, RubricRedFlag
from .report import AssessmentEmbedding, AssessmentReport

__all__ = [
    "AssessmentLogEventType",
    "DimensionScore",
    "VideoAssessment",
    "VideoAssessmentApiCall",
    "VideoAssessmentLog",
    "VideoAssessmentStatus",
    "VideoAssessmentSummary",
    "RoleFamily",
    "RoleFamilyDimension",
    "RubricDimension",
    "RubricLevel",
    "RubricRedFlag",
    "AssessmentEmbedding",
    "AssessmentReport",
]
