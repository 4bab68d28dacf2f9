"""create video assessment, rubric and report tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

VIDEO_ASSESSMENT_STATUS = sa.Enum("PENDING", "PROCESSING", "COMPLETED", "FAILED", name="videoassessmentstatus")
LOG_EVENT_TYPE = sa.Enum(
    "STARTED",
    "PROMPT_SENT",
    "RESPONSE_RECEIVED",
    "PARSING_STARTED",
    "PARSING_COMPLETED",
    "COMPLETED",
    "ERROR",
    name="assessmentlogeventtype",
)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _fk_to_video_assessment(unique: bool = False):
    return sa.Column(
        "video_assessment_id",
        sa.String(length=32),
        sa.ForeignKey("video_assessments.id", ondelete="CASCADE"),
        nullable=False,
        unique=unique,
    )


def upgrade() -> None:
    op.create_table(
        "video_assessments",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("assessment_id", sa.String(), nullable=False),
        sa.Column("candidate_id", sa.String(), nullable=True),
        sa.Column("video_url", sa.String(), nullable=False),
        sa.Column("task_description", sa.Text(), nullable=True),
        sa.Column("role_family_slug", sa.String(), nullable=True),
        sa.Column("status", VIDEO_ASSESSMENT_STATUS, nullable=False),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_failure_reason", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_video_assessments_assessment_id"), "video_assessments", ["assessment_id"], unique=True)
    op.create_index(op.f("ix_video_assessments_candidate_id"), "video_assessments", ["candidate_id"], unique=False)
    op.create_index(op.f("ix_video_assessments_status"), "video_assessments", ["status"], unique=False)

    op.create_table(
        "dimension_scores",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk_to_video_assessment(),
        sa.Column("dimension", sa.String(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("confidence", sa.String(), nullable=False),
        sa.Column("confidence_asserted", sa.Boolean(), nullable=False),
        sa.Column("observable_behaviors", sa.Text(), nullable=False),
        sa.Column("timestamps", sa.JSON(), nullable=False),
        sa.Column("trainable_gap", sa.Boolean(), nullable=False),
        sa.Column("rationale", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("video_assessment_id", "dimension", name="uq_dimension_score_assessment_dimension"),
    )
    op.create_index(op.f("ix_dimension_scores_id"), "dimension_scores", ["id"], unique=False)
    op.create_index(op.f("ix_dimension_scores_video_assessment_id"), "dimension_scores", ["video_assessment_id"], unique=False)

    op.create_table(
        "video_assessment_summaries",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk_to_video_assessment(unique=True),
        sa.Column("overall_summary", sa.Text(), nullable=False),
        sa.Column("raw_ai_response", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_video_assessment_summaries_id"), "video_assessment_summaries", ["id"], unique=False)

    op.create_table(
        "video_assessment_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk_to_video_assessment(),
        sa.Column("event_type", LOG_EVENT_TYPE, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
    )
    op.create_index(op.f("ix_video_assessment_logs_id"), "video_assessment_logs", ["id"], unique=False)
    op.create_index(
        op.f("ix_video_assessment_logs_video_assessment_id"), "video_assessment_logs", ["video_assessment_id"], unique=False
    )

    op.create_table(
        "video_assessment_api_calls",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk_to_video_assessment(),
        sa.Column("request_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("response_timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("prompt_text", sa.Text(), nullable=False),
        sa.Column("model_version", sa.String(), nullable=False),
        sa.Column("response_text", sa.Text(), nullable=True),
        sa.Column("status_code", sa.Integer(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("stack_trace", sa.Text(), nullable=True),
    )
    op.create_index(op.f("ix_video_assessment_api_calls_id"), "video_assessment_api_calls", ["id"], unique=False)
    op.create_index(
        op.f("ix_video_assessment_api_calls_video_assessment_id"),
        "video_assessment_api_calls",
        ["video_assessment_id"],
        unique=False,
    )

    op.create_table(
        "role_families",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
    )
    op.create_index(op.f("ix_role_families_id"), "role_families", ["id"], unique=False)
    op.create_index(op.f("ix_role_families_slug"), "role_families", ["slug"], unique=True)

    op.create_table(
        "rubric_dimensions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_universal", sa.Boolean(), nullable=False),
    )
    op.create_index(op.f("ix_rubric_dimensions_id"), "rubric_dimensions", ["id"], unique=False)
    op.create_index(op.f("ix_rubric_dimensions_slug"), "rubric_dimensions", ["slug"], unique=True)

    op.create_table(
        "role_family_dimensions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("role_family_id", sa.Integer(), sa.ForeignKey("role_families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dimension_id", sa.Integer(), sa.ForeignKey("rubric_dimensions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.UniqueConstraint("role_family_id", "dimension_id", name="uq_role_family_dimension"),
    )
    op.create_index(op.f("ix_role_family_dimensions_id"), "role_family_dimensions", ["id"], unique=False)
    op.create_index(op.f("ix_role_family_dimensions_role_family_id"), "role_family_dimensions", ["role_family_id"], unique=False)
    op.create_index(op.f("ix_role_family_dimensions_dimension_id"), "role_family_dimensions", ["dimension_id"], unique=False)

    op.create_table(
        "rubric_levels",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("dimension_id", sa.Integer(), sa.ForeignKey("rubric_dimensions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role_family_id", sa.Integer(), sa.ForeignKey("role_families.id", ondelete="CASCADE"), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("pattern", sa.Text(), nullable=False),
        sa.Column("evidence", sa.JSON(), nullable=False),
        sa.UniqueConstraint("dimension_id", "role_family_id", "level", name="uq_rubric_level_override"),
    )
    op.create_index(op.f("ix_rubric_levels_id"), "rubric_levels", ["id"], unique=False)
    op.create_index(op.f("ix_rubric_levels_dimension_id"), "rubric_levels", ["dimension_id"], unique=False)

    op.create_table(
        "rubric_red_flags",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("role_family_id", sa.Integer(), sa.ForeignKey("role_families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
    )
    op.create_index(op.f("ix_rubric_red_flags_id"), "rubric_red_flags", ["id"], unique=False)
    op.create_index(op.f("ix_rubric_red_flags_role_family_id"), "rubric_red_flags", ["role_family_id"], unique=False)

    op.create_table(
        "assessment_embeddings",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk_to_video_assessment(),
        sa.Column("observable_behaviors_text", sa.Text(), nullable=False),
        sa.Column("overall_summary_text", sa.Text(), nullable=False),
        sa.Column("embedding", sa.JSON(), nullable=False),
        sa.Column("embedding_model", sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_assessment_embeddings_id"), "assessment_embeddings", ["id"], unique=False)
    op.create_index(
        op.f("ix_assessment_embeddings_video_assessment_id"), "assessment_embeddings", ["video_assessment_id"], unique=True
    )

    op.create_table(
        "assessment_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("assessment_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("overall_score", sa.Float(), nullable=True),
        sa.Column("overall_level", sa.String(), nullable=True),
        sa.Column("report", sa.JSON(), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_assessment_reports_id"), "assessment_reports", ["id"], unique=False)
    op.create_index(op.f("ix_assessment_reports_assessment_id"), "assessment_reports", ["assessment_id"], unique=True)
    op.create_index(op.f("ix_assessment_reports_user_id"), "assessment_reports", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_table("assessment_reports")
    op.drop_table("assessment_embeddings")
    op.drop_table("rubric_red_flags")
    op.drop_table("rubric_levels")
    op.drop_table("role_family_dimensions")
    op.drop_table("rubric_dimensions")
    op.drop_table("role_families")
    op.drop_table("video_assessment_api_calls")
    op.drop_table("video_assessment_logs")
    op.drop_table("video_assessment_summaries")
    op.drop_table("dimension_scores")
    op.drop_table("video_assessments")
    LOG_EVENT_TYPE.drop(op.get_bind(), checkfirst=True)
    VIDEO_ASSESSMENT_STATUS.drop(op.get_bind(), checkfirst=True)
