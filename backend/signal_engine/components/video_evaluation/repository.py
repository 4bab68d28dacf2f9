"""VideoAssessment DB helpers: status transitions, persistence, serialization.

Status is the only concurrency guard. Every transition that other requests
race on is a conditional UPDATE (compare-and-swap on the current status),
so exactly one caller wins PENDING -> PROCESSING or FAILED -> PENDING.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .parser import format_timestamps
from .schemas import RubricAssessmentOutput
from ...models.video_assessment import (
    DimensionScore,
    VideoAssessment,
    VideoAssessmentStatus,
    VideoAssessmentSummary,
)
from ...shared.utils import utcnow


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

async def get_video_assessment(db: AsyncSession, video_assessment_id: str, *, with_results: bool = False) -> Optional[VideoAssessment]:
    stmt = (
        select(VideoAssessment)
        .where(VideoAssessment.id == video_assessment_id)
        .execution_options(populate_existing=True)
    )
    if with_results:
        stmt = stmt.options(selectinload(VideoAssessment.scores), selectinload(VideoAssessment.summary))
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_video_assessment_by_assessment(db: AsyncSession, assessment_id: str) -> Optional[VideoAssessment]:
    return (
        await db.execute(
            select(VideoAssessment)
            .where(VideoAssessment.assessment_id == assessment_id)
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()


async def get_or_create_video_assessment(
    db: AsyncSession,
    *,
    assessment_id: str,
    video_url: str,
    candidate_id: Optional[str] = None,
    task_description: Optional[str] = None,
    role_family_slug: Optional[str] = None,
) -> Tuple[VideoAssessment, bool]:
    """Return ``(video_assessment, created)``; existing rows are left untouched."""
    existing = await get_video_assessment_by_assessment(db, assessment_id)
    if existing is not None:
        return existing, False

    row = VideoAssessment(
        assessment_id=assessment_id,
        candidate_id=candidate_id,
        video_url=video_url,
        task_description=task_description,
        role_family_slug=role_family_slug,
        status=VideoAssessmentStatus.PENDING,
        retry_count=0,
    )
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        # Concurrent trigger created it first
        await db.rollback()
        existing = await get_video_assessment_by_assessment(db, assessment_id)
        if existing is None:
            raise
        return existing, False
    return row, True


async def list_failed_video_assessments(db: AsyncSession) -> List[VideoAssessment]:
    result = await db.execute(
        select(VideoAssessment)
        .where(VideoAssessment.status == VideoAssessmentStatus.FAILED)
        .order_by(VideoAssessment.updated_at.desc(), VideoAssessment.created_at.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

async def _compare_and_set(db: AsyncSession, video_assessment_id: str, *conditions, **values: Any) -> bool:
    result = await db.execute(
        update(VideoAssessment)
        .where(VideoAssessment.id == video_assessment_id, *conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


async def claim_for_processing(db: AsyncSession, video_assessment_id: str) -> bool:
    """PENDING -> PROCESSING. False when another caller already claimed it."""
    return await _compare_and_set(
        db,
        video_assessment_id,
        VideoAssessment.status == VideoAssessmentStatus.PENDING,
        status=VideoAssessmentStatus.PROCESSING,
    )


async def reopen_failed(db: AsyncSession, video_assessment_id: str, max_retries: int) -> bool:
    """FAILED -> PENDING while retry_count is below the ceiling."""
    return await _compare_and_set(
        db,
        video_assessment_id,
        VideoAssessment.status == VideoAssessmentStatus.FAILED,
        VideoAssessment.retry_count < max_retries,
        status=VideoAssessmentStatus.PENDING,
    )


async def reset_for_force_retry(db: AsyncSession, video_assessment_id: str) -> bool:
    """Any state -> PENDING with retry_count and failure reason cleared."""
    return await _compare_and_set(
        db,
        video_assessment_id,
        status=VideoAssessmentStatus.PENDING,
        retry_count=0,
        last_failure_reason=None,
    )


async def record_failure(db: AsyncSession, video_assessment_id: str, reason: str) -> int:
    """-> FAILED, incrementing retry_count. Returns the new retry count."""
    await db.execute(
        update(VideoAssessment)
        .where(VideoAssessment.id == video_assessment_id)
        .values(
            status=VideoAssessmentStatus.FAILED,
            retry_count=func.coalesce(VideoAssessment.retry_count, 0) + 1,
            last_failure_reason=reason,
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    retry_count = (
        await db.execute(select(VideoAssessment.retry_count).where(VideoAssessment.id == video_assessment_id))
    ).scalar_one_or_none()
    return int(retry_count or 0)


# ---------------------------------------------------------------------------
# Result persistence
# ---------------------------------------------------------------------------

def _behaviors_text(result) -> str:
    return json.dumps([b.model_dump() for b in result.observable_behaviors])


async def persist_evaluation(
    db: AsyncSession,
    video_assessment_id: str,
    evaluation: RubricAssessmentOutput,
    raw_response_text: str,
) -> int:
    """Write scores, summary and COMPLETED status in one transaction.

    Only dimensions with a non-null score get a row. Returns the number of
    dimension rows written. On any error the whole transaction is rolled back.
    """
    written = 0
    try:
        for result in evaluation.scored_dimensions():
            row = (
                await db.execute(
                    select(DimensionScore).where(
                        DimensionScore.video_assessment_id == video_assessment_id,
                        DimensionScore.dimension == result.dimension_slug,
                    )
                )
            ).scalar_one_or_none()
            if row is None:
                row = DimensionScore(video_assessment_id=video_assessment_id, dimension=result.dimension_slug)
                db.add(row)
            row.score = result.score
            row.confidence = result.confidence.label
            row.confidence_asserted = result.confidence.asserted
            row.observable_behaviors = _behaviors_text(result)
            row.timestamps = format_timestamps(result.timestamps)
            row.trainable_gap = result.trainable_gap
            row.rationale = result.rationale
            written += 1

        raw = evaluation.model_dump(mode="json")
        raw["raw_response_text"] = raw_response_text
        summary = (
            await db.execute(
                select(VideoAssessmentSummary).where(VideoAssessmentSummary.video_assessment_id == video_assessment_id)
            )
        ).scalar_one_or_none()
        if summary is None:
            summary = VideoAssessmentSummary(video_assessment_id=video_assessment_id)
            db.add(summary)
        summary.overall_summary = evaluation.overall_summary
        summary.raw_ai_response = raw

        await db.execute(
            update(VideoAssessment)
            .where(VideoAssessment.id == video_assessment_id)
            .values(status=VideoAssessmentStatus.COMPLETED, completed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return written


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_behaviors(text: str | None) -> List[Dict[str, Any]]:
    try:
        value = json.loads(text or "[]")
    except json.JSONDecodeError:
        return []
    return value if isinstance(value, list) else []


def video_assessment_to_status(va: VideoAssessment, *, has_scores: bool, has_summary: bool) -> Dict[str, Any]:
    return {
        "id": va.id,
        "assessment_id": va.assessment_id,
        "status": va.status.value,
        "completed_at": _iso(va.completed_at),
        "retry_count": va.retry_count,
        "last_failure_reason": va.last_failure_reason,
        "has_scores": has_scores,
        "has_summary": has_summary,
    }


def dimension_score_to_dict(score: DimensionScore) -> Dict[str, Any]:
    return {
        "dimension": score.dimension,
        "score": score.score,
        "confidence": score.confidence,
        "confidence_asserted": score.confidence_asserted,
        "observable_behaviors": _parse_behaviors(score.observable_behaviors),
        "timestamps": list(score.timestamps or []),
        "trainable_gap": score.trainable_gap,
        "rationale": score.rationale,
    }


def video_assessment_to_results(va: VideoAssessment) -> Dict[str, Any]:
    return {
        "assessment": {
            "id": va.id,
            "assessment_id": va.assessment_id,
            "status": va.status.value,
            "completed_at": _iso(va.completed_at),
        },
        "scores": [dimension_score_to_dict(s) for s in sorted(va.scores, key=lambda s: s.dimension)],
        "summary": (
            {
                "overall_summary": va.summary.overall_summary,
                "raw_ai_response": va.summary.raw_ai_response,
            }
            if va.summary is not None
            else None
        ),
    }


def failed_video_assessment_to_dict(va: VideoAssessment, max_retries: int) -> Dict[str, Any]:
    return {
        "id": va.id,
        "assessment_id": va.assessment_id,
        "candidate_id": va.candidate_id,
        "retry_count": va.retry_count,
        "last_failure_reason": va.last_failure_reason,
        "updated_at": _iso(va.updated_at or va.created_at),
        "can_retry": va.retry_count < max_retries,
    }
