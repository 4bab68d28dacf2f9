"""Video assessment trigger / retry / query service.

Functions return result dicts (``success``, ``video_assessment_id``,
``error``) for the HTTP layer; only the query accessors raise.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .pipeline import VideoEvaluationPipeline
from .repository import (
    failed_video_assessment_to_dict,
    get_or_create_video_assessment,
    get_video_assessment,
    get_video_assessment_by_assessment,
    list_failed_video_assessments,
    reopen_failed,
    reset_for_force_retry,
    video_assessment_to_results,
    video_assessment_to_status,
)
from ...models.video_assessment import VideoAssessment, VideoAssessmentStatus
from ...platform.config import settings
from ...shared.background import spawn_detached
from ...shared.errors import RetryNotAllowedError, VideoAssessmentNotFoundError

logger = logging.getLogger(__name__)


def _ok(video_assessment_id: str, **extra: Any) -> Dict[str, Any]:
    return {"success": True, "video_assessment_id": video_assessment_id, "error": None, **extra}


def _error(video_assessment_id: Optional[str], error: str, **extra: Any) -> Dict[str, Any]:
    return {"success": False, "video_assessment_id": video_assessment_id, "error": error, **extra}


def dispatch_evaluation(va: VideoAssessment, pipeline: Optional[VideoEvaluationPipeline] = None) -> None:
    """Start ``evaluate`` without awaiting it (Celery when enabled, else detached task)."""
    if pipeline is None and not settings.mvp_flags.disable_celery:
        from ...tasks.evaluation_tasks import evaluate_video_assessment_task

        evaluate_video_assessment_task.delay(va.id, va.video_url, va.task_description, va.role_family_slug)
        logger.info("Queued video evaluation %s on Celery", va.id)
        return

    runner = pipeline or VideoEvaluationPipeline()
    spawn_detached(
        runner.evaluate(
            va.id,
            va.video_url,
            task_description=va.task_description,
            role_family_slug=va.role_family_slug,
        ),
        name=f"evaluate:{va.id}",
    )


async def trigger_video_assessment(
    db: AsyncSession,
    *,
    assessment_id: str,
    video_url: str,
    candidate_id: Optional[str] = None,
    task_description: Optional[str] = None,
    role_family_slug: Optional[str] = None,
    pipeline: Optional[VideoEvaluationPipeline] = None,
) -> Dict[str, Any]:
    """Create-or-reuse the video assessment for ``assessment_id`` and start evaluation.

    PROCESSING / COMPLETED rows are reported as success without starting a
    second run. FAILED rows re-enter through the same retry ceiling as a
    manual retry.
    """
    va, created = await get_or_create_video_assessment(
        db,
        assessment_id=assessment_id,
        video_url=video_url,
        candidate_id=candidate_id,
        task_description=task_description,
        role_family_slug=role_family_slug,
    )
    if created:
        logger.info("Created video assessment %s for assessment %s", va.id, assessment_id)

    if va.status in (VideoAssessmentStatus.PROCESSING, VideoAssessmentStatus.COMPLETED):
        return _ok(va.id, status=va.status.value, started=False)

    if va.status == VideoAssessmentStatus.FAILED:
        if not await reopen_failed(db, va.id, settings.VIDEO_ASSESSMENT_MAX_RETRIES):
            return _error(
                va.id,
                f"Assessment has already failed {va.retry_count} times.",
                status=VideoAssessmentStatus.FAILED.value,
            )
        logger.info("Re-triggering failed video assessment %s (retry_count=%d)", va.id, va.retry_count)

    dispatch_evaluation(va, pipeline)
    return _ok(va.id, status=VideoAssessmentStatus.PENDING.value, started=True)


async def retry_video_assessment(
    db: AsyncSession,
    video_assessment_id: str,
    *,
    pipeline: Optional[VideoEvaluationPipeline] = None,
) -> Dict[str, Any]:
    """FAILED -> PENDING and re-run, refused once retry_count reaches the ceiling."""
    va = await get_video_assessment(db, video_assessment_id)
    if va is None:
        return _error(None, "Video assessment not found")

    try:
        if va.status != VideoAssessmentStatus.FAILED:
            raise RetryNotAllowedError(f"Cannot retry assessment with status {va.status.value}.")
        if va.retry_count >= settings.VIDEO_ASSESSMENT_MAX_RETRIES:
            raise RetryNotAllowedError(f"Assessment has already failed {va.retry_count} times.")
        if not await reopen_failed(db, va.id, settings.VIDEO_ASSESSMENT_MAX_RETRIES):
            raise RetryNotAllowedError("Assessment changed state before the retry could start.")
    except RetryNotAllowedError as exc:
        logger.warning("Retry refused for video assessment %s: %s", video_assessment_id, exc)
        return _error(video_assessment_id, str(exc))

    dispatch_evaluation(va, pipeline)
    return _ok(video_assessment_id)


async def force_retry_video_assessment(
    db: AsyncSession,
    video_assessment_id: str,
    *,
    pipeline: Optional[VideoEvaluationPipeline] = None,
) -> Dict[str, Any]:
    """Operator override: reset retry_count and failure reason, then re-run from any state."""
    va = await get_video_assessment(db, video_assessment_id)
    if va is None:
        return _error(None, "Video assessment not found")

    await reset_for_force_retry(db, video_assessment_id)
    logger.info("Admin force-retry for video assessment %s (previous status=%s)", video_assessment_id, va.status.value)
    dispatch_evaluation(va, pipeline)
    return _ok(video_assessment_id)


async def list_failed_assessments(db: AsyncSession) -> List[Dict[str, Any]]:
    rows = await list_failed_video_assessments(db)
    return [failed_video_assessment_to_dict(va, settings.VIDEO_ASSESSMENT_MAX_RETRIES) for va in rows]


async def get_evaluation_status(db: AsyncSession, video_assessment_id: str) -> Dict[str, Any]:
    va = await get_video_assessment(db, video_assessment_id, with_results=True)
    if va is None:
        raise VideoAssessmentNotFoundError(f"Assessment not found: {video_assessment_id}")
    return video_assessment_to_status(va, has_scores=bool(va.scores), has_summary=va.summary is not None)


async def get_evaluation_results(db: AsyncSession, video_assessment_id: str) -> Dict[str, Any]:
    va = await get_video_assessment(db, video_assessment_id, with_results=True)
    if va is None:
        raise VideoAssessmentNotFoundError(f"Assessment not found: {video_assessment_id}")
    return video_assessment_to_results(va)


async def get_video_assessment_status_by_assessment(db: AsyncSession, assessment_id: str) -> Optional[Dict[str, Any]]:
    va = await get_video_assessment_by_assessment(db, assessment_id)
    if va is None:
        return None
    return {
        "id": va.id,
        "status": va.status.value,
        "completed_at": va.completed_at.isoformat() if va.completed_at else None,
    }
