import asyncio
import logging

from .celery_app import celery_app

logger = logging.getLogger(__name__)


async def _run_evaluation(video_assessment_id: str, video_url: str, task_description: str | None, role_family_slug: str | None):
    from ..components.video_evaluation.pipeline import VideoEvaluationPipeline
    from ..platform.database import async_engine
    from ..shared.background import drain_detached_tasks

    try:
        result = await VideoEvaluationPipeline().evaluate(
            video_assessment_id,
            video_url,
            task_description=task_description,
            role_family_slug=role_family_slug,
        )
        # Embedding generation is detached; finish it before the loop closes.
        await drain_detached_tasks()
        return result
    finally:
        await async_engine.dispose()


@celery_app.task(bind=True)
def evaluate_video_assessment_task(
    self,
    video_assessment_id: str,
    video_url: str,
    task_description: str | None = None,
    role_family_slug: str | None = None,
):
    """Run the video evaluation pipeline for one video assessment.

    Failures are recorded on the row by the pipeline (FAILED + retry_count),
    so the task itself is never retried by Celery.
    """
    logger.info(
        f"Starting video evaluation {video_assessment_id}",
        extra={"request_id": self.request.id, "video_assessment_id": video_assessment_id},
    )
    result = asyncio.run(_run_evaluation(video_assessment_id, video_url, task_description, role_family_slug))
    if result["success"]:
        logger.info(f"Video evaluation {video_assessment_id} finished (skipped={result['skipped']})")
    else:
        logger.error(f"Video evaluation {video_assessment_id} failed: {result['error']}")
    return result
