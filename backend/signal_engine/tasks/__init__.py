from .celery_app import celery_app
from .evaluation_tasks import evaluate_video_assessment_task

__all__ = [
    "celery_app",
    "evaluate_video_assessment_task",
]
