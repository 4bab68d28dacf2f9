from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from ..platform.config import settings
from ..platform.logging import setup_logging

celery_app = Celery(
    "signal_engine",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    # One evaluation = up to VIDEO_EVAL_MAX_ATTEMPTS model calls plus backoff
    task_time_limit=settings.VIDEO_EVAL_TASK_TIME_LIMIT_SECONDS,
    task_soft_time_limit=max(settings.VIDEO_EVAL_TASK_TIME_LIMIT_SECONDS - 60, 60),
    result_expires=86400,
)


@celery_setup_logging.connect
def _configure_worker_logging(**_kwargs):
    # Workers log in the same JSON format as the API
    setup_logging()


celery_app.autodiscover_tasks(["signal_engine.tasks"])
