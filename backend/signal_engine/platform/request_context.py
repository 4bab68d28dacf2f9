from contextvars import ContextVar
from typing import Optional

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_video_assessment_id_ctx: ContextVar[Optional[str]] = ContextVar("video_assessment_id", default=None)


def set_request_id(request_id: str):
    return _request_id_ctx.set(request_id)


def get_request_id() -> Optional[str]:
    return _request_id_ctx.get()


def set_video_assessment_id(video_assessment_id: str | None):
    return _video_assessment_id_ctx.set(video_assessment_id)


def get_video_assessment_id() -> Optional[str]:
    return _video_assessment_id_ctx.get()
