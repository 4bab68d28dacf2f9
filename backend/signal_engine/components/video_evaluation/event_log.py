"""Persisted per-assessment event log and external API-call log.

Each write uses its own short session so it is independent of the
evaluation transaction. Write failures are logged and never raised.
"""

from __future__ import annotations

import logging
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ...models.video_assessment import AssessmentLogEventType, VideoAssessmentApiCall, VideoAssessmentLog
from ...shared.utils import utcnow

logger = logging.getLogger(__name__)


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


class ApiCallTracker:
    def __init__(self, session_factory: async_sessionmaker, video_assessment_id: str, prompt_text: str, model_version: str):
        self._session_factory = session_factory
        self.video_assessment_id = video_assessment_id
        self.prompt_text = prompt_text
        self.model_version = model_version
        self.request_timestamp = utcnow()
        self._row_id: Optional[int] = None

    async def start(self) -> "ApiCallTracker":
        try:
            async with self._session_factory() as db:
                row = VideoAssessmentApiCall(
                    video_assessment_id=self.video_assessment_id,
                    request_timestamp=self.request_timestamp,
                    prompt_text=self.prompt_text,
                    model_version=self.model_version,
                )
                db.add(row)
                await db.commit()
                self._row_id = row.id
        except Exception:
            logger.exception("Failed to record API call start for %s", self.video_assessment_id)
        return self

    async def _finish(self, **fields: Any) -> None:
        if self._row_id is None:
            return
        now = utcnow()
        try:
            async with self._session_factory() as db:
                row = await db.get(VideoAssessmentApiCall, self._row_id)
                if row is None:
                    return
                row.response_timestamp = now
                row.duration_ms = _elapsed_ms(self.request_timestamp, now)
                for key, value in fields.items():
                    setattr(row, key, value)
                await db.commit()
        except Exception:
            logger.exception("Failed to record API call result for %s", self.video_assessment_id)

    async def complete(self, response_text: str, status_code: int = 200) -> None:
        await self._finish(response_text=response_text, status_code=status_code)

    async def fail(self, error: BaseException) -> None:
        await self._finish(
            error_message=str(error) or type(error).__name__,
            stack_trace="".join(traceback.format_exception(type(error), error, error.__traceback__)),
        )


class VideoAssessmentEventLog:
    def __init__(self, session_factory: async_sessionmaker, video_assessment_id: str):
        self._session_factory = session_factory
        self.video_assessment_id = video_assessment_id
        self.last_event_timestamp: Optional[datetime] = None

    async def log_event(self, event_type: AssessmentLogEventType, metadata: Dict[str, Any] | None = None) -> datetime:
        now = utcnow()
        duration_ms = _elapsed_ms(self.last_event_timestamp, now) if self.last_event_timestamp else None
        self.last_event_timestamp = now
        try:
            async with self._session_factory() as db:
                db.add(
                    VideoAssessmentLog(
                        video_assessment_id=self.video_assessment_id,
                        event_type=event_type,
                        timestamp=now,
                        duration_ms=duration_ms,
                        event_metadata=metadata,
                    )
                )
                await db.commit()
        except Exception:
            logger.exception("Failed to record %s event for %s", event_type.value, self.video_assessment_id)
        return now

    async def start_api_call(self, prompt_text: str, model_version: str) -> ApiCallTracker:
        return await ApiCallTracker(self._session_factory, self.video_assessment_id, prompt_text, model_version).start()
