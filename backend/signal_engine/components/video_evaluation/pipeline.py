"""Video evaluation pipeline.

PENDING -> PROCESSING -> COMPLETED | FAILED

``evaluate`` claims the row with a conditional UPDATE before any external
call, so a duplicate run for the same assessment observes the claim and
returns without calling the model. Steps after the claim either end in the
single persistence transaction (COMPLETED) or in the failure path (FAILED,
retry_count + 1). Embedding generation runs detached after COMPLETED and
can never change the outcome.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .embeddings import generate_and_store_embeddings
from .event_log import VideoAssessmentEventLog
from .parser import enrich_dimension_names, parse_evaluation_response
from .prompt_builder import build_rubric_evaluation_prompt
from .repository import claim_for_processing, persist_evaluation, record_failure
from .rubric_loader import load_rubric_for_role_family
from .schemas import RubricAssessmentOutput, RubricPromptInput, VideoContext
from ..integrations.gemini.service import GeminiVideoEvaluator
from ...models.video_assessment import AssessmentLogEventType
from ...platform.config import settings
from ...platform.database import async_session_maker
from ...platform.request_context import set_video_assessment_id
from ...shared.background import spawn_detached
from ...shared.errors import EmptyModelResponseError, RubricNotFoundError
from ...shared.retry import RetryPolicy

logger = logging.getLogger(__name__)

RubricLoader = Callable[[AsyncSession, str], Awaitable[RubricPromptInput]]
EmbeddingGenerator = Callable[[str], Awaitable[Dict[str, Any]]]

FAILURE_ALERT_PREFIX = "[ASSESSMENT FAILURE ALERT]"


def _result(
    video_assessment_id: str,
    *,
    success: bool,
    evaluation: Optional[RubricAssessmentOutput] = None,
    error: Optional[str] = None,
    skipped: bool = False,
) -> Dict[str, Any]:
    return {
        "success": success,
        "video_assessment_id": video_assessment_id,
        "skipped": skipped,
        "overall_score": evaluation.overall_score if evaluation else None,
        "dimension_scores": (
            {d.dimension_slug: d.score for d in evaluation.dimension_scores} if evaluation else {}
        ),
        "summary": evaluation.overall_summary if evaluation else None,
        "error": error,
    }


class VideoEvaluationPipeline:
    """Evaluates one recorded session against the role-family rubric."""

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker = async_session_maker,
        model_client: Any = None,
        rubric_loader: RubricLoader = load_rubric_for_role_family,
        embedding_generator: Optional[EmbeddingGenerator] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_retries: Optional[int] = None,
        default_role_family_slug: Optional[str] = None,
        embeddings_enabled: Optional[bool] = None,
    ):
        self.session_factory = session_factory
        self.model_client = model_client or GeminiVideoEvaluator()
        self.rubric_loader = rubric_loader
        self.embedding_generator = embedding_generator or (
            lambda va_id: generate_and_store_embeddings(va_id, session_factory=session_factory)
        )
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.VIDEO_EVAL_MAX_ATTEMPTS,
            base_delay_seconds=settings.VIDEO_EVAL_BASE_DELAY_SECONDS,
            max_delay_seconds=settings.VIDEO_EVAL_MAX_DELAY_SECONDS,
        )
        self.sleep = sleep
        self.max_retries = max_retries if max_retries is not None else settings.VIDEO_ASSESSMENT_MAX_RETRIES
        self.default_role_family_slug = default_role_family_slug or settings.DEFAULT_ROLE_FAMILY_SLUG
        self.embeddings_enabled = (
            embeddings_enabled if embeddings_enabled is not None else not settings.mvp_flags.disable_embeddings
        )

    @property
    def model_name(self) -> str:
        return getattr(self.model_client, "model", None) or settings.resolved_video_evaluation_model

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _load_rubric(self, role_family_slug: str) -> RubricPromptInput:
        async with self.session_factory() as db:
            try:
                return await self.rubric_loader(db, role_family_slug)
            except RubricNotFoundError as exc:
                if role_family_slug == self.default_role_family_slug:
                    raise
                logger.warning(
                    "Role family %r not usable (%s), falling back to %r",
                    role_family_slug,
                    exc,
                    self.default_role_family_slug,
                )
                return await self.rubric_loader(db, self.default_role_family_slug)

    async def _call_model(self, video_url: str, prompt: str) -> str:
        text = await self.model_client.generate(video_url, prompt)
        if not text or not text.strip():
            raise EmptyModelResponseError("No response text from evaluation model")
        return text

    def _on_retry(self, video_assessment_id: str) -> Callable[[int, BaseException, float], None]:
        def observer(attempt: int, exc: BaseException, delay: float) -> None:
            logger.warning(
                "Video evaluation %s: model call attempt %d failed, retrying in %.1fs: %s",
                video_assessment_id,
                attempt,
                delay,
                exc,
            )

        return observer

    async def _record_failure(self, video_assessment_id: str, reason: str) -> None:
        async with self.session_factory() as db:
            retry_count = await record_failure(db, video_assessment_id, reason)
        logger.error(
            "%s Video assessment %s failed (attempt %d/%d). Reason: %s",
            FAILURE_ALERT_PREFIX,
            video_assessment_id,
            retry_count,
            self.max_retries,
            reason,
        )
        if retry_count >= self.max_retries:
            logger.error(
                "%s Video assessment %s has failed %d times and will not be automatically retried. "
                "Admin intervention required.",
                FAILURE_ALERT_PREFIX,
                video_assessment_id,
                retry_count,
            )

    async def _generate_embeddings(self, video_assessment_id: str) -> None:
        result = await self.embedding_generator(video_assessment_id)
        if result.get("success"):
            logger.info("Generated embeddings for video assessment %s", video_assessment_id)
        else:
            logger.warning(
                "Embedding generation failed for video assessment %s: %s",
                video_assessment_id,
                result.get("error"),
            )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def evaluate(
        self,
        video_assessment_id: str,
        video_url: str,
        *,
        video_duration_minutes: Optional[float] = None,
        task_description: Optional[str] = None,
        expected_outcomes: Optional[List[str]] = None,
        role_family_slug: Optional[str] = None,
    ) -> Dict[str, Any]:
        set_video_assessment_id(video_assessment_id)
        role_family_slug = role_family_slug or self.default_role_family_slug

        async with self.session_factory() as db:
            claimed = await claim_for_processing(db, video_assessment_id)
        if not claimed:
            logger.info("Video assessment %s is not PENDING; evaluation skipped", video_assessment_id)
            return _result(video_assessment_id, success=True, skipped=True)

        events = VideoAssessmentEventLog(self.session_factory, video_assessment_id)
        await events.log_event(AssessmentLogEventType.STARTED, {"role_family": role_family_slug})

        try:
            rubric = await self._load_rubric(role_family_slug)
            context = VideoContext(
                video_duration_minutes=video_duration_minutes,
                task_description=task_description,
                expected_outcomes=list(expected_outcomes or []),
            )
            if not context.is_empty():
                rubric.video_context = context

            prompt = build_rubric_evaluation_prompt(rubric)
            await events.log_event(
                AssessmentLogEventType.PROMPT_SENT,
                {"prompt_length": len(prompt), "role_family": rubric.role_family_slug},
            )

            tracker = await events.start_api_call(prompt, self.model_name)
            try:
                response_text = await self.retry_policy.run(
                    lambda: self._call_model(video_url, prompt),
                    on_retry=self._on_retry(video_assessment_id),
                    sleep=self.sleep,
                )
            except Exception as exc:
                await tracker.fail(exc)
                raise
            await tracker.complete(response_text, status_code=200)
            await events.log_event(
                AssessmentLogEventType.RESPONSE_RECEIVED,
                {"response_length": len(response_text), "status_code": 200},
            )

            # Parse errors are terminal for this run; the model call is not repeated.
            await events.log_event(AssessmentLogEventType.PARSING_STARTED)
            evaluation = parse_evaluation_response(response_text, rubric.role_family_slug)
            enrich_dimension_names(evaluation, rubric)
            await events.log_event(
                AssessmentLogEventType.PARSING_COMPLETED,
                {"parsed_dimension_count": len(evaluation.scored_dimensions())},
            )

            async with self.session_factory() as db:
                written = await persist_evaluation(db, video_assessment_id, evaluation, response_text)
            await events.log_event(AssessmentLogEventType.COMPLETED, {"dimension_rows": written})
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            logger.exception("Video evaluation failed for %s", video_assessment_id)
            await events.log_event(
                AssessmentLogEventType.ERROR,
                {"error_message": reason, "error_name": type(exc).__name__},
            )
            await self._record_failure(video_assessment_id, reason)
            return _result(video_assessment_id, success=False, error=reason)

        logger.info(
            "Video assessment %s completed (overall_score=%s, dimensions=%d)",
            video_assessment_id,
            evaluation.overall_score,
            written,
        )
        if self.embeddings_enabled:
            spawn_detached(
                self._generate_embeddings(video_assessment_id),
                name=f"embeddings:{video_assessment_id}",
            )
        return _result(video_assessment_id, success=True, evaluation=evaluation)
