"""Embeddings of completed video assessments for semantic candidate search."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from .repository import get_video_assessment
from ..integrations.gemini.service import GeminiEmbeddingClient
from ...models.report import AssessmentEmbedding
from ...models.video_assessment import DimensionScore, VideoAssessmentStatus
from ...platform.config import settings
from ...platform.database import async_session_maker
from ...shared.retry import RetryPolicy
from ...shared.utils import humanize_slug

logger = logging.getLogger(__name__)


def _behavior_lines(raw: str | None) -> List[str]:
    try:
        items = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return [raw] if raw else []
    lines = []
    for item in items if isinstance(items, list) else []:
        if isinstance(item, dict):
            stamp = item.get("timestamp") or ""
            lines.append(f"- [{stamp}] {item.get('behavior', '')}" if stamp else f"- {item.get('behavior', '')}")
        else:
            lines.append(f"- {item}")
    return lines


def format_dimension_scores_for_embedding(scores: List[DimensionScore]) -> str:
    sections = []
    for score in sorted(scores, key=lambda s: s.dimension):
        label = humanize_slug(score.dimension).title()
        sections.append(f"{label}:\n" + "\n".join(_behavior_lines(score.observable_behaviors)))
    return "\n\n".join(sections)


def create_embedding_text(behaviors_text: str, overall_summary: str) -> str:
    return (
        "CANDIDATE ASSESSMENT PROFILE\n\n"
        f"OBSERVABLE BEHAVIORS:\n{behaviors_text}\n\n"
        f"OVERALL SUMMARY:\n{overall_summary}"
    )


async def generate_and_store_embeddings(
    video_assessment_id: str,
    *,
    session_factory: async_sessionmaker = async_session_maker,
    client: Any = None,
    retry_policy: RetryPolicy | None = None,
) -> Dict[str, Any]:
    """Embed a COMPLETED assessment and upsert the vector.

    Returns ``{"success": bool, "error": str | None}``; never raises for
    missing or incomplete assessments.
    """
    client = client or GeminiEmbeddingClient()
    policy = retry_policy or RetryPolicy(
        max_attempts=settings.VIDEO_EVAL_MAX_ATTEMPTS,
        base_delay_seconds=settings.VIDEO_EVAL_BASE_DELAY_SECONDS,
        max_delay_seconds=settings.VIDEO_EVAL_MAX_DELAY_SECONDS,
    )

    async with session_factory() as db:
        va = await get_video_assessment(db, video_assessment_id, with_results=True)
        if va is None:
            return {"success": False, "error": f"Video assessment not found: {video_assessment_id}"}
        if va.status != VideoAssessmentStatus.COMPLETED:
            return {"success": False, "error": f"Video assessment is not completed (status: {va.status.value})"}
        if not va.scores:
            return {"success": False, "error": "No dimension scores available for embedding"}
        if va.summary is None:
            return {"success": False, "error": "No summary available for embedding"}

        behaviors_text = format_dimension_scores_for_embedding(list(va.scores))
        text = create_embedding_text(behaviors_text, va.summary.overall_summary)
        vector = await policy.run(lambda: client.embed(text))
        if not vector:
            return {"success": False, "error": "Failed to generate embedding: no embedding values returned"}

        row = (
            await db.execute(select(AssessmentEmbedding).where(AssessmentEmbedding.video_assessment_id == video_assessment_id))
        ).scalar_one_or_none()
        if row is None:
            row = AssessmentEmbedding(video_assessment_id=video_assessment_id)
            db.add(row)
        row.observable_behaviors_text = behaviors_text
        row.overall_summary_text = va.summary.overall_summary
        row.embedding = list(vector)
        row.embedding_model = getattr(client, "model", settings.EMBEDDING_MODEL)
        await db.commit()

    logger.info("Stored embedding for video assessment %s (%d dims)", video_assessment_id, len(vector))
    return {"success": True, "error": None}
