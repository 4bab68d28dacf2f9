"""Operator endpoints for failed video assessments."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..video_assessments.routes import get_evaluation_pipeline
from ...components.video_evaluation.pipeline import VideoEvaluationPipeline
from ...components.video_evaluation.service import (
    force_retry_video_assessment,
    list_failed_assessments,
    retry_video_assessment,
)
from ...platform.database import get_async_db

router = APIRouter(prefix="/admin/video-assessments", tags=["Admin"])


class RetryVideoAssessmentRequest(BaseModel):
    video_assessment_id: str
    force: bool = False


@router.post("/retry")
async def retry(
    body: RetryVideoAssessmentRequest,
    db: AsyncSession = Depends(get_async_db),
    pipeline: Optional[VideoEvaluationPipeline] = Depends(get_evaluation_pipeline),
):
    if body.force:
        result = await force_retry_video_assessment(db, body.video_assessment_id, pipeline=pipeline)
    else:
        result = await retry_video_assessment(db, body.video_assessment_id, pipeline=pipeline)

    if not result["success"]:
        status_code = 404 if result["video_assessment_id"] is None else 400
        raise HTTPException(status_code=status_code, detail=result["error"])
    return {
        "success": True,
        "message": "Force retry initiated" if body.force else "Retry initiated",
        "video_assessment_id": result["video_assessment_id"],
    }


@router.get("/failed")
async def failed(db: AsyncSession = Depends(get_async_db)):
    items = await list_failed_assessments(db)
    return {"count": len(items), "assessments": items}
