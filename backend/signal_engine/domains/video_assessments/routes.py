"""Video assessment endpoints: trigger evaluation and read its status and results."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ...components.video_evaluation.pipeline import VideoEvaluationPipeline
from ...components.video_evaluation.service import (
    get_evaluation_results,
    get_evaluation_status,
    get_video_assessment_status_by_assessment,
    trigger_video_assessment,
)
from ...platform.database import get_async_db
from ...shared.errors import VideoAssessmentNotFoundError

router = APIRouter(prefix="/video-assessments", tags=["Video Assessments"])


class TriggerVideoAssessmentRequest(BaseModel):
    assessment_id: str = Field(min_length=1)
    video_url: str = Field(min_length=1)
    candidate_id: Optional[str] = None
    task_description: Optional[str] = None
    role_family_slug: Optional[str] = None


def get_evaluation_pipeline() -> Optional[VideoEvaluationPipeline]:
    """Pipeline used for in-process runs; None defers to the configured dispatcher."""
    return None


@router.post("/trigger", status_code=202)
async def trigger(
    body: TriggerVideoAssessmentRequest,
    db: AsyncSession = Depends(get_async_db),
    pipeline: Optional[VideoEvaluationPipeline] = Depends(get_evaluation_pipeline),
):
    result = await trigger_video_assessment(
        db,
        assessment_id=body.assessment_id,
        video_url=body.video_url,
        candidate_id=body.candidate_id,
        task_description=body.task_description,
        role_family_slug=body.role_family_slug,
        pipeline=pipeline,
    )
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result["error"])
    return result


@router.get("/by-assessment/{assessment_id}")
async def status_by_assessment(assessment_id: str, db: AsyncSession = Depends(get_async_db)):
    result = await get_video_assessment_status_by_assessment(db, assessment_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Video assessment not found")
    return result


@router.get("/{video_assessment_id}/status")
async def status(video_assessment_id: str, db: AsyncSession = Depends(get_async_db)):
    try:
        return await get_evaluation_status(db, video_assessment_id)
    except VideoAssessmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{video_assessment_id}/results")
async def results(video_assessment_id: str, db: AsyncSession = Depends(get_async_db)):
    try:
        return await get_evaluation_results(db, video_assessment_id)
    except VideoAssessmentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
