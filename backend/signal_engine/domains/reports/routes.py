"""Report generation endpoints."""
from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ...components.reports.assembler import generate_assessment_report
from ...components.reports.formatting import format_report_for_display
from ...components.reports.repository import get_report_row, save_report
from ...components.reports.schemas import AssessmentReport
from ...components.scoring.signals import AssessmentSignals
from ...platform.database import get_async_db

router = APIRouter(prefix="/reports", tags=["Reports"])


class GenerateReportRequest(BaseModel):
    signals: AssessmentSignals
    candidate_name: Optional[str] = None
    format: Literal["json", "markdown"] = "json"


@router.post("/generate")
async def generate(body: GenerateReportRequest, db: AsyncSession = Depends(get_async_db)):
    report = await generate_assessment_report(body.signals, candidate_name=body.candidate_name)
    await save_report(db, report, user_id=body.signals.user_id)
    if body.format == "markdown":
        return PlainTextResponse(format_report_for_display(report), media_type="text/markdown")
    return report.model_dump(mode="json")


@router.get("/{assessment_id}")
async def get_report(assessment_id: str, db: AsyncSession = Depends(get_async_db)):
    row = await get_report_row(db, assessment_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return row.report


@router.get("/{assessment_id}/markdown", response_class=PlainTextResponse)
async def get_report_markdown(assessment_id: str, db: AsyncSession = Depends(get_async_db)):
    row = await get_report_row(db, assessment_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return PlainTextResponse(
        format_report_for_display(AssessmentReport.model_validate(row.report)), media_type="text/markdown"
    )
