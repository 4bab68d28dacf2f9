"""AssessmentReport persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .schemas import AssessmentReport
from ...models.report import AssessmentReport as AssessmentReportRow


async def get_report_row(db: AsyncSession, assessment_id: str) -> Optional[AssessmentReportRow]:
    return (
        await db.execute(select(AssessmentReportRow).where(AssessmentReportRow.assessment_id == assessment_id))
    ).scalar_one_or_none()


async def save_report(db: AsyncSession, report: AssessmentReport, user_id: Optional[str] = None) -> AssessmentReportRow:
    """Insert or replace the stored report for ``report.assessment_id``."""
    row = await get_report_row(db, report.assessment_id)
    if row is None:
        row = AssessmentReportRow(assessment_id=report.assessment_id)
        db.add(row)
    row.user_id = user_id
    row.overall_score = report.overall_score
    row.overall_level = report.overall_level
    row.report = report.model_dump(mode="json")
    row.generated_at = datetime.fromisoformat(report.generated_at)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(row)
    return row
