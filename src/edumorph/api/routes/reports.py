"""
Report API Routes

Generating and listing period reports for a student.
"""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import model_validator

from edumorph.core.exceptions import NoPerformanceDataError, NotFoundError
from edumorph.core.models import DocumentModel, UtcDatetime, utc_now
from edumorph.core.services.analytics_service import (
    AnalyticsService,
    get_analytics_service,
)
from edumorph.api.security import student_access

router = APIRouter(prefix="/api/reports", tags=["reports"])

DEFAULT_REPORT_DAYS = 30


class ReportRequest(DocumentModel):
    """Reporting window; defaults to the last 30 days"""

    start: Optional[UtcDatetime] = None
    end: Optional[UtcDatetime] = None

    @model_validator(mode="after")
    def _check_order(self):
        if self.start and self.end and self.start > self.end:
            raise ValueError("start must not be after end")
        return self


@router.post("/{student_id}", status_code=201)
async def generate_report(
    request: Optional[ReportRequest] = None,
    student_id: str = Depends(student_access),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    request = request or ReportRequest()
    end: datetime = request.end or utc_now()
    start: datetime = request.start or end - timedelta(days=DEFAULT_REPORT_DAYS)
    if start > end:
        raise HTTPException(status_code=422, detail="start must not be after end")

    try:
        report = analytics_service.generate_student_report(student_id, start, end)
    except NoPerformanceDataError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return report.to_document()


@router.get("/{student_id}")
async def list_reports(
    student_id: str = Depends(student_access),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    return [report.to_document() for report in analytics_service.list_reports(student_id)]


@router.get("/{student_id}/{report_id}")
async def get_report(
    report_id: str,
    student_id: str = Depends(student_access),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        report = analytics_service.get_report(report_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if report.student_id != student_id:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")
    return report.to_document()
