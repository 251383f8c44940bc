from fastapi import APIRouter, Depends

from edumorph.core.services.analytics_service import (
    AnalyticsService,
    get_analytics_service,
)
from edumorph.api.security import student_access

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.post("/{student_id}")
async def generate_insights(
    student_id: str = Depends(student_access),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """Regenerate the insight batch; empty when the student has no data."""
    insights = analytics_service.generate_insights(student_id)
    return [insight.to_document() for insight in insights]


@router.get("/{student_id}")
async def get_insights(
    student_id: str = Depends(student_access),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """Last generated batch, or an empty batch if none was generated yet."""
    batch = analytics_service.get_insights(student_id)
    if batch is None:
        return {"studentId": student_id, "insights": [], "generatedAt": None}
    return batch.to_document()
