from fastapi import APIRouter, Depends, HTTPException

from edumorph.core.services.progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)
from edumorph.api.security import student_access

router = APIRouter(prefix="/api/metrics", tags=["metrics"])

NO_DATA_DETAIL = "No performance data available"


@router.get("/{student_id}")
async def get_performance_metrics(
    student_id: str = Depends(student_access),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    metrics = progress_service.get_or_create_performance_metrics(student_id)
    if metrics is None:
        raise HTTPException(status_code=404, detail=NO_DATA_DETAIL)
    return metrics.to_document()


@router.post("/{student_id}/recompute")
async def recompute_performance_metrics(
    student_id: str = Depends(student_access),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    metrics = progress_service.recompute_metrics(student_id)
    if metrics is None:
        raise HTTPException(status_code=404, detail=NO_DATA_DETAIL)
    return metrics.to_document()
