"""
Difficulty API Routes

Recommended starting levels, pacing and level adjustments.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from edumorph.core.models import Difficulty, PerformanceMetrics
from edumorph.core.services.difficulty_service import (
    DifficultyService,
    generate_study_recommendations,
    get_difficulty_service,
    get_recommended_difficulty,
    learning_speed_multiplier,
)
from edumorph.core.services.progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)
from edumorph.api.security import student_access

router = APIRouter(prefix="/api/difficulty", tags=["difficulty"])


class AdjustRequest(BaseModel):
    current: Difficulty


def _require_metrics(
    progress_service: ProgressTrackingService, student_id: str
) -> PerformanceMetrics:
    metrics = progress_service.get_or_create_performance_metrics(student_id)
    if metrics is None:
        raise HTTPException(status_code=404, detail="No performance data available")
    return metrics


@router.get("/{student_id}/recommended")
async def get_recommended(
    subject: str = Query(..., min_length=1),
    student_id: str = Depends(student_access),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    metrics = _require_metrics(progress_service, student_id)
    return {
        "subject": subject,
        "difficulty": get_recommended_difficulty(subject, metrics).value,
    }


@router.get("/{student_id}/pace")
async def get_pace(
    student_id: str = Depends(student_access),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    metrics = _require_metrics(progress_service, student_id)
    return {
        "multiplier": learning_speed_multiplier(metrics),
        "recommendations": generate_study_recommendations(metrics),
    }


@router.post("/{student_id}/adjust")
async def adjust(
    request: AdjustRequest,
    student_id: str = Depends(student_access),
    difficulty_service: DifficultyService = Depends(get_difficulty_service),
):
    new_level = difficulty_service.adjust_for_student(student_id, request.current)
    return {
        "previous": request.current.value,
        "difficulty": new_level.value,
        "changed": new_level != request.current,
    }
