"""
Progress API Routes

Recording completed activities and reading a student's history.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from edumorph.core.models import (
    Difficulty,
    DocumentModel,
    ProgressEventCreate,
    UserProfile,
)
from edumorph.core.services.progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)
from edumorph.api.security import require_student, student_access

router = APIRouter(prefix="/api/progress", tags=["progress"])


class ProgressSubmission(DocumentModel):
    subject: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    score: float
    time_spent: float = 0
    difficulty: Difficulty = Difficulty.BEGINNER
    attempts: int = Field(default=1, ge=1)


@router.post("", status_code=201)
async def record_progress(
    submission: ProgressSubmission,
    current_user: UserProfile = Depends(require_student),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    """Record an activity for the signed-in student."""
    event = ProgressEventCreate(student_id=current_user.uid, **submission.model_dump())
    stored = progress_service.record_progress(event)
    return stored.to_document()


@router.get("/{student_id}", response_model=List[dict])
async def get_student_progress(
    student_id: str = Depends(student_access),
    limit: Optional[int] = Query(None, ge=1, le=500),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    """Student's events, newest first."""
    events = progress_service.get_student_progress(student_id, limit=limit)
    return [event.to_document() for event in events]
