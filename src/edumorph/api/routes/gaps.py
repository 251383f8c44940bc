from fastapi import APIRouter, Depends

from edumorph.core.services.learning_gap_service import (
    LearningGapService,
    get_learning_gap_service,
)
from edumorph.api.security import student_access

router = APIRouter(prefix="/api/gaps", tags=["gaps"])


@router.post("/{student_id}")
async def identify_learning_gaps(
    student_id: str = Depends(student_access),
    gap_service: LearningGapService = Depends(get_learning_gap_service),
):
    """Detect gaps from the current history and store them."""
    gaps = gap_service.identify_learning_gaps(student_id)
    return [gap.to_document() for gap in gaps]


@router.get("/{student_id}")
async def list_learning_gaps(
    student_id: str = Depends(student_access),
    gap_service: LearningGapService = Depends(get_learning_gap_service),
):
    """Every gap stored for the student, including earlier detections."""
    return [gap.to_document() for gap in gap_service.get_stored_gaps(student_id)]
