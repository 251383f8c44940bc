"""
Dashboard API Routes

Metrics summary and recent activity for the signed-in user.
"""

from fastapi import APIRouter, Depends

from edumorph.core.models import UserProfile
from edumorph.core.roles import is_student
from edumorph.core.services.difficulty_service import (
    generate_study_recommendations,
    learning_speed_multiplier,
)
from edumorph.core.services.progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)
from edumorph.api.security import get_current_user, user_role_str

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

RECENT_EVENTS = 5


@router.get("")
async def get_dashboard(
    current_user: UserProfile = Depends(get_current_user),
    progress_service: ProgressTrackingService = Depends(get_progress_tracking_service),
):
    """
    Dashboard data for the current user.

    Students see their metrics, pacing and the 5 most recent activities.
    Teachers and admins have no personal history, so only the profile
    summary is returned.
    """
    response = {
        "user": {
            "uid": current_user.uid,
            "displayName": current_user.display_name,
            "role": user_role_str(current_user),
        },
        "metrics": None,
        "recentProgress": [],
        "pace": None,
    }
    if not is_student(current_user):
        return response

    metrics = progress_service.get_or_create_performance_metrics(current_user.uid)
    recent = progress_service.get_student_progress(current_user.uid, limit=RECENT_EVENTS)

    response["recentProgress"] = [event.to_document() for event in recent]
    if metrics is not None:
        response["metrics"] = metrics.to_document()
        response["pace"] = {
            "multiplier": learning_speed_multiplier(metrics),
            "recommendations": generate_study_recommendations(metrics),
        }
    return response
