from fastapi import APIRouter, Depends, HTTPException

from edumorph.core.models import ConsentPurpose, StudyPreferences, UserProfile
from edumorph.core.services.privacy_shield_service import (
    PrivacyShieldService,
    get_privacy_shield_service,
)
from edumorph.core.services.study_matchmaker_service import (
    StudyMatchmakerService,
    get_study_matchmaker_service,
)
from edumorph.api.security import require_student

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.post("")
async def find_study_matches(
    preferences: StudyPreferences,
    current_user: UserProfile = Depends(require_student),
    matchmaker: StudyMatchmakerService = Depends(get_study_matchmaker_service),
    privacy_service: PrivacyShieldService = Depends(get_privacy_shield_service),
):
    """Find and store the best study partners for the signed-in student."""
    if not privacy_service.has_consent(current_user.uid, ConsentPurpose.MATCHMAKING):
        raise HTTPException(
            status_code=403, detail="Matchmaking is disabled in your privacy settings"
        )
    if not preferences.subjects:
        raise HTTPException(status_code=422, detail="At least one subject is required")

    matches = matchmaker.find_study_matches(current_user.uid, preferences)
    return [match.to_document() for match in matches]


@router.get("")
async def get_saved_matches(
    current_user: UserProfile = Depends(require_student),
    matchmaker: StudyMatchmakerService = Depends(get_study_matchmaker_service),
):
    return [match.to_document() for match in matchmaker.get_saved_matches(current_user.uid)]
