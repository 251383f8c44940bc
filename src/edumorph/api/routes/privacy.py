"""
Privacy API Routes

The signed-in user's privacy settings and retention cleanup.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from edumorph.core.models import (
    MAX_RETENTION_DAYS,
    DocumentModel,
    UserProfile,
    format_timestamp,
)
from edumorph.core.services.privacy_shield_service import (
    PrivacyShieldService,
    get_privacy_shield_service,
)
from edumorph.api.security import get_current_user

router = APIRouter(prefix="/api/privacy", tags=["privacy"])


class DataSharingUpdate(DocumentModel):
    analytics: Optional[bool] = None
    matchmaking: Optional[bool] = None
    teacher_view: Optional[bool] = None


class DataRetentionUpdate(DocumentModel):
    progress_history: Optional[int] = Field(default=None, ge=1, le=MAX_RETENTION_DAYS)
    activity_logs: Optional[int] = Field(default=None, ge=1, le=MAX_RETENTION_DAYS)


class EncryptionUpdate(DocumentModel):
    enabled: Optional[bool] = None
    sensitive_fields: Optional[List[str]] = None


class PrivacySettingsUpdate(DocumentModel):
    data_sharing: Optional[DataSharingUpdate] = None
    data_retention: Optional[DataRetentionUpdate] = None
    encryption: Optional[EncryptionUpdate] = None


@router.get("")
async def get_privacy_settings(
    current_user: UserProfile = Depends(get_current_user),
    privacy_service: PrivacyShieldService = Depends(get_privacy_shield_service),
):
    return privacy_service.get_or_create_privacy_settings(current_user.uid).to_document()


@router.put("")
async def update_privacy_settings(
    updates: PrivacySettingsUpdate,
    current_user: UserProfile = Depends(get_current_user),
    privacy_service: PrivacyShieldService = Depends(get_privacy_shield_service),
):
    """Merge the given fields into the stored settings."""
    changes = updates.model_dump(mode="json", by_alias=True, exclude_none=True)
    settings = privacy_service.update_privacy_settings(current_user.uid, changes)
    return settings.to_document()


@router.post("/cleanup")
async def cleanup_old_data(
    current_user: UserProfile = Depends(get_current_user),
    privacy_service: PrivacyShieldService = Depends(get_privacy_shield_service),
):
    result = privacy_service.cleanup_old_data(current_user.uid)
    return {
        "progressCutoff": format_timestamp(result["progressCutoff"]),
        "activityCutoff": format_timestamp(result["activityCutoff"]),
        "deletedProgress": result["deletedProgress"],
    }
