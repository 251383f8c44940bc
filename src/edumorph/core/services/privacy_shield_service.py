"""
Privacy Shield Service

Per-user privacy settings, consent checks, encryption of sensitive values,
anonymization of user records and retention-window cleanup.
"""

import hashlib
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from ..exceptions import EncryptionError
from ..models import (
    Collection,
    ConsentPurpose,
    DataRetention,
    EncryptionSettings,
    PrivacySettings,
    ensure_utc,
    format_timestamp,
    utc_now,
)
from ..security_utils import get_or_create_encryption_key
from .document_store import DocumentStore, deep_merge, get_document_store
from .logging import get_logging_service
from .progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)
from .settings_config_service import get_settings_service

PERSONAL_FIELDS = ("email", "displayName", "uid")


def anonymize_data(record: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``record`` without personal identifiers, keyed by a uid hash"""
    anonymized = dict(record)
    for field in PERSONAL_FIELDS:
        anonymized.pop(field, None)
    uid = record.get("uid") or ""
    anonymized["anonymousId"] = hashlib.sha256(str(uid).encode("utf-8")).hexdigest()
    return anonymized


class PrivacyShieldService:
    """Service for privacy settings and data protection"""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        progress_service: Optional[ProgressTrackingService] = None,
        encryption_key: Optional[bytes] = None,
    ):
        self.store = store or get_document_store()
        self.progress_service = progress_service or get_progress_tracking_service()
        self.logging_service = get_logging_service()
        self.cipher = Fernet(encryption_key or get_or_create_encryption_key())

    def _default_settings(self, user_id: str) -> PrivacySettings:
        defaults = get_settings_service().get_privacy_defaults()
        return PrivacySettings(
            user_id=user_id,
            data_retention=DataRetention(
                progress_history=defaults["progress_history_days"],
                activity_logs=defaults["activity_logs_days"],
            ),
            encryption=EncryptionSettings(
                enabled=True, sensitive_fields=defaults["sensitive_fields"]
            ),
            last_updated=utc_now(),
        )

    def find_privacy_settings(self, user_id: str) -> Optional[PrivacySettings]:
        data = self.store.get_document(Collection.PRIVACY_SETTINGS, user_id)
        if data is None:
            return None
        return PrivacySettings.from_document(data)

    def get_or_create_privacy_settings(self, user_id: str) -> PrivacySettings:
        """Stored settings; defaults are written first for a new user"""
        settings = self.find_privacy_settings(user_id)
        if settings is not None:
            return settings

        settings = self._default_settings(user_id)
        self.store.set_document(
            Collection.PRIVACY_SETTINGS, user_id, settings.to_document()
        )
        self.logging_service.log_crud_operation(
            "create", Collection.PRIVACY_SETTINGS, user_id, user_id=user_id
        )
        return settings

    def update_privacy_settings(
        self, user_id: str, updates: Dict[str, Any]
    ) -> PrivacySettings:
        """
        Merge ``updates`` (stored field names, nested objects allowed) into
        the user's settings and stamp ``lastUpdated``.

        Raises:
            pydantic.ValidationError: The merged settings are not valid
        """
        current = self.get_or_create_privacy_settings(user_id)
        merged = deep_merge(current.to_document(), updates)
        merged["userId"] = user_id
        merged["lastUpdated"] = format_timestamp(utc_now())

        settings = PrivacySettings.from_document(merged)
        self.store.set_document(
            Collection.PRIVACY_SETTINGS, user_id, settings.to_document(), merge=True
        )
        self.logging_service.log_crud_operation(
            "update",
            Collection.PRIVACY_SETTINGS,
            user_id,
            user_id=user_id,
            fields=sorted(updates.keys()),
        )
        return settings

    def has_consent(
        self, user_id: str, purpose: Union[ConsentPurpose, str]
    ) -> bool:
        """Whether the user allows their data to be used for ``purpose``"""
        purpose = ConsentPurpose(purpose)
        sharing = self.get_or_create_privacy_settings(user_id).data_sharing
        if purpose == ConsentPurpose.ANALYTICS:
            return sharing.analytics
        if purpose == ConsentPurpose.MATCHMAKING:
            return sharing.matchmaking
        return sharing.teacher_view

    def encrypt_data(self, data: str) -> str:
        return self.cipher.encrypt(data.encode("utf-8")).decode("utf-8")

    def decrypt_data(self, encrypted_data: str) -> str:
        try:
            return self.cipher.decrypt(encrypted_data.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            raise EncryptionError("Unable to decrypt data") from e

    def anonymize_data(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return anonymize_data(record)

    def cleanup_old_data(
        self, user_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Apply the user's retention windows.

        Progress events older than the progress-history window are deleted
        and metrics are recomputed when anything was removed.

        Returns:
            Dict with progressCutoff, activityCutoff and deletedProgress
        """
        settings = self.get_or_create_privacy_settings(user_id)
        now = ensure_utc(now or utc_now())
        progress_cutoff = now - timedelta(days=settings.data_retention.progress_history)
        activity_cutoff = now - timedelta(days=settings.data_retention.activity_logs)

        deleted = self.progress_service.delete_progress_before(user_id, progress_cutoff)
        if deleted:
            metrics = self.progress_service.recompute_metrics(user_id, now=now)
            if metrics is None:
                self.store.delete_document(Collection.PERFORMANCE_METRICS, user_id)

        self.logging_service.log_event(
            "privacy",
            "INFO",
            "privacy.cleanup",
            user_id=user_id,
            progress_cutoff=format_timestamp(progress_cutoff),
            activity_cutoff=format_timestamp(activity_cutoff),
            deleted_progress=deleted,
        )
        return {
            "progressCutoff": progress_cutoff,
            "activityCutoff": activity_cutoff,
            "deletedProgress": deleted,
        }


# Global instance
_privacy_shield_service: Optional[PrivacyShieldService] = None


def get_privacy_shield_service() -> PrivacyShieldService:
    """Get the global privacy shield service instance"""
    global _privacy_shield_service
    if _privacy_shield_service is None:
        _privacy_shield_service = PrivacyShieldService()
    return _privacy_shield_service
