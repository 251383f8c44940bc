"""
Models package for EduMorph

This package contains the document table, enums and domain document models.
"""

from .models import Base, Collection, Document, UserRole
from .documents import (
    AnalyticsInsight,
    ConsentPurpose,
    DataRetention,
    MAX_RETENTION_DAYS,
    DataSharing,
    Difficulty,
    DocumentModel,
    EncryptionSettings,
    GapPriority,
    InsightBatch,
    InsightType,
    LearningGap,
    PerformanceMetrics,
    PrivacySettings,
    ProgressEvent,
    ProgressEventCreate,
    ReportPeriod,
    StudentReport,
    StudyMatch,
    StudyPreferences,
    StudyStyle,
    StudyTime,
    SubjectReport,
    UserProfile,
    UtcDatetime,
    ensure_utc,
    format_timestamp,
    utc_now,
)

__all__ = [
    "Base",
    "Collection",
    "Document",
    "UserRole",
    "AnalyticsInsight",
    "ConsentPurpose",
    "DataRetention",
    "MAX_RETENTION_DAYS",
    "DataSharing",
    "Difficulty",
    "DocumentModel",
    "EncryptionSettings",
    "GapPriority",
    "InsightBatch",
    "InsightType",
    "LearningGap",
    "PerformanceMetrics",
    "PrivacySettings",
    "ProgressEvent",
    "ProgressEventCreate",
    "ReportPeriod",
    "StudentReport",
    "StudyMatch",
    "StudyPreferences",
    "StudyStyle",
    "StudyTime",
    "SubjectReport",
    "UserProfile",
    "UtcDatetime",
    "ensure_utc",
    "format_timestamp",
    "utc_now",
]
