"""
Domain document models for EduMorph.

Python code works with snake_case attributes; stored documents and API
payloads use the camelCase field names of the document collections
(``studentId``, ``completedAt`` ...).
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from .models import UserRole

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO-8601 so that string order equals time order."""
    return ensure_utc(value).strftime(TIMESTAMP_FORMAT)


UtcDatetime = Annotated[
    datetime,
    AfterValidator(ensure_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


class Difficulty(enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class GapPriority(enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightType(enum.Enum):
    STRENGTH = "strength"
    WEAKNESS = "weakness"
    RECOMMENDATION = "recommendation"
    ACHIEVEMENT = "achievement"


class StudyTime(enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class StudyStyle(enum.Enum):
    VISUAL = "visual"
    AUDITORY = "auditory"
    KINESTHETIC = "kinesthetic"
    READING = "reading"


class ConsentPurpose(enum.Enum):
    ANALYTICS = "analytics"
    MATCHMAKING = "matchmaking"
    TEACHER_VIEW = "teacherView"


class DocumentModel(BaseModel):
    """Base for every record persisted in the document store"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, data: Dict[str, Any]):
        return cls.model_validate(data)


# ---------------------------------------------------------------------------
# Progress & metrics
# ---------------------------------------------------------------------------


class ProgressEventCreate(DocumentModel):
    """A completed activity before it is stamped with ``completedAt``.

    Scores are not range checked; the recorded value is kept as given.
    """

    student_id: str
    subject: str
    topic: str
    score: float
    time_spent: float = 0  # minutes
    difficulty: Difficulty = Difficulty.BEGINNER
    attempts: int = Field(default=1, ge=1)


class ProgressEvent(ProgressEventCreate):
    completed_at: UtcDatetime


class PerformanceMetrics(DocumentModel):
    student_id: str
    overall_score: float
    subject_scores: Dict[str, float] = Field(default_factory=dict)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    learning_velocity: int = 0  # events in the trailing 7 days
    consistency: int = 0  # 0-100
    last_updated: UtcDatetime


class LearningGap(DocumentModel):
    student_id: str
    subject: str
    topic: str
    weak_points: List[str] = Field(default_factory=list)
    suggested_resources: List[str] = Field(default_factory=list)
    priority: GapPriority
    identified_at: UtcDatetime


# ---------------------------------------------------------------------------
# Insights & reports
# ---------------------------------------------------------------------------


class AnalyticsInsight(DocumentModel):
    type: InsightType
    title: str
    description: str
    action_items: List[str] = Field(default_factory=list)
    created_at: UtcDatetime


class InsightBatch(DocumentModel):
    student_id: str
    insights: List[AnalyticsInsight] = Field(default_factory=list)
    generated_at: UtcDatetime


class SubjectReport(DocumentModel):
    subject: str
    grade: str
    score: float
    topics_completed: int
    topics_total: int
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)


class ReportPeriod(DocumentModel):
    start: UtcDatetime
    end: UtcDatetime


class StudentReport(DocumentModel):
    student_id: str
    report_id: str
    period: ReportPeriod
    overall_grade: str
    subjects: List[SubjectReport] = Field(default_factory=list)
    attendance: float
    behavioral_notes: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    generated_at: UtcDatetime


# ---------------------------------------------------------------------------
# Matchmaking
# ---------------------------------------------------------------------------


class StudyPreferences(DocumentModel):
    subjects: List[str] = Field(default_factory=list)
    study_time: StudyTime = StudyTime.EVENING
    study_style: StudyStyle = StudyStyle.VISUAL
    goals: List[str] = Field(default_factory=list)


class StudyMatch(DocumentModel):
    match_id: str
    student1: str
    student2: str
    common_subjects: List[str] = Field(default_factory=list)
    compatibility_score: int
    study_preferences: StudyPreferences
    matched_at: UtcDatetime


# ---------------------------------------------------------------------------
# Privacy
# ---------------------------------------------------------------------------


class DataSharing(DocumentModel):
    analytics: bool = True
    matchmaking: bool = True
    teacher_view: bool = True


MAX_RETENTION_DAYS = 36500


class DataRetention(DocumentModel):
    progress_history: int = Field(default=365, ge=1, le=MAX_RETENTION_DAYS)  # days
    activity_logs: int = Field(default=90, ge=1, le=MAX_RETENTION_DAYS)  # days


class EncryptionSettings(DocumentModel):
    enabled: bool = True
    sensitive_fields: List[str] = Field(
        default_factory=lambda: ["email", "displayName"]
    )


class PrivacySettings(DocumentModel):
    user_id: str
    data_sharing: DataSharing = Field(default_factory=DataSharing)
    data_retention: DataRetention = Field(default_factory=DataRetention)
    encryption: EncryptionSettings = Field(default_factory=EncryptionSettings)
    last_updated: UtcDatetime


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserProfile(DocumentModel):
    uid: str
    email: str
    display_name: str
    role: UserRole
    created_at: UtcDatetime
    last_login: Optional[UtcDatetime] = None
    grade: Optional[str] = None
    subjects: Optional[List[str]] = None
    avatar: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, repr=False)

    def to_public_dict(self) -> Dict[str, Any]:
        """Profile as returned over the API (no password hash)."""
        data = self.to_document()
        data.pop("passwordHash", None)
        return data
