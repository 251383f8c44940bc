"""
Core module for EduMorph
"""

from .models import (
    Base,
    Collection,
    Document,
    UserRole,
    Difficulty,
    ProgressEvent,
    PerformanceMetrics,
    LearningGap,
    StudentReport,
    StudyMatch,
    PrivacySettings,
    UserProfile,
)
from .services import (
    DatabaseService,
    get_db_service,
    init_db_service,
    DocumentStore,
    get_document_store,
    AuthService,
    get_auth_service,
    LoggingService,
    get_logging_service,
    get_logger,
)

__all__ = [
    # Models
    "Base",
    "Collection",
    "Document",
    "UserRole",
    "Difficulty",
    "ProgressEvent",
    "PerformanceMetrics",
    "LearningGap",
    "StudentReport",
    "StudyMatch",
    "PrivacySettings",
    "UserProfile",
    # Services
    "DatabaseService",
    "get_db_service",
    "init_db_service",
    "DocumentStore",
    "get_document_store",
    "AuthService",
    "get_auth_service",
    "LoggingService",
    "get_logging_service",
    "get_logger",
]
