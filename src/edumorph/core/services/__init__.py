"""
Core services for EduMorph
"""

from .database import DatabaseService, get_db_service, init_db_service
from .document_store import DocumentStore, get_document_store
from .auth import AuthService, get_auth_service
from .logging import LoggingService, get_logging_service, get_logger

# Performance & recommendation engine
from .progress_tracking_service import get_progress_tracking_service
from .learning_gap_service import get_learning_gap_service
from .difficulty_service import get_difficulty_service
from .analytics_service import get_analytics_service
from .study_matchmaker_service import get_study_matchmaker_service
from .privacy_shield_service import get_privacy_shield_service

__all__ = [
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
    # Performance & recommendation engine
    "get_progress_tracking_service",
    "get_learning_gap_service",
    "get_difficulty_service",
    "get_analytics_service",
    "get_study_matchmaker_service",
    "get_privacy_shield_service",
]
