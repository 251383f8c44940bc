"""
Test configuration and setup for EduMorph
"""

import os
import tempfile
from datetime import timedelta
from pathlib import Path

import pytest

# Set test environment variables before any edumorph module is imported
_session_dir = Path(tempfile.mkdtemp(prefix="edumorph_test_"))
os.environ["EDUMORPH_TEST_MODE"] = "1"
os.environ["EDUMORPH_CONFIG_FILE"] = str(_session_dir / "env-test.properties")
os.environ["EDUMORPH_LOG_DIR"] = str(_session_dir / "logs")
os.environ["JWT_SECRET"] = "edumorph-test-jwt-secret-0123456789"

# Generate a valid Fernet key for testing
from cryptography.fernet import Fernet

os.environ["EDUMORPH_ENCRYPTION_KEY"] = Fernet.generate_key().decode()

# Reset settings service to ensure it loads the test config
from edumorph.core.services.settings_config_service import reset_settings_service

reset_settings_service()

from edumorph.core.models import (
    Collection,
    Difficulty,
    PerformanceMetrics,
    ProgressEvent,
    UserRole,
    utc_now,
)

TEST_PASSWORD = "Password123!"


def build_event(
    student_id="student-1",
    subject="Math",
    topic="Algebra",
    score=80.0,
    attempts=1,
    difficulty=Difficulty.BEGINNER,
    days_ago=0.0,
    now=None,
    time_spent=15,
):
    """ProgressEvent completed ``days_ago`` days before ``now``"""
    now = now or utc_now()
    return ProgressEvent(
        student_id=student_id,
        subject=subject,
        topic=topic,
        score=score,
        attempts=attempts,
        difficulty=difficulty,
        time_spent=time_spent,
        completed_at=now - timedelta(days=days_ago),
    )


def build_metrics(
    student_id="student-1",
    overall_score=70.0,
    consistency=50,
    learning_velocity=5,
    subject_scores=None,
    strengths=None,
    weaknesses=None,
):
    return PerformanceMetrics(
        student_id=student_id,
        overall_score=overall_score,
        subject_scores=subject_scores or {},
        strengths=strengths or [],
        weaknesses=weaknesses or [],
        learning_velocity=learning_velocity,
        consistency=consistency,
        last_updated=utc_now(),
    )


@pytest.fixture
def test_db_path(tmp_path):
    """Create a test database path"""
    return tmp_path / "test.db"


@pytest.fixture(autouse=True)
def setup_test_env(test_db_path, monkeypatch):
    """Point the database singleton at a fresh per-test SQLite file"""
    monkeypatch.setenv("EDUMORPH_DB_PATH", str(test_db_path))

    from edumorph.core.services.database import init_db_service

    service = init_db_service(str(test_db_path))

    yield

    # Close database service (disposes engine and closes open sessions)
    service.close()


@pytest.fixture
def db_service():
    """Provide the database service for tests"""
    from edumorph.core.services.database import get_db_service

    return get_db_service()


@pytest.fixture
def store(db_service):
    from edumorph.core.services.document_store import DocumentStore

    return DocumentStore()


@pytest.fixture
def progress_service(store):
    from edumorph.core.services.progress_tracking_service import (
        ProgressTrackingService,
    )

    return ProgressTrackingService(store)


@pytest.fixture
def gap_service(store, progress_service):
    from edumorph.core.services.learning_gap_service import LearningGapService

    return LearningGapService(store, progress_service)


@pytest.fixture
def difficulty_service(progress_service):
    from edumorph.core.services.difficulty_service import DifficultyService

    return DifficultyService(progress_service)


@pytest.fixture
def analytics_service(store, progress_service, gap_service):
    from edumorph.core.services.analytics_service import AnalyticsService

    return AnalyticsService(store, progress_service, gap_service)


@pytest.fixture
def matchmaker(store, progress_service):
    from edumorph.core.services.study_matchmaker_service import (
        StudyMatchmakerService,
    )

    return StudyMatchmakerService(store, progress_service)


@pytest.fixture
def privacy_service(store, progress_service):
    from edumorph.core.services.privacy_shield_service import PrivacyShieldService

    return PrivacyShieldService(store, progress_service)


@pytest.fixture
def auth_service(store):
    from edumorph.core.services.auth import AuthService

    return AuthService(store)


@pytest.fixture
def add_event(store):
    """Store a backdated progress event directly (bypasses recomputation)"""

    def _add(**kwargs):
        event = build_event(**kwargs)
        store.add_document(Collection.PROGRESS, event.to_document())
        return event

    return _add


@pytest.fixture
def make_user(auth_service):
    """Register a user; returns the UserProfile"""
    counter = {"n": 0}

    def _make(role=UserRole.STUDENT, email=None, display_name=None, **kwargs):
        counter["n"] += 1
        email = email or f"user{counter['n']}@school.edu"
        return auth_service.register_user(
            email=email,
            password=TEST_PASSWORD,
            display_name=display_name or f"User {counter['n']}",
            role=role,
            **kwargs,
        )

    return _make


@pytest.fixture
def client(db_service):
    """FastAPI TestClient bound to the per-test database."""
    from fastapi.testclient import TestClient
    from edumorph.api.main import app

    with TestClient(app) as test_client:
        yield test_client


def _login(client, email):
    resp = client.post(
        "/api/auth/login", data={"username": email, "password": TEST_PASSWORD}
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


@pytest.fixture
def test_student(make_user):
    return make_user(UserRole.STUDENT, email="api_student@school.edu")


@pytest.fixture
def test_teacher(make_user):
    return make_user(UserRole.TEACHER, email="api_teacher@school.edu")


@pytest.fixture
def student_token(client, test_student):
    """Bearer token for the default student user."""
    return _login(client, test_student.email)


@pytest.fixture
def teacher_token(client, test_teacher):
    """Bearer token for the default teacher user."""
    return _login(client, test_teacher.email)


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
