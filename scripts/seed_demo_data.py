#!/usr/bin/env python3
"""
Seed a fresh database with demo users and progress history.

Security behavior:
- If EDUMORPH_INITIAL_ADMIN_PASSWORD is set, that value is used (min length: 12).
- Otherwise, a cryptographically random password is generated and printed once.
- Demo student/teacher accounts share EDUMORPH_DEMO_PASSWORD (default "Demo1234!").
"""

import os
import random
import secrets
import string
from datetime import timedelta

from edumorph.core.exceptions import AuthenticationError, EduMorphException
from edumorph.core.models import (
    Collection,
    Difficulty,
    ProgressEvent,
    UserRole,
    utc_now,
)
from edumorph.core.services.auth import get_auth_service
from edumorph.core.services.document_store import get_document_store
from edumorph.core.services.progress_tracking_service import (
    get_progress_tracking_service,
)

DEMO_STUDENTS = [
    ("ana@school.edu", "Ana", {"Math": 88, "Physics": 79, "History": 55}),
    ("ben@school.edu", "Ben", {"Math": 84, "Physics": 72}),
    ("chloe@school.edu", "Chloe", {"Math": 52, "History": 81}),
    ("dev@school.edu", "Dev", {"Physics": 90, "Chemistry": 38}),
]
TOPICS = {
    "Math": ["Algebra", "Geometry", "Fractions"],
    "Physics": ["Kinematics", "Forces", "Energy"],
    "History": ["Ancient Rome", "Industrial Revolution"],
    "Chemistry": ["Atoms", "Bonding"],
}


def _generate_password(length: int = 20) -> str:
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*()-_=+"
    # Guarantee every character class the password rule asks for
    required = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice("!@#$%^&*"),
    ]
    rest = [secrets.choice(alphabet) for _ in range(length - len(required))]
    return "".join(required + rest)


def _resolve_admin_password() -> tuple[str, bool]:
    configured = os.getenv("EDUMORPH_INITIAL_ADMIN_PASSWORD", "").strip()
    if configured:
        if len(configured) < 12:
            raise ValueError(
                "EDUMORPH_INITIAL_ADMIN_PASSWORD must be at least 12 characters."
            )
        return configured, True
    return _generate_password(), False


def _register(email, password, display_name, role, subjects=None):
    auth_service = get_auth_service()
    try:
        return auth_service.register_user(
            email=email,
            password=password,
            display_name=display_name,
            role=role,
            subjects=subjects,
        )
    except AuthenticationError as e:
        print(f"  Skipping {email}: {e}")
        return None


def _seed_history(student_id: str, subject_levels: dict, rng: random.Random) -> int:
    """Write three weeks of backdated events, then recompute metrics once."""
    store = get_document_store()
    now = utc_now()
    count = 0
    for day in range(21, 0, -1):
        if rng.random() < 0.35:
            continue
        subject = rng.choice(list(subject_levels))
        level = subject_levels[subject]
        event = ProgressEvent(
            student_id=student_id,
            subject=subject,
            topic=rng.choice(TOPICS[subject]),
            score=max(0, min(100, rng.gauss(level, 8))),
            time_spent=rng.randint(10, 60),
            difficulty=Difficulty.INTERMEDIATE if level >= 70 else Difficulty.BEGINNER,
            attempts=1 if level >= 70 else rng.randint(1, 4),
            completed_at=now - timedelta(days=day, hours=rng.randint(0, 6)),
        )
        store.add_document(Collection.PROGRESS, event.to_document())
        count += 1

    get_progress_tracking_service().recompute_metrics(student_id)
    return count


def seed_demo_data() -> int:
    print("Seeding database with demo data...")
    rng = random.Random(42)

    try:
        admin_password, password_from_env = _resolve_admin_password()
        admin_email = (
            os.getenv("EDUMORPH_INITIAL_ADMIN_EMAIL", "admin@edumorph.dev").strip()
            or "admin@edumorph.dev"
        )
        demo_password = os.getenv("EDUMORPH_DEMO_PASSWORD", "Demo1234!")

        if _register(admin_email, admin_password, "Administrator", UserRole.ADMIN):
            print("[OK] Admin user created")
            print(f"  Email: {admin_email}")
            if password_from_env:
                print("  Password: (from EDUMORPH_INITIAL_ADMIN_PASSWORD)")
            else:
                print(f"  Generated Password: {admin_password}")

        _register("teacher@school.edu", demo_password, "Demo Teacher", UserRole.TEACHER)

        for email, name, levels in DEMO_STUDENTS:
            user = _register(
                email, demo_password, name, UserRole.STUDENT, subjects=list(levels)
            )
            if user is None:
                continue
            events = _seed_history(user.uid, levels, rng)
            print(f"[OK] {name}: {events} progress events")

        return 0
    except EduMorphException as e:
        print(f"[FAIL] Error seeding demo data: {e}")
        import traceback

        traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(seed_demo_data())
