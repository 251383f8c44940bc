from datetime import datetime, timezone

import pytest

from conftest import build_event
from edumorph.core.models import Difficulty, GapPriority
from edumorph.core.services.learning_gap_service import (
    detect_learning_gaps,
    generate_suggested_resources,
    priority_for_score,
)

NOW = datetime(2024, 5, 31, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "score,expected",
    [
        (0, GapPriority.HIGH),
        (39.99, GapPriority.HIGH),
        (40, GapPriority.MEDIUM),
        (59.99, GapPriority.MEDIUM),
        (60, GapPriority.LOW),
        (100, GapPriority.LOW),
    ],
)
def test_priority_for_score(score, expected):
    assert priority_for_score(score) == expected


def test_suggested_resources_templates():
    assert generate_suggested_resources("Math", "Fractions", "advanced") == [
        "Review advanced level materials for Fractions",
        "Practice exercises on Fractions",
        "Watch tutorial videos about Math - Fractions",
        "Join study group for Math",
    ]


def test_no_gaps_for_good_history():
    events = [build_event(score=85, attempts=1), build_event(score=60, attempts=2)]
    assert detect_learning_gaps("s1", events, NOW) == []


def test_low_score_or_many_attempts_qualify():
    events = [
        build_event(subject="Math", topic="Algebra", score=90, attempts=3),
        build_event(subject="Math", topic="Geometry", score=45, attempts=1),
        build_event(subject="Physics", topic="Energy", score=95, attempts=2),
    ]

    gaps = detect_learning_gaps("s1", events, NOW)

    assert [(g.subject, g.topic) for g in gaps] == [
        ("Math", "Algebra"),
        ("Math", "Geometry"),
    ]
    assert gaps[0].priority == GapPriority.LOW
    assert gaps[1].priority == GapPriority.MEDIUM


def test_first_qualifying_event_decides_priority_and_resources():
    # newest first: the 55 (medium, intermediate) is seen before the 20
    events = [
        build_event(topic="Algebra", score=95),
        build_event(
            topic="Algebra", score=55, difficulty=Difficulty.INTERMEDIATE, days_ago=1
        ),
        build_event(topic="Algebra", score=20, difficulty=Difficulty.BEGINNER, days_ago=2),
    ]

    gaps = detect_learning_gaps("s1", events, NOW)

    assert len(gaps) == 1
    gap = gaps[0]
    assert gap.priority == GapPriority.MEDIUM
    assert gap.suggested_resources[0] == "Review intermediate level materials for Algebra"
    assert gap.weak_points == []
    assert gap.student_id == "s1"
    assert gap.identified_at == NOW


def test_one_gap_per_subject_topic_pair():
    events = [build_event(subject="Math", topic="Algebra", score=30) for _ in range(4)]
    events.append(build_event(subject="Physics", topic="Algebra", score=30))

    gaps = detect_learning_gaps("s1", events, NOW)

    assert {(g.subject, g.topic) for g in gaps} == {
        ("Math", "Algebra"),
        ("Physics", "Algebra"),
    }
    assert all(g.priority == GapPriority.HIGH for g in gaps)
