import pytest

from conftest import build_event, build_metrics
from edumorph.core.models import StudyPreferences
from edumorph.core.services.analytics_service import (
    build_subject_reports,
    grade_for_score,
)
from edumorph.core.services.study_matchmaker_service import calculate_compatibility


@pytest.mark.parametrize(
    "score,grade",
    [
        (100, "A+"),
        (90, "A+"),
        (89.99, "A"),
        (85, "A"),
        (80, "B+"),
        (75, "B"),
        (70, "C+"),
        (65, "C"),
        (60, "D"),
        (59.99, "F"),
        (0, "F"),
    ],
)
def test_grade_scale(score, grade):
    assert grade_for_score(score) == grade


def test_subject_reports_group_in_first_seen_order():
    events = [
        build_event(subject="Physics", topic="Forces", score=90),
        build_event(subject="Math", topic="Algebra", score=50),
        build_event(subject="Physics", topic="Forces", score=80),
        build_event(subject="Physics", topic="Energy", score=70),
    ]

    reports = build_subject_reports(events, strengths=["Physics"], weaknesses=["Math"])

    assert [r.subject for r in reports] == ["Physics", "Math"]
    physics, math = reports
    assert physics.score == pytest.approx(80.0)
    assert physics.grade == "B+"
    assert physics.topics_completed == 2
    assert physics.topics_total == 7
    assert physics.strengths == ["Consistent performance", "Good understanding"]
    assert physics.improvements == []
    assert math.grade == "F"
    assert math.improvements == ["Needs more practice", "Review fundamentals"]
    assert math.strengths == []


class TestCompatibility:
    def test_identical_single_subject_candidate_scores_100(self):
        prefs = StudyPreferences(subjects=["Math"])
        a = build_metrics(overall_score=72.0, consistency=40)
        b = build_metrics(overall_score=72.0, consistency=40)

        assert calculate_compatibility(a, b, ["Math"], prefs) == 100

    def test_differences_reduce_score(self):
        prefs = StudyPreferences(subjects=["Math", "Physics"])
        a = build_metrics(overall_score=80, consistency=50)
        b = build_metrics(overall_score=70, consistency=65)

        # 20 + (30 - 10) + (30 - 15)
        assert calculate_compatibility(a, b, ["Math"], prefs) == 55

    def test_large_differences_floor_at_zero(self):
        prefs = StudyPreferences(subjects=["Math"])
        a = build_metrics(overall_score=100, consistency=100)
        b = build_metrics(overall_score=10, consistency=0)

        assert calculate_compatibility(a, b, ["Math"], prefs) == 40

    def test_halves_round_up(self):
        prefs = StudyPreferences(subjects=["Math", "Physics"])
        a = build_metrics(overall_score=71.5, consistency=50)
        b = build_metrics(overall_score=70.0, consistency=50)

        # 20 + 28.5 + 30 = 78.5
        assert calculate_compatibility(a, b, ["Math"], prefs) == 79
