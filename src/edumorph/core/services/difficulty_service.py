"""
Difficulty Service
Adaptive difficulty transitions, pacing and study recommendations
"""

from typing import List, Optional, Sequence

from ..models import Difficulty, PerformanceMetrics, ProgressEvent
from .logging import get_logging_service
from .progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)

MIN_EVENTS_FOR_ADJUSTMENT = 3
RECENT_WINDOW = 5
MIN_MULTIPLIER = 0.5
MAX_MULTIPLIER = 1.5


def adjust_difficulty(
    current: Difficulty,
    recent_events: Sequence[ProgressEvent],
    metrics: PerformanceMetrics,
) -> Difficulty:
    """
    Decide the next difficulty level from recent performance.

    Args:
        current: Level the student is working at
        recent_events: Recent events, any order
        metrics: Student's metrics snapshot (consistency is used)

    Returns:
        The new level; unchanged with fewer than 3 events
    """
    if len(recent_events) < MIN_EVENTS_FOR_ADJUSTMENT:
        return current

    avg_score = sum(e.score for e in recent_events) / len(recent_events)
    avg_attempts = sum(e.attempts for e in recent_events) / len(recent_events)

    if current == Difficulty.BEGINNER:
        if avg_score >= 80 and avg_attempts <= 1.5 and metrics.consistency >= 70:
            return Difficulty.INTERMEDIATE
    elif current == Difficulty.INTERMEDIATE:
        if avg_score >= 85 and avg_attempts <= 1.3 and metrics.consistency >= 80:
            return Difficulty.ADVANCED
        if avg_score < 60 or avg_attempts > 2.5:
            return Difficulty.BEGINNER
    elif current == Difficulty.ADVANCED:
        if avg_score < 70 or avg_attempts > 2:
            return Difficulty.INTERMEDIATE

    return current


def get_recommended_difficulty(subject: str, metrics: PerformanceMetrics) -> Difficulty:
    """Starting level for a subject; unknown subjects count as a score of 0"""
    subject_score = metrics.subject_scores.get(subject, 0)

    if subject_score >= 80 and metrics.consistency >= 70:
        return Difficulty.ADVANCED
    if subject_score >= 60 and metrics.consistency >= 50:
        return Difficulty.INTERMEDIATE
    return Difficulty.BEGINNER


def learning_speed_multiplier(metrics: PerformanceMetrics) -> float:
    """Pace multiplier in [0.5, 1.5]"""
    multiplier = 1.0

    if metrics.overall_score >= 85:
        multiplier += 0.3
    elif metrics.overall_score >= 70:
        multiplier += 0.1
    elif metrics.overall_score < 50:
        multiplier -= 0.3

    if metrics.consistency >= 80:
        multiplier += 0.2
    elif metrics.consistency < 40:
        multiplier -= 0.2

    return max(MIN_MULTIPLIER, min(MAX_MULTIPLIER, multiplier))


def generate_study_recommendations(metrics: PerformanceMetrics) -> List[str]:
    recommendations: List[str] = []

    if metrics.overall_score < 60:
        recommendations.append(
            "Focus on reviewing fundamental concepts before moving forward"
        )
        recommendations.append("Consider scheduling more practice sessions each week")
    elif metrics.overall_score >= 85:
        recommendations.append(
            "Excellent progress! You're ready for more challenging material"
        )

    if metrics.consistency < 50:
        recommendations.append(
            "Try to study regularly - consistency is key to retention"
        )
        recommendations.append("Set a daily study schedule and stick to it")

    if metrics.learning_velocity < 3:
        recommendations.append(
            "Increase your study pace to complete more topics each week"
        )
    elif metrics.learning_velocity > 10:
        recommendations.append(
            "Great pace! Make sure to review previous topics to ensure retention"
        )

    if metrics.weaknesses:
        recommendations.append(f"Focus extra time on: {', '.join(metrics.weaknesses)}")

    if metrics.strengths:
        recommendations.append(
            f"Great job in: {', '.join(metrics.strengths)}! Keep it up!"
        )

    return recommendations


class DifficultyService:
    """Applies the difficulty rules to a stored student history"""

    def __init__(self, progress_service: Optional[ProgressTrackingService] = None):
        self.progress_service = progress_service or get_progress_tracking_service()
        self.logging_service = get_logging_service()

    def adjust_for_student(
        self,
        student_id: str,
        current: Difficulty,
        window: int = RECENT_WINDOW,
    ) -> Difficulty:
        """Adjust ``current`` using the student's newest ``window`` events"""
        metrics = self.progress_service.get_or_create_performance_metrics(student_id)
        if metrics is None:
            return current

        recent = self.progress_service.get_student_progress(student_id, limit=window)
        new_level = adjust_difficulty(current, recent, metrics)
        if new_level != current:
            self.logging_service.log_analytics_event(
                "difficulty.adjusted",
                student_id=student_id,
                previous=current.value,
                new=new_level.value,
            )
        return new_level


# Global instance
_difficulty_service: Optional[DifficultyService] = None


def get_difficulty_service() -> DifficultyService:
    """Get the global difficulty service instance"""
    global _difficulty_service
    if _difficulty_service is None:
        _difficulty_service = DifficultyService()
    return _difficulty_service
