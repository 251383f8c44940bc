"""
Progress Tracking Service
Records completed activities and keeps each student's performance metrics
in step with their full history
"""

import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..models import (
    Collection,
    PerformanceMetrics,
    ProgressEvent,
    ProgressEventCreate,
    ensure_utc,
    format_timestamp,
    utc_now,
)
from .document_store import DocumentStore, get_document_store
from .logging import get_logging_service

STRENGTH_THRESHOLD = 75
WEAKNESS_THRESHOLD = 60
VELOCITY_WINDOW_DAYS = 7
CONSISTENCY_WINDOW_DAYS = 30
CONSISTENCY_MIN_EVENTS = 7
CONSISTENCY_DEFAULT = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives"""
    return int(math.floor(value + 0.5))


def calculate_consistency(events: List[ProgressEvent], now: datetime) -> int:
    """
    Score 0-100 for how regularly the student studied in the last 30 days.

    Fewer than 7 events overall is treated as not enough data (50).
    """
    if len(events) < CONSISTENCY_MIN_EVENTS:
        return CONSISTENCY_DEFAULT

    cutoff = ensure_utc(now) - timedelta(days=CONSISTENCY_WINDOW_DAYS)
    recent = [e for e in events if e.completed_at >= cutoff]
    if not recent:
        return 0

    active_days = {e.completed_at.date() for e in recent}
    consistency = min(100.0, len(active_days) / CONSISTENCY_WINDOW_DAYS * 100)
    return round_half_up(consistency)


def compute_performance_metrics(
    student_id: str, events: List[ProgressEvent], now: datetime
) -> Optional[PerformanceMetrics]:
    """Roll a student's whole history up into a metrics snapshot.

    Returns None for an empty history.
    """
    if not events:
        return None

    now = ensure_utc(now)
    overall_score = sum(e.score for e in events) / len(events)

    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for event in events:
        totals[event.subject] = totals.get(event.subject, 0.0) + event.score
        counts[event.subject] = counts.get(event.subject, 0) + 1
    subject_scores = {subject: totals[subject] / counts[subject] for subject in totals}

    strengths = [s for s, score in subject_scores.items() if score >= STRENGTH_THRESHOLD]
    weaknesses = [s for s, score in subject_scores.items() if score < WEAKNESS_THRESHOLD]

    week_ago = now - timedelta(days=VELOCITY_WINDOW_DAYS)
    learning_velocity = sum(1 for e in events if e.completed_at >= week_ago)

    return PerformanceMetrics(
        student_id=student_id,
        overall_score=overall_score,
        subject_scores=subject_scores,
        strengths=strengths,
        weaknesses=weaknesses,
        learning_velocity=learning_velocity,
        consistency=calculate_consistency(events, now),
        last_updated=now,
    )


class ProgressTrackingService:
    """Service for tracking student progress"""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or get_document_store()
        self.logging_service = get_logging_service()

    def record_progress(self, event: ProgressEventCreate) -> ProgressEvent:
        """
        Record a completed activity.

        The event is stamped with the current time, stored under a generated
        id and the student's metrics are recomputed. Subject, topic and score
        are kept exactly as given.

        Args:
            event: Activity without ``completedAt``

        Returns:
            The stored event
        """
        stored = ProgressEvent(**event.model_dump(), completed_at=utc_now())
        doc_id = self.store.add_document(Collection.PROGRESS, stored.to_document())
        self.logging_service.log_crud_operation(
            "create",
            Collection.PROGRESS,
            doc_id,
            user_id=stored.student_id,
            subject=stored.subject,
            topic=stored.topic,
            score=stored.score,
        )

        self.recompute_metrics(stored.student_id)
        return stored

    def get_student_progress(
        self, student_id: str, limit: Optional[int] = None
    ) -> List[ProgressEvent]:
        """All of a student's events, newest first"""
        rows = self.store.query_documents(
            Collection.PROGRESS,
            filters=[("studentId", "==", student_id)],
            order_by="completedAt",
            descending=True,
            limit=limit,
        )
        return [ProgressEvent.from_document(data) for _, data in rows]

    def recompute_metrics(
        self, student_id: str, now: Optional[datetime] = None
    ) -> Optional[PerformanceMetrics]:
        """Recompute and overwrite the student's metrics snapshot.

        Nothing is written when the student has no history.
        """
        events = self.get_student_progress(student_id)
        metrics = compute_performance_metrics(student_id, events, now or utc_now())
        if metrics is None:
            return None

        self.store.set_document(
            Collection.PERFORMANCE_METRICS, student_id, metrics.to_document()
        )
        self.logging_service.log_analytics_event(
            "metrics.recomputed",
            student_id=student_id,
            events=len(events),
            overall_score=metrics.overall_score,
            consistency=metrics.consistency,
        )
        return metrics

    def find_performance_metrics(self, student_id: str) -> Optional[PerformanceMetrics]:
        """Persisted snapshot, or None. Never writes."""
        data = self.store.get_document(Collection.PERFORMANCE_METRICS, student_id)
        if data is None:
            return None
        return PerformanceMetrics.from_document(data)

    def get_or_create_performance_metrics(
        self, student_id: str
    ) -> Optional[PerformanceMetrics]:
        """Persisted snapshot; computed and stored first when missing.

        Returns None only when the student has no history at all.
        """
        metrics = self.find_performance_metrics(student_id)
        if metrics is not None:
            return metrics
        return self.recompute_metrics(student_id)

    def delete_progress_before(self, student_id: str, cutoff: datetime) -> int:
        """Delete the student's events completed before ``cutoff``"""
        rows = self.store.query_documents(
            Collection.PROGRESS,
            filters=[
                ("studentId", "==", student_id),
                ("completedAt", "<", format_timestamp(cutoff)),
            ],
        )
        deleted = self.store.delete_documents(
            Collection.PROGRESS, [doc_id for doc_id, _ in rows]
        )
        if deleted:
            self.logging_service.log_crud_operation(
                "delete",
                Collection.PROGRESS,
                None,
                user_id=student_id,
                count=deleted,
                before=format_timestamp(cutoff),
            )
        return deleted


# Global instance
_progress_tracking_service: Optional[ProgressTrackingService] = None


def get_progress_tracking_service() -> ProgressTrackingService:
    """Get the global progress tracking service instance"""
    global _progress_tracking_service
    if _progress_tracking_service is None:
        _progress_tracking_service = ProgressTrackingService()
    return _progress_tracking_service
