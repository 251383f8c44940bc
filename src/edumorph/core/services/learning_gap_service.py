"""
Learning Gap Service
Finds topics a student keeps struggling with and suggests remediation
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..models import (
    Collection,
    GapPriority,
    LearningGap,
    ProgressEvent,
    ensure_utc,
    utc_now,
)
from .document_store import DocumentStore, get_document_store
from .logging import get_logging_service
from .progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)

LOW_SCORE_THRESHOLD = 60
HIGH_PRIORITY_THRESHOLD = 40
MAX_ATTEMPTS_BEFORE_GAP = 2


def priority_for_score(score: float) -> GapPriority:
    if score < HIGH_PRIORITY_THRESHOLD:
        return GapPriority.HIGH
    if score < LOW_SCORE_THRESHOLD:
        return GapPriority.MEDIUM
    return GapPriority.LOW


def is_gap_signal(event: ProgressEvent) -> bool:
    """Low score or too many attempts"""
    return event.score < LOW_SCORE_THRESHOLD or event.attempts > MAX_ATTEMPTS_BEFORE_GAP


def generate_suggested_resources(subject: str, topic: str, difficulty: str) -> List[str]:
    return [
        f"Review {difficulty} level materials for {topic}",
        f"Practice exercises on {topic}",
        f"Watch tutorial videos about {subject} - {topic}",
        f"Join study group for {subject}",
    ]


def gap_document_id(student_id: str, subject: str, topic: str) -> str:
    return f"{student_id}-{subject}-{topic}"


def detect_learning_gaps(
    student_id: str, events: List[ProgressEvent], now: datetime
) -> List[LearningGap]:
    """
    One gap per (subject, topic) that has a qualifying event.

    ``events`` are expected newest first; the first qualifying event seen for
    a topic decides its priority and resources.
    """
    now = ensure_utc(now)
    gaps: Dict[Tuple[str, str], LearningGap] = {}

    for event in events:
        if not is_gap_signal(event):
            continue
        key = (event.subject, event.topic)
        if key in gaps:
            continue
        gaps[key] = LearningGap(
            student_id=student_id,
            subject=event.subject,
            topic=event.topic,
            weak_points=[],
            suggested_resources=generate_suggested_resources(
                event.subject, event.topic, event.difficulty.value
            ),
            priority=priority_for_score(event.score),
            identified_at=now,
        )

    return list(gaps.values())


class LearningGapService:
    """Service for detecting and persisting learning gaps"""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        progress_service: Optional[ProgressTrackingService] = None,
    ):
        self.store = store or get_document_store()
        self.progress_service = progress_service or get_progress_tracking_service()
        self.logging_service = get_logging_service()

    def identify_learning_gaps(self, student_id: str) -> List[LearningGap]:
        """
        Detect gaps from the student's history and merge them into the store.

        Returns the freshly detected gaps, not the merged stored state.
        """
        events = self.progress_service.get_student_progress(student_id)
        gaps = detect_learning_gaps(student_id, events, utc_now())

        for gap in gaps:
            self.store.set_document(
                Collection.LEARNING_GAPS,
                gap_document_id(student_id, gap.subject, gap.topic),
                gap.to_document(),
                merge=True,
            )

        self.logging_service.log_analytics_event(
            "gaps.identified",
            student_id=student_id,
            count=len(gaps),
            high_priority=sum(1 for g in gaps if g.priority == GapPriority.HIGH),
        )
        return gaps

    def get_stored_gaps(self, student_id: str) -> List[LearningGap]:
        """Every gap persisted for the student, most recently identified first"""
        rows = self.store.query_documents(
            Collection.LEARNING_GAPS,
            filters=[("studentId", "==", student_id)],
            order_by="identifiedAt",
            descending=True,
        )
        return [LearningGap.from_document(data) for _, data in rows]


# Global instance
_learning_gap_service: Optional[LearningGapService] = None


def get_learning_gap_service() -> LearningGapService:
    """Get the global learning gap service instance"""
    global _learning_gap_service
    if _learning_gap_service is None:
        _learning_gap_service = LearningGapService()
    return _learning_gap_service
