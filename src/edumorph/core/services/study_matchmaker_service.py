"""
Study Matchmaker Service
Ranks other students as study partners by shared subjects and similar performance
"""

from typing import List, Optional

from ..models import (
    Collection,
    PerformanceMetrics,
    StudyMatch,
    StudyPreferences,
    UserRole,
    utc_now,
)
from .document_store import DocumentStore, get_document_store
from .logging import get_logging_service
from .progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
    round_half_up,
)
from .settings_config_service import get_settings_service

SUBJECT_WEIGHT = 40
SIMILARITY_WINDOW = 30


def calculate_compatibility(
    student_metrics: PerformanceMetrics,
    candidate_metrics: PerformanceMetrics,
    common_subjects: List[str],
    preferences: StudyPreferences,
) -> int:
    """
    Compatibility score 0-100.

    Shared subjects contribute up to 40 points; overall score and consistency
    each contribute up to 30, falling off linearly with the difference.
    """
    score = 0.0
    score += len(common_subjects) / len(preferences.subjects) * SUBJECT_WEIGHT

    score_diff = abs(student_metrics.overall_score - candidate_metrics.overall_score)
    score += max(0, SIMILARITY_WINDOW - score_diff) * (30 / 30)

    consistency_diff = abs(student_metrics.consistency - candidate_metrics.consistency)
    score += max(0, SIMILARITY_WINDOW - consistency_diff) * (30 / 30)

    return round_half_up(score)


def match_document_id(student_id: str, candidate_id: str) -> str:
    return f"{student_id}-{candidate_id}"


class StudyMatchmakerService:
    """Service for finding and storing study partner matches"""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        progress_service: Optional[ProgressTrackingService] = None,
    ):
        self.store = store or get_document_store()
        self.progress_service = progress_service or get_progress_tracking_service()
        self.logging_service = get_logging_service()

        defaults = get_settings_service().get_matchmaking_defaults()
        self.min_score = defaults["min_score"]
        self.max_results = defaults["max_results"]

    def _candidate_ids(self, student_id: str) -> List[str]:
        rows = self.store.query_documents(
            Collection.USERS, filters=[("role", "==", UserRole.STUDENT.value)]
        )
        return [doc_id for doc_id, _ in rows if doc_id != student_id]

    def find_study_matches(
        self, student_id: str, preferences: StudyPreferences
    ) -> List[StudyMatch]:
        """
        Score every other student and store the best matches.

        Candidates are looked up one at a time; any failing lookup aborts
        the scan. Only matches scoring at least ``min_score`` are kept and
        the top ``max_results`` are persisted and returned.
        """
        candidates = self._candidate_ids(student_id)

        student_metrics = self.progress_service.get_or_create_performance_metrics(
            student_id
        )
        if student_metrics is None:
            return []

        matches: List[StudyMatch] = []
        for candidate_id in candidates:
            candidate_metrics = (
                self.progress_service.get_or_create_performance_metrics(candidate_id)
            )
            if candidate_metrics is None:
                continue

            common_subjects = [
                subject
                for subject in preferences.subjects
                if subject in candidate_metrics.subject_scores
            ]
            if not common_subjects:
                continue

            score = calculate_compatibility(
                student_metrics, candidate_metrics, common_subjects, preferences
            )
            if score < self.min_score:
                continue

            matches.append(
                StudyMatch(
                    match_id=match_document_id(student_id, candidate_id),
                    student1=student_id,
                    student2=candidate_id,
                    common_subjects=common_subjects,
                    compatibility_score=score,
                    study_preferences=preferences,
                    matched_at=utc_now(),
                )
            )

        # sorted() is stable: equal scores keep candidate order
        top_matches = sorted(
            matches, key=lambda m: m.compatibility_score, reverse=True
        )[: self.max_results]

        for match in top_matches:
            self.store.set_document(
                Collection.STUDY_MATCHES, match.match_id, match.to_document()
            )

        self.logging_service.log_analytics_event(
            "matches.found",
            student_id=student_id,
            candidates=len(candidates),
            qualified=len(matches),
            saved=len(top_matches),
        )
        return top_matches

    def get_saved_matches(self, student_id: str) -> List[StudyMatch]:
        """Stored matches found for the student, best first"""
        rows = self.store.query_documents(
            Collection.STUDY_MATCHES, filters=[("student1", "==", student_id)]
        )
        matches = [StudyMatch.from_document(data) for _, data in rows]
        return sorted(matches, key=lambda m: m.compatibility_score, reverse=True)


# Global instance
_study_matchmaker_service: Optional[StudyMatchmakerService] = None


def get_study_matchmaker_service() -> StudyMatchmakerService:
    """Get the global study matchmaker service instance"""
    global _study_matchmaker_service
    if _study_matchmaker_service is None:
        _study_matchmaker_service = StudyMatchmakerService()
    return _study_matchmaker_service
