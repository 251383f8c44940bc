"""
Analytics Service
Generates student insights and period reports from metrics, gaps and history
"""

from datetime import datetime
from typing import Dict, List, Optional

from ..exceptions import NoPerformanceDataError, NotFoundError
from ..models import (
    AnalyticsInsight,
    Collection,
    InsightBatch,
    InsightType,
    ProgressEvent,
    ReportPeriod,
    StudentReport,
    SubjectReport,
    ensure_utc,
    utc_now,
)
from .document_store import DocumentStore, get_document_store
from .learning_gap_service import LearningGapService, get_learning_gap_service
from .logging import get_logging_service
from .progress_tracking_service import (
    ProgressTrackingService,
    get_progress_tracking_service,
)

GRADE_SCALE = [
    (90, "A+"),
    (85, "A"),
    (80, "B+"),
    (75, "B"),
    (70, "C+"),
    (65, "C"),
    (60, "D"),
]

# Not yet derived from curriculum or attendance data
EXTRA_TOPICS_PLACEHOLDER = 5
ATTENDANCE_PLACEHOLDER = 85.0


def grade_for_score(score: float) -> str:
    for lower_bound, grade in GRADE_SCALE:
        if score >= lower_bound:
            return grade
    return "F"


def build_subject_reports(
    events: List[ProgressEvent], strengths: List[str], weaknesses: List[str]
) -> List[SubjectReport]:
    """Per-subject summaries in the order subjects first appear in ``events``"""
    by_subject: Dict[str, List[ProgressEvent]] = {}
    for event in events:
        by_subject.setdefault(event.subject, []).append(event)

    reports = []
    for subject, subject_events in by_subject.items():
        score = sum(e.score for e in subject_events) / len(subject_events)
        topics_completed = len({e.topic for e in subject_events})
        reports.append(
            SubjectReport(
                subject=subject,
                grade=grade_for_score(score),
                score=score,
                topics_completed=topics_completed,
                topics_total=topics_completed + EXTRA_TOPICS_PLACEHOLDER,
                strengths=(
                    ["Consistent performance", "Good understanding"]
                    if subject in strengths
                    else []
                ),
                improvements=(
                    ["Needs more practice", "Review fundamentals"]
                    if subject in weaknesses
                    else []
                ),
            )
        )
    return reports


class AnalyticsService:
    """Service for insights and student reports"""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        progress_service: Optional[ProgressTrackingService] = None,
        gap_service: Optional[LearningGapService] = None,
    ):
        self.store = store or get_document_store()
        self.progress_service = progress_service or get_progress_tracking_service()
        self.gap_service = gap_service or get_learning_gap_service()
        self.logging_service = get_logging_service()

    def generate_insights(self, student_id: str) -> List[AnalyticsInsight]:
        """
        Build the student's insight list and replace the stored batch.

        Returns an empty list, without writing, when the student has no data.
        """
        metrics = self.progress_service.get_or_create_performance_metrics(student_id)
        gaps = self.gap_service.identify_learning_gaps(student_id)
        if metrics is None:
            return []

        now = utc_now()
        insights: List[AnalyticsInsight] = []

        for strength in metrics.strengths:
            insights.append(
                AnalyticsInsight(
                    type=InsightType.ACHIEVEMENT,
                    title=f"Excelling in {strength}",
                    description=(
                        f"You're performing excellently in {strength}! "
                        "Keep up the great work."
                    ),
                    action_items=[
                        f"Consider helping peers with {strength}",
                        "Try advanced materials to challenge yourself",
                    ],
                    created_at=now,
                )
            )

        for weakness in metrics.weaknesses:
            related = [g for g in gaps if g.subject == weakness]
            if related:
                action_items = list(related[0].suggested_resources)
            else:
                action_items = [
                    f"Schedule dedicated study time for {weakness}",
                    "Seek help from teacher or tutor",
                    "Practice with additional exercises",
                ]
            insights.append(
                AnalyticsInsight(
                    type=InsightType.WEAKNESS,
                    title=f"Improvement needed in {weakness}",
                    description=f"Focus on strengthening your understanding of {weakness}.",
                    action_items=action_items,
                    created_at=now,
                )
            )

        if metrics.consistency < 50:
            insights.append(
                AnalyticsInsight(
                    type=InsightType.RECOMMENDATION,
                    title="Improve Study Consistency",
                    description=(
                        "Regular study sessions lead to better retention "
                        "and understanding."
                    ),
                    action_items=[
                        "Set a daily study schedule",
                        "Use calendar reminders",
                        "Start with small, manageable sessions",
                    ],
                    created_at=now,
                )
            )

        if metrics.learning_velocity < 3:
            insights.append(
                AnalyticsInsight(
                    type=InsightType.RECOMMENDATION,
                    title="Increase Learning Pace",
                    description="Try to cover more topics each week for faster progress.",
                    action_items=[
                        "Allocate more study time each day",
                        "Break complex topics into smaller parts",
                        "Use active learning techniques",
                    ],
                    created_at=now,
                )
            )

        batch = InsightBatch(student_id=student_id, insights=insights, generated_at=now)
        self.store.set_document(Collection.INSIGHTS, student_id, batch.to_document())
        self.logging_service.log_analytics_event(
            "insights.generated", student_id=student_id, count=len(insights)
        )
        return insights

    def get_insights(self, student_id: str) -> Optional[InsightBatch]:
        """Last stored insight batch, or None"""
        data = self.store.get_document(Collection.INSIGHTS, student_id)
        if data is None:
            return None
        return InsightBatch.from_document(data)

    def generate_student_report(
        self, student_id: str, start: datetime, end: datetime
    ) -> StudentReport:
        """
        Build and store a report over ``start <= completedAt <= end``.

        Raises:
            NoPerformanceDataError: The student has no metrics yet
        """
        metrics = self.progress_service.get_or_create_performance_metrics(student_id)
        if metrics is None:
            raise NoPerformanceDataError("No performance data available")

        start = ensure_utc(start)
        end = ensure_utc(end)
        events = self.progress_service.get_student_progress(student_id)
        period_events = [e for e in events if start <= e.completed_at <= end]

        generated_at = utc_now()
        report = StudentReport(
            student_id=student_id,
            report_id=f"{student_id}-{int(generated_at.timestamp() * 1000)}",
            period=ReportPeriod(start=start, end=end),
            overall_grade=grade_for_score(metrics.overall_score),
            subjects=build_subject_reports(
                period_events, metrics.strengths, metrics.weaknesses
            ),
            attendance=ATTENDANCE_PLACEHOLDER,
            behavioral_notes=["Engaged in class", "Participates actively"],
            recommendations=[f"Focus on improving {w}" for w in metrics.weaknesses]
            + ["Maintain current study habits for strong subjects"],
            generated_at=generated_at,
        )

        self.store.set_document(Collection.REPORTS, report.report_id, report.to_document())
        self.logging_service.log_crud_operation(
            "create",
            Collection.REPORTS,
            report.report_id,
            user_id=student_id,
            subjects=len(report.subjects),
            overall_grade=report.overall_grade,
        )
        return report

    def get_report(self, report_id: str) -> StudentReport:
        data = self.store.get_document(Collection.REPORTS, report_id)
        if data is None:
            raise NotFoundError(f"Report {report_id} not found")
        return StudentReport.from_document(data)

    def list_reports(self, student_id: str) -> List[StudentReport]:
        """Stored reports for the student, newest first"""
        rows = self.store.query_documents(
            Collection.REPORTS,
            filters=[("studentId", "==", student_id)],
            order_by="generatedAt",
            descending=True,
        )
        return [StudentReport.from_document(data) for _, data in rows]


# Global instance
_analytics_service: Optional[AnalyticsService] = None


def get_analytics_service() -> AnalyticsService:
    """Get the global analytics service instance"""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service
