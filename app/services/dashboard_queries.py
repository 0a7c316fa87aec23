"""
Dashboard read queries.

Each method is one independent read: it opens its own session, runs a single
query and returns plain records. That keeps them safe to run side by side on
the fetch thread pool.
"""
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Set, TypeVar

from sqlalchemy.orm import Session, joinedload, selectinload, contains_eager

from app.models.profile import Profile
from app.models.review import COMPETENCY_FIELDS, PerformanceReview, ReviewCycle, ReviewSummary
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.leave_balance import LeaveBalance
from app.models.attendance_log import AttendanceLog
from app.models.project import Project, ProjectAssignment, ProjectStatus
from app.schemas.records import (
    AttendanceLogRecord,
    CompetencyRecord,
    CompletedReviewRecord,
    LeaveBalanceRecord,
    LeaveRequestRecord,
    ProfileCard,
    ProjectAssignmentRecord,
    ReviewCycleRecord,
    ReviewRecord,
    ReviewSummaryRecord,
)
from app.services.base import BaseService

T = TypeVar("T")


def _review_record(review: PerformanceReview, with_peers: bool = False) -> ReviewRecord:
    return ReviewRecord(
        id=review.id,
        employee_id=review.employee_id,
        cycle_id=review.cycle_id,
        self_score=review.self_score,
        created_at=review.created_at,
        employee=ProfileCard.model_validate(review.employee) if review.employee else None,
        cycle_name=review.cycle.name if review.cycle else None,
        peer_review_count=len(review.peer_reviews) if with_peers else 0,
    )


def _competency_record(row) -> CompetencyRecord:
    # Unanswered dimensions count as zero
    return CompetencyRecord(**{
        f"score_{name}": getattr(row, f"score_{name}") or 0 for name in COMPETENCY_FIELDS
    })


class DashboardQueries(BaseService):

    def _read(self, query: Callable[[Session], T]) -> T:
        with self.session_factory() as db:
            return query(db)

    # ------------------------------------------------------------------
    # Admin pipeline
    # ------------------------------------------------------------------

    def count_profiles(self) -> int:
        return self._read(lambda db: db.query(Profile).count())

    def pending_reviews(self, period: str, limit: int) -> List[ReviewRecord]:
        """Reviews in the period still waiting on the employee's self score."""
        def query(db: Session) -> List[ReviewRecord]:
            rows = (
                db.query(PerformanceReview)
                .options(
                    joinedload(PerformanceReview.employee),
                    joinedload(PerformanceReview.cycle),
                    selectinload(PerformanceReview.peer_reviews),
                )
                .filter(
                    PerformanceReview.self_score.is_(None),
                    PerformanceReview.cycle_id == period,
                )
                .order_by(PerformanceReview.created_at.desc(), PerformanceReview.id.desc())
                .limit(limit)
                .all()
            )
            return [_review_record(r, with_peers=True) for r in rows]
        return self._read(query)

    def pending_leave_requests(self, limit: int) -> List[LeaveRequestRecord]:
        def query(db: Session) -> List[LeaveRequestRecord]:
            rows = (
                db.query(LeaveRequest)
                .options(joinedload(LeaveRequest.profile))
                .filter(LeaveRequest.status == LeaveStatus.PENDING.value)
                .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
                .limit(limit)
                .all()
            )
            return [LeaveRequestRecord.model_validate(r) for r in rows]
        return self._read(query)

    def attendance_for_day(self, day: date) -> List[AttendanceLogRecord]:
        def query(db: Session) -> List[AttendanceLogRecord]:
            rows = db.query(AttendanceLog).filter(AttendanceLog.date == day).order_by(AttendanceLog.id).all()
            return [AttendanceLogRecord.model_validate(r) for r in rows]
        return self._read(query)

    def review_summaries(self, period: str) -> List[ReviewSummaryRecord]:
        def query(db: Session) -> List[ReviewSummaryRecord]:
            rows = (
                db.query(ReviewSummary)
                .options(joinedload(ReviewSummary.employee))
                .filter(ReviewSummary.cycle_id == period)
                .order_by(ReviewSummary.id)
                .all()
            )
            return [ReviewSummaryRecord.model_validate(r) for r in rows]
        return self._read(query)

    def recent_completed_reviews(self, limit: int) -> List[ReviewRecord]:
        def query(db: Session) -> List[ReviewRecord]:
            rows = (
                db.query(PerformanceReview)
                .options(joinedload(PerformanceReview.employee), joinedload(PerformanceReview.cycle))
                .filter(PerformanceReview.self_score.isnot(None))
                .order_by(PerformanceReview.created_at.desc(), PerformanceReview.id.desc())
                .limit(limit)
                .all()
            )
            return [_review_record(r) for r in rows]
        return self._read(query)

    def recent_leave_requests(self, limit: int) -> List[LeaveRequestRecord]:
        def query(db: Session) -> List[LeaveRequestRecord]:
            rows = (
                db.query(LeaveRequest)
                .options(joinedload(LeaveRequest.profile))
                .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
                .limit(limit)
                .all()
            )
            return [LeaveRequestRecord.model_validate(r) for r in rows]
        return self._read(query)

    def count_on_leave(self, day: date) -> int:
        """Approved leave requests whose date range covers the day."""
        return self._read(
            lambda db: db.query(LeaveRequest)
            .filter(
                LeaveRequest.status == LeaveStatus.APPROVED.value,
                LeaveRequest.start_date <= day,
                LeaveRequest.end_date >= day,
            )
            .count()
        )

    # ------------------------------------------------------------------
    # Employee pipeline
    # ------------------------------------------------------------------

    def leave_balance(self, user_id: int) -> Optional[LeaveBalanceRecord]:
        def query(db: Session) -> Optional[LeaveBalanceRecord]:
            row = db.query(LeaveBalance).filter(LeaveBalance.user_id == user_id).first()
            return LeaveBalanceRecord.model_validate(row) if row else None
        return self._read(query)

    def user_leave_requests(self, user_id: int, limit: int) -> List[LeaveRequestRecord]:
        def query(db: Session) -> List[LeaveRequestRecord]:
            rows = (
                db.query(LeaveRequest)
                .options(joinedload(LeaveRequest.profile))
                .filter(LeaveRequest.user_id == user_id)
                .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
                .limit(limit)
                .all()
            )
            return [LeaveRequestRecord.model_validate(r) for r in rows]
        return self._read(query)

    def user_attendance(self, user_id: int, limit: int) -> List[AttendanceLogRecord]:
        def query(db: Session) -> List[AttendanceLogRecord]:
            rows = (
                db.query(AttendanceLog)
                .filter(AttendanceLog.user_id == user_id)
                .order_by(AttendanceLog.date.desc())
                .limit(limit)
                .all()
            )
            return [AttendanceLogRecord.model_validate(r) for r in rows]
        return self._read(query)

    def user_review_summary(self, user_id: int, period: str) -> Optional[ReviewSummaryRecord]:
        def query(db: Session) -> Optional[ReviewSummaryRecord]:
            row = (
                db.query(ReviewSummary)
                .options(joinedload(ReviewSummary.employee))
                .filter(ReviewSummary.employee_id == user_id, ReviewSummary.cycle_id == period)
                .first()
            )
            return ReviewSummaryRecord.model_validate(row) if row else None
        return self._read(query)

    def active_assignments(self, user_id: int, limit: int) -> List[ProjectAssignmentRecord]:
        """Assignments to Active projects, with their SLA and quality rows."""
        def query(db: Session) -> List[ProjectAssignmentRecord]:
            rows = (
                db.query(ProjectAssignment)
                .join(ProjectAssignment.project)
                .options(
                    contains_eager(ProjectAssignment.project),
                    selectinload(ProjectAssignment.sla_scores),
                    selectinload(ProjectAssignment.quality_scores),
                )
                .filter(
                    ProjectAssignment.user_id == user_id,
                    Project.status == ProjectStatus.ACTIVE.value,
                )
                .order_by(ProjectAssignment.id)
                .limit(limit)
                .all()
            )
            return [ProjectAssignmentRecord.model_validate(r) for r in rows]
        return self._read(query)

    def upcoming_cycles(self, now: datetime, limit: int) -> List[ReviewCycleRecord]:
        def query(db: Session) -> List[ReviewCycleRecord]:
            rows = (
                db.query(ReviewCycle)
                .filter(ReviewCycle.end_date >= now)
                .order_by(ReviewCycle.end_date.asc(), ReviewCycle.id)
                .limit(limit)
                .all()
            )
            return [ReviewCycleRecord.model_validate(r) for r in rows]
        return self._read(query)

    def latest_completed_review(self, user_id: int) -> Optional[CompletedReviewRecord]:
        """Most recent review with a self score and at least one peer review."""
        def query(db: Session) -> Optional[CompletedReviewRecord]:
            review = (
                db.query(PerformanceReview)
                .options(selectinload(PerformanceReview.peer_reviews))
                .filter(
                    PerformanceReview.employee_id == user_id,
                    PerformanceReview.self_score.isnot(None),
                    PerformanceReview.peer_reviews.any(),
                )
                .order_by(PerformanceReview.created_at.desc(), PerformanceReview.id.desc())
                .first()
            )
            if review is None:
                return None
            return CompletedReviewRecord(
                review_id=review.id,
                cycle_id=review.cycle_id,
                self_scores=_competency_record(review),
                peer_scores=[_competency_record(p) for p in review.peer_reviews],
            )
        return self._read(query)

    def submitted_cycle_ids(self, user_id: int, cycle_ids: Iterable[str]) -> Set[str]:
        cycle_ids = list(cycle_ids)
        if not cycle_ids:
            return set()

        def query(db: Session) -> Set[str]:
            rows = (
                db.query(PerformanceReview.cycle_id)
                .filter(
                    PerformanceReview.employee_id == user_id,
                    PerformanceReview.self_score.isnot(None),
                    PerformanceReview.cycle_id.in_(cycle_ids),
                )
                .distinct()
                .all()
            )
            return {row.cycle_id for row in rows}
        return self._read(query)
