"""
Employee self-service dashboard.

Same shape as the admin pipeline: gate, parallel fetch, pure derivation,
assembly. SLA and work-quality scores are built in two phases: the
performance overview starts with them unset and a patch step fills them in
only when the employee has at least one active project.
"""
from datetime import datetime, timezone
from typing import Callable, FrozenSet, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.core.config import Config, DashboardSettings, settings
from app.core.exceptions import AppException
from app.core.schemas import ApiResponse
from app.models.leave_request import LeaveStatus
from app.models.project import ProjectStatus
from app.models.review import COMPETENCY_FIELDS
from app.schemas.dashboard import (
    ActiveProject,
    AttendanceSummary,
    CompetencyScores,
    EmployeeDashboardData,
    LeaveStatusSummary,
    PerformanceOverview,
    RecentAttendanceItem,
    RecentLeaveItem,
    UpcomingReview,
    UserCard,
)
from app.schemas.records import (
    AttendanceLogRecord,
    CompletedReviewRecord,
    LeaveBalanceRecord,
    LeaveRequestRecord,
    ProfileCard,
    ProjectAssignmentRecord,
    ReviewCycleRecord,
    ReviewSummaryRecord,
    SlaScoreRecord,
    as_utc,
)
from app.services.access_gate import AccessGate, Caller
from app.services.base import BaseService
from app.services.dashboard_common import count_on_time_and_late, resolve_period, round_half_up
from app.services.dashboard_queries import DashboardQueries
from app.services.fetch import fetch_all, fetch_one


class EmployeeFetchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    leave_balance: Optional[LeaveBalanceRecord] = None
    leave_requests: List[LeaveRequestRecord]
    attendance: List[AttendanceLogRecord]
    review_summary: Optional[ReviewSummaryRecord] = None
    assignments: List[ProjectAssignmentRecord]
    cycles: List[ReviewCycleRecord]
    latest_review: Optional[CompletedReviewRecord] = None
    submitted_cycle_ids: FrozenSet[str] = frozenset()


# ============================================================================
# Derivation
# ============================================================================

def leave_balance_value(balance: Optional[LeaveBalanceRecord]) -> float:
    if balance is None or balance.remaining is None:
        return 0
    return balance.remaining


def employee_attendance_summary(logs: Sequence[AttendanceLogRecord]) -> AttendanceSummary:
    on_time, late = count_on_time_and_late(logs)
    rate = int(round_half_up(on_time / len(logs) * 100, 0)) if logs else 100
    return AttendanceSummary(on_time=on_time, late=late, rate=rate)


def recent_leave_item(leave: LeaveRequestRecord) -> RecentLeaveItem:
    return RecentLeaveItem(
        id=leave.id,
        leave_type=leave.leave_type,
        start_date=leave.start_date,
        end_date=leave.end_date,
        status=leave.status,
        days_requested=leave.days_requested,
    )


def leave_status_summary(leaves: Sequence[LeaveRequestRecord]) -> LeaveStatusSummary:
    pending = next((leave for leave in leaves if leave.status == LeaveStatus.PENDING.value), None)
    return LeaveStatusSummary(
        pending_request=recent_leave_item(pending) if pending else None,
        approved_count=sum(1 for leave in leaves if leave.status == LeaveStatus.APPROVED.value),
    )


def competency_average(self_score: float, peer_scores: Sequence[float], max_score: float = 5) -> float:
    """Mean over self + peers, as a percentage of the maximum raw score."""
    total = self_score + sum(peer_scores)
    return total / (len(peer_scores) + 1) / max_score * 100


def competency_scores(review: Optional[CompletedReviewRecord], max_score: float = 5) -> Optional[CompetencyScores]:
    if review is None:
        return None
    scores = {}
    for name in COMPETENCY_FIELDS:
        field = f"score_{name}"
        scores[name] = competency_average(
            getattr(review.self_scores, field),
            [getattr(peer, field) for peer in review.peer_scores],
            max_score,
        )
    return CompetencyScores(**scores)


def sla_percentage(sla_scores: Sequence[SlaScoreRecord], weight_scale: float = 120) -> float:
    # Unscored rows count as zero
    achieved = sum(s.score_achieved or 0 for s in sla_scores)
    best = sum((s.weight_percentage or 0) * weight_scale for s in sla_scores)
    if best <= 0:
        return 0
    return round_half_up(achieved / best * 100)


def active_project(assignment: ProjectAssignmentRecord, weight_scale: float = 120) -> ActiveProject:
    project = assignment.project
    return ActiveProject(
        id=project.id,
        name=project.name,
        status=project.status,
        quarter_id=project.quarter_id,
        end_date=project.end_date,
        sla_percentage=sla_percentage(assignment.sla_scores, weight_scale),
        quality_achieved=sum(1 for q in assignment.quality_scores if q.is_achieved),
        quality_total=len(assignment.quality_scores),
    )


def build_active_projects(assignments: Sequence[ProjectAssignmentRecord], weight_scale: float = 120) -> List[ActiveProject]:
    return [
        active_project(a, weight_scale)
        for a in assignments
        if a.project.status == ProjectStatus.ACTIVE.value
    ]


def backfill_project_scores(overview: PerformanceOverview, projects: Sequence[ActiveProject]) -> PerformanceOverview:
    """Fill SLA and work-quality scores from active projects; no projects, no change."""
    if not projects:
        return overview

    avg_sla = sum(p.sla_percentage for p in projects) / len(projects)
    quality_total = sum(p.quality_total for p in projects)
    quality_achieved = sum(p.quality_achieved for p in projects)
    avg_quality = quality_achieved / quality_total * 100 if quality_total > 0 else 0

    return overview.model_copy(update={
        "sla_score": round_half_up(avg_sla),
        "work_quality_score": round_half_up(avg_quality),
    })


def build_upcoming_reviews(
    cycles: Sequence[ReviewCycleRecord],
    submitted_cycle_ids: FrozenSet[str],
    now: datetime,
    limit: int,
) -> List[UpcomingReview]:
    upcoming = sorted((c for c in cycles if c.end_date >= now), key=lambda c: c.end_date)
    return [
        UpcomingReview(
            cycle_id=cycle.id,
            cycle_name=cycle.name,
            end_date=cycle.end_date,
            has_submitted=cycle.id in submitted_cycle_ids,
        )
        for cycle in upcoming[:limit]
    ]


def derive_employee_dashboard(
    profile: ProfileCard,
    fetched: EmployeeFetchResult,
    period: str,
    now: datetime,
    config: DashboardSettings,
) -> EmployeeDashboardData:
    projects = build_active_projects(fetched.assignments, config.sla_weight_scale)

    overview = PerformanceOverview(
        sla_score=None,
        review_score=fetched.review_summary.overall_percentage if fetched.review_summary else None,
        work_quality_score=None,
        quarter=period,
    )
    overview = backfill_project_scores(overview, projects)

    return EmployeeDashboardData(
        user=UserCard(
            id=profile.id,
            full_name=profile.full_name,
            job_title=profile.job_title,
            avatar_url=profile.avatar_url,
        ),
        leave_balance=leave_balance_value(fetched.leave_balance),
        recent_leave_requests=[recent_leave_item(leave) for leave in fetched.leave_requests],
        recent_attendance=[RecentAttendanceItem.model_validate(log.model_dump()) for log in fetched.attendance],
        attendance_summary=employee_attendance_summary(fetched.attendance),
        leave_status=leave_status_summary(fetched.leave_requests),
        performance_overview=overview,
        active_projects=projects,
        upcoming_reviews=build_upcoming_reviews(
            fetched.cycles, fetched.submitted_cycle_ids, now, config.upcoming_cycle_limit
        ),
        competency_scores=competency_scores(fetched.latest_review, config.max_competency_score),
    )


# ============================================================================
# Pipeline
# ============================================================================

class EmployeeDashboardService(BaseService):
    """Personal dashboard for any caller with a profile."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        config: Config = settings,
        queries: Optional[DashboardQueries] = None,
        gate: Optional[AccessGate] = None,
    ):
        super().__init__(session_factory)
        self.config = config
        self.queries = queries or DashboardQueries(self.session_factory)
        self.gate = gate or AccessGate(self.session_factory)

    def fetch(self, user_id: int, period: str, now: datetime) -> EmployeeFetchResult:
        limits = self.config.dashboard
        q = self.queries
        results = fetch_all({
            "leave_balance": lambda: q.leave_balance(user_id),
            "leave_requests": lambda: q.user_leave_requests(user_id, limits.employee_leave_limit),
            "attendance": lambda: q.user_attendance(user_id, limits.attendance_window),
            "review_summary": lambda: q.user_review_summary(user_id, period),
            "assignments": lambda: q.active_assignments(user_id, limits.project_limit),
            "cycles": lambda: q.upcoming_cycles(now, limits.upcoming_cycle_limit),
        }, max_workers=self.config.fetch_max_workers)

        latest_review = fetch_one("latest_review", lambda: q.latest_completed_review(user_id))
        cycle_ids = [c.id for c in results["cycles"]]
        submitted = fetch_one("submitted_cycle_ids", lambda: q.submitted_cycle_ids(user_id, cycle_ids))

        return EmployeeFetchResult(
            latest_review=latest_review,
            submitted_cycle_ids=frozenset(submitted),
            **results,
        )

    def build(self, caller: Caller, period: Optional[str] = None, now: Optional[datetime] = None) -> EmployeeDashboardData:
        now = as_utc(now) or datetime.now(timezone.utc)
        period = resolve_period(now.date(), period or self.config.current_period)
        self.log_info(f"Building employee dashboard for user {caller.user_id}", period=period)

        fetched = self.fetch(caller.user_id, period, now)
        data = derive_employee_dashboard(caller.profile, fetched, period, now, self.config.dashboard)

        self.log_info(
            "Employee dashboard ready",
            projects=len(data.active_projects),
            upcoming_reviews=len(data.upcoming_reviews),
        )
        return data

    def get_dashboard(
        self,
        token: Optional[str],
        period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ApiResponse[EmployeeDashboardData]:
        """Envelope call contract: never raises domain errors."""
        now = as_utc(now) or datetime.now(timezone.utc)
        period = resolve_period(now.date(), period or self.config.current_period)
        try:
            caller = self.gate.require_profile(token)
            data = self.build(caller, period=period, now=now)
        except AppException as exc:
            self.log_warning(f"Employee dashboard failed: {exc.message}", code=exc.error_code)
            return ApiResponse.fail(exc.message, code=exc.error_code, details=exc.details)
        return ApiResponse.ok(data, metadata={"period": period, "as_of": now.isoformat()})
