"""
Admin / stakeholder dashboard.

The pipeline is gate -> parallel fetch -> derive -> assemble. Everything below
the "Derivation" banner is a pure function of fetched records, so identical
inputs always produce identical output.
"""
from collections import Counter
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.core.config import Config, DashboardSettings, settings
from app.core.exceptions import AppException
from app.core.schemas import ApiResponse
from app.models.leave_request import LeaveStatus
from app.schemas.dashboard import (
    ActivityFeedEntry,
    AdminDashboardData,
    AttendanceOverview,
    AttentionEmployee,
    LeaveApprovedActivity,
    LeaveRejectedActivity,
    LeaveRequestedActivity,
    PendingLeaveItem,
    PendingReviewItem,
    PerformanceDistribution,
    RankedEmployee,
    ReviewActivity,
    TeamMetrics,
)
from app.schemas.records import (
    AttendanceLogRecord,
    LeaveRequestRecord,
    ReviewRecord,
    ReviewSummaryRecord,
)
from app.services.access_gate import AccessGate, Caller
from app.services.base import BaseService
from app.services.dashboard_common import (
    PerformanceBand,
    count_on_time_and_late,
    performance_band,
    resolve_period,
    round_half_up,
)
from app.services.dashboard_queries import DashboardQueries
from app.services.fetch import fetch_all, fetch_one


class AdminFetchResult(BaseModel):
    """Everything the admin derivation needs, as returned by the fetch stage."""
    model_config = ConfigDict(frozen=True)

    total_employees: int
    pending_reviews: List[ReviewRecord]
    pending_leaves: List[LeaveRequestRecord]
    attendance_logs: List[AttendanceLogRecord]
    summaries: List[ReviewSummaryRecord]
    recent_reviews: List[ReviewRecord]
    recent_leaves: List[LeaveRequestRecord]
    on_leave_count: int


# ============================================================================
# Derivation
# ============================================================================

def attendance_rate(total_employees: int, present: int, on_leave: int) -> float:
    if total_employees <= 0:
        return 0
    return round_half_up((present + on_leave) / total_employees * 100)


def build_attendance_overview(
    logs: Sequence[AttendanceLogRecord],
    total_employees: int,
    on_leave_count: int,
) -> AttendanceOverview:
    on_time, late = count_on_time_and_late(logs)
    present = on_time + late
    absent = max(0, total_employees - present - on_leave_count)

    headcount = present + on_leave_count + absent
    on_time_percentage = int(round_half_up(on_time / headcount * 100, 0)) if headcount else 0

    return AttendanceOverview(
        total_today=present,
        on_time=on_time,
        late=late,
        on_leave=on_leave_count,
        absent=absent,
        on_time_percentage=on_time_percentage,
    )


def build_performance_distribution(summaries: Sequence[ReviewSummaryRecord]) -> PerformanceDistribution:
    counts = Counter(performance_band(s.overall_percentage) for s in summaries)
    return PerformanceDistribution(
        outstanding=counts[PerformanceBand.OUTSTANDING],
        above_expectation=counts[PerformanceBand.ABOVE_EXPECTATION],
        meets_expectation=counts[PerformanceBand.MEETS_EXPECTATION],
        below_expectation=counts[PerformanceBand.BELOW_EXPECTATION],
        needs_improvement=counts[PerformanceBand.NEEDS_IMPROVEMENT],
    )


def average_performance(summaries: Sequence[ReviewSummaryRecord]) -> Optional[float]:
    if not summaries:
        return None
    return round_half_up(sum(s.overall_percentage for s in summaries) / len(summaries))


def sort_by_performance(summaries: Sequence[ReviewSummaryRecord]) -> List[ReviewSummaryRecord]:
    # sorted() is stable, so equal scores keep fetch order
    return sorted(summaries, key=lambda s: s.overall_percentage, reverse=True)


def _ranked_fields(summary: ReviewSummaryRecord) -> dict:
    employee = summary.employee
    return {
        "employee_id": summary.employee_id,
        "employee_name": employee.full_name if employee else None,
        "employee_avatar": employee.avatar_url if employee else None,
        "employee_job_title": employee.job_title if employee else None,
        "overall_percentage": summary.overall_percentage,
    }


def top_performers(summaries: Sequence[ReviewSummaryRecord], size: int) -> List[RankedEmployee]:
    return [RankedEmployee(**_ranked_fields(s)) for s in sort_by_performance(summaries)[:size]]


def attention_reason(percentage: float, significant_gap_threshold: float) -> str:
    if percentage < significant_gap_threshold:
        return "Performance significantly below target"
    return "Performance below expectation"


def employees_needing_attention(
    summaries: Sequence[ReviewSummaryRecord],
    size: int,
    threshold: float = 75,
    significant_gap_threshold: float = 60,
) -> List[AttentionEmployee]:
    below = [s for s in sort_by_performance(summaries) if s.overall_percentage < threshold]
    return [
        AttentionEmployee(
            **_ranked_fields(s),
            reason=attention_reason(s.overall_percentage, significant_gap_threshold),
        )
        for s in below[:size]
    ]


def build_pending_reviews(
    reviews: Sequence[ReviewRecord],
    total_reviewers: int,
    limit: int,
) -> List[PendingReviewItem]:
    items = []
    for review in reviews:
        if review.is_completed:
            continue
        employee = review.employee
        items.append(PendingReviewItem(
            employee_id=review.employee_id,
            employee_name=employee.full_name if employee else None,
            employee_avatar=employee.avatar_url if employee else None,
            employee_job_title=employee.job_title if employee else None,
            cycle_id=review.cycle_id,
            cycle_name=review.cycle_name or "",
            # TODO: replace the configured reviewer count with real reviewer assignments once they are stored
            reviewers_pending=max(0, total_reviewers - review.peer_review_count),
            total_reviewers=total_reviewers,
        ))
    return items[:limit]


def build_pending_leaves(leaves: Sequence[LeaveRequestRecord], limit: int) -> List[PendingLeaveItem]:
    pending = [leave for leave in leaves if leave.status == LeaveStatus.PENDING.value]
    pending = sorted(pending, key=lambda leave: leave.created_at, reverse=True)
    return [
        PendingLeaveItem(
            id=leave.id,
            user_id=leave.user_id,
            user_name=leave.profile.full_name if leave.profile else None,
            user_avatar=leave.profile.avatar_url if leave.profile else None,
            leave_type=leave.leave_type,
            start_date=leave.start_date,
            end_date=leave.end_date,
            days_requested=leave.days_requested,
            reason=leave.reason or None,
            created_at=leave.created_at,
        )
        for leave in pending[:limit]
    ]


def review_activity(review: ReviewRecord) -> ReviewActivity:
    employee = review.employee
    return ReviewActivity(
        id=f"review-{review.id}",
        employee_id=review.employee_id,
        user_name=employee.full_name if employee else None,
        user_avatar=employee.avatar_url if employee else None,
        description="Submitted 360 review",
        timestamp=review.created_at,
    )


def leave_description(status: str, leave_type: Optional[str]) -> str:
    if status == LeaveStatus.APPROVED.value:
        return f"Leave approved ({leave_type})" if leave_type else "Leave approved"
    if status == LeaveStatus.REJECTED.value:
        return f"Leave rejected ({leave_type})" if leave_type else "Leave rejected"
    return f"Requested {leave_type} leave" if leave_type else "Requested leave"


def leave_activity(leave: LeaveRequestRecord) -> ActivityFeedEntry:
    fields = {
        "id": f"leave-{leave.id}",
        "leave_id": leave.id,
        "leave_type": leave.leave_type,
        "user_name": leave.profile.full_name if leave.profile else None,
        "user_avatar": leave.profile.avatar_url if leave.profile else None,
        "description": leave_description(leave.status, leave.leave_type),
        "timestamp": leave.created_at,
    }
    if leave.status == LeaveStatus.APPROVED.value:
        return LeaveApprovedActivity(**fields)
    if leave.status == LeaveStatus.REJECTED.value:
        return LeaveRejectedActivity(**fields)
    return LeaveRequestedActivity(**fields)


def build_activity_feed(
    reviews: Sequence[ReviewRecord],
    leaves: Sequence[LeaveRequestRecord],
    size: int,
) -> List[ActivityFeedEntry]:
    """Merge review and leave events, newest first; ties keep reviews-then-leaves fetch order."""
    entries: List[ActivityFeedEntry] = [review_activity(r) for r in reviews if r.is_completed]
    entries.extend(leave_activity(leave) for leave in leaves)
    entries = sorted(entries, key=lambda entry: entry.timestamp, reverse=True)
    return entries[:size]


def derive_admin_dashboard(fetched: AdminFetchResult, config: DashboardSettings) -> AdminDashboardData:
    overview = build_attendance_overview(
        fetched.attendance_logs, fetched.total_employees, fetched.on_leave_count
    )
    pending_reviews = build_pending_reviews(
        fetched.pending_reviews, config.default_reviewer_count, config.pending_list_limit
    )
    pending_leaves = build_pending_leaves(fetched.pending_leaves, config.pending_list_limit)

    return AdminDashboardData(
        team_metrics=TeamMetrics(
            total_employees=fetched.total_employees,
            pending_reviews=len(pending_reviews),
            pending_leave_approvals=len(pending_leaves),
            today_attendance_rate=attendance_rate(
                fetched.total_employees, overview.total_today, overview.on_leave
            ),
            avg_team_performance=average_performance(fetched.summaries),
        ),
        performance_distribution=build_performance_distribution(fetched.summaries),
        pending_reviews_list=pending_reviews,
        pending_leave_approvals=pending_leaves,
        attendance_overview=overview,
        recent_activities=build_activity_feed(
            fetched.recent_reviews, fetched.recent_leaves, config.activity_feed_size
        ),
        top_performers=top_performers(fetched.summaries, config.ranking_size),
        employees_needing_attention=employees_needing_attention(
            fetched.summaries,
            config.ranking_size,
            threshold=config.attention_threshold,
            significant_gap_threshold=config.significant_gap_threshold,
        ),
    )


# ============================================================================
# Pipeline
# ============================================================================

class AdminDashboardService(BaseService):
    """Team dashboard for admins and stakeholders."""

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

    def fetch(self, period: str, today: date) -> AdminFetchResult:
        limits = self.config.dashboard
        q = self.queries
        results = fetch_all({
            "total_employees": q.count_profiles,
            "pending_reviews": lambda: q.pending_reviews(period, limits.pending_list_limit),
            "pending_leaves": lambda: q.pending_leave_requests(limits.pending_list_limit),
            "attendance_logs": lambda: q.attendance_for_day(today),
            "summaries": lambda: q.review_summaries(period),
            "recent_reviews": lambda: q.recent_completed_reviews(limits.recent_window),
            "recent_leaves": lambda: q.recent_leave_requests(limits.recent_window),
        }, max_workers=self.config.fetch_max_workers)

        # Divisor input for attendance; read once the main batch has joined
        on_leave_count = fetch_one("on_leave_count", lambda: q.count_on_leave(today))
        return AdminFetchResult(on_leave_count=on_leave_count, **results)

    def build(self, caller: Caller, period: Optional[str] = None, today: Optional[date] = None) -> AdminDashboardData:
        today = today or datetime.now(timezone.utc).date()
        period = resolve_period(today, period or self.config.current_period)
        self.log_info(f"Building admin dashboard for user {caller.user_id}", period=period, day=today.isoformat())

        fetched = self.fetch(period, today)
        data = derive_admin_dashboard(fetched, self.config.dashboard)

        self.log_info(
            "Admin dashboard ready",
            summaries=len(fetched.summaries),
            activities=len(data.recent_activities),
        )
        return data

    def get_dashboard(
        self,
        token: Optional[str],
        period: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ApiResponse[AdminDashboardData]:
        """Envelope call contract: never raises domain errors."""
        today = today or datetime.now(timezone.utc).date()
        period = resolve_period(today, period or self.config.current_period)
        try:
            caller = self.gate.require_team_view(token)
            data = self.build(caller, period=period, today=today)
        except AppException as exc:
            self.log_warning(f"Admin dashboard failed: {exc.message}", code=exc.error_code)
            return ApiResponse.fail(exc.message, code=exc.error_code, details=exc.details)
        return ApiResponse.ok(data, metadata={"period": period, "reporting_day": today.isoformat()})
