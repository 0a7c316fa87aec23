from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union


class DashboardModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Admin dashboard ---

class TeamMetrics(DashboardModel):
    total_employees: int
    pending_reviews: int
    pending_leave_approvals: int
    today_attendance_rate: float
    avg_team_performance: Optional[float] = None


class PerformanceDistribution(DashboardModel):
    outstanding: int = 0
    above_expectation: int = 0
    meets_expectation: int = 0
    below_expectation: int = 0
    needs_improvement: int = 0

    @property
    def total(self) -> int:
        return (
            self.outstanding
            + self.above_expectation
            + self.meets_expectation
            + self.below_expectation
            + self.needs_improvement
        )


class PendingReviewItem(DashboardModel):
    employee_id: int
    employee_name: Optional[str] = None
    employee_avatar: Optional[str] = None
    employee_job_title: Optional[str] = None
    cycle_id: str
    cycle_name: str
    reviewers_pending: int
    total_reviewers: int


class PendingLeaveItem(DashboardModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    leave_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days_requested: Optional[float] = None
    reason: Optional[str] = None
    created_at: datetime


class AttendanceOverview(DashboardModel):
    """Daily states; total_today + on_leave + absent equals headcount."""
    total_today: int
    on_time: int
    late: int
    on_leave: int
    absent: int
    on_time_percentage: int = 0


class ActivityBase(DashboardModel):
    id: str
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    description: str
    timestamp: datetime


class ReviewActivity(ActivityBase):
    type: Literal["review"] = "review"
    employee_id: int


class LeaveRequestedActivity(ActivityBase):
    type: Literal["leave_request"] = "leave_request"
    leave_id: int
    leave_type: Optional[str] = None


class LeaveApprovedActivity(ActivityBase):
    type: Literal["leave_approved"] = "leave_approved"
    leave_id: int
    leave_type: Optional[str] = None


class LeaveRejectedActivity(ActivityBase):
    type: Literal["leave_rejected"] = "leave_rejected"
    leave_id: int
    leave_type: Optional[str] = None


ActivityFeedEntry = Annotated[
    Union[ReviewActivity, LeaveRequestedActivity, LeaveApprovedActivity, LeaveRejectedActivity],
    Field(discriminator="type"),
]


class RankedEmployee(DashboardModel):
    employee_id: int
    employee_name: Optional[str] = None
    employee_avatar: Optional[str] = None
    employee_job_title: Optional[str] = None
    overall_percentage: float


class AttentionEmployee(RankedEmployee):
    reason: str


class AdminDashboardData(DashboardModel):
    team_metrics: TeamMetrics
    performance_distribution: PerformanceDistribution
    pending_reviews_list: List[PendingReviewItem]
    pending_leave_approvals: List[PendingLeaveItem]
    attendance_overview: AttendanceOverview
    recent_activities: List[ActivityFeedEntry]
    top_performers: List[RankedEmployee]
    employees_needing_attention: List[AttentionEmployee]


# --- Employee dashboard ---

class UserCard(DashboardModel):
    id: int
    full_name: Optional[str] = None
    job_title: Optional[str] = None
    avatar_url: Optional[str] = None


class RecentLeaveItem(DashboardModel):
    id: int
    leave_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str
    days_requested: Optional[float] = None


class RecentAttendanceItem(DashboardModel):
    id: int
    date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    status: Optional[str] = None


class AttendanceSummary(DashboardModel):
    on_time: int
    late: int
    rate: int


class LeaveStatusSummary(DashboardModel):
    pending_request: Optional[RecentLeaveItem] = None
    approved_count: int = 0


class PerformanceOverview(DashboardModel):
    sla_score: Optional[float] = None
    review_score: Optional[float] = None
    work_quality_score: Optional[float] = None
    quarter: str


class ActiveProject(DashboardModel):
    id: int
    name: str
    status: str
    quarter_id: Optional[str] = None
    end_date: Optional[date] = None
    sla_percentage: float
    quality_achieved: int
    quality_total: int


class UpcomingReview(DashboardModel):
    cycle_id: str
    cycle_name: str
    end_date: datetime
    has_submitted: bool


class CompetencyScores(DashboardModel):
    leadership: float
    quality: float
    reliability: float
    communication: float
    initiative: float


class EmployeeDashboardData(DashboardModel):
    user: UserCard
    leave_balance: float
    recent_leave_requests: List[RecentLeaveItem]
    recent_attendance: List[RecentAttendanceItem]
    attendance_summary: AttendanceSummary
    leave_status: LeaveStatusSummary
    performance_overview: PerformanceOverview
    active_projects: List[ActiveProject]
    upcoming_reviews: List[UpcomingReview]
    competency_scores: Optional[CompetencyScores] = None
