import pytest
from datetime import date, datetime, timedelta, timezone

from app.core.config import DashboardSettings
from app.schemas.dashboard import ActiveProject, PerformanceOverview
from app.schemas.records import (
    AttendanceLogRecord,
    CompetencyRecord,
    CompletedReviewRecord,
    LeaveBalanceRecord,
    LeaveRequestRecord,
    ProfileCard,
    ProjectAssignmentRecord,
    ProjectRecord,
    QualityScoreRecord,
    ReviewCycleRecord,
    ReviewSummaryRecord,
    SlaScoreRecord,
)
from app.services.employee_dashboard import (
    EmployeeFetchResult,
    backfill_project_scores,
    build_active_projects,
    build_upcoming_reviews,
    competency_average,
    competency_scores,
    derive_employee_dashboard,
    employee_attendance_summary,
    leave_balance_value,
    leave_status_summary,
    sla_percentage,
)

NOW = datetime(2025, 2, 10, 12, 0, tzinfo=timezone.utc)
PROFILE = ProfileCard(id=7, full_name="Dana Lee", job_title="Engineer")


def _leave(leave_id, status):
    return LeaveRequestRecord(
        id=leave_id,
        user_id=7,
        leave_type="Vacation",
        start_date=date(2025, 3, 1),
        end_date=date(2025, 3, 3),
        days_requested=3,
        status=status,
        created_at=NOW - timedelta(days=leave_id),
    )


def _log(day_offset, status):
    return AttendanceLogRecord(id=day_offset + 1, user_id=7, date=date(2025, 2, 10) - timedelta(days=day_offset), status=status)


def _competency(value):
    return CompetencyRecord(
        score_leadership=value,
        score_quality=value,
        score_reliability=value,
        score_communication=value,
        score_initiative=value,
    )


def _assignment(assignment_id, sla, quality, status="Active"):
    return ProjectAssignmentRecord(
        id=assignment_id,
        project=ProjectRecord(id=assignment_id, name=f"Project {assignment_id}", status=status, quarter_id="2025-Q1"),
        sla_scores=[SlaScoreRecord(score_achieved=a, weight_percentage=w) for a, w in sla],
        quality_scores=[QualityScoreRecord(is_achieved=q) for q in quality],
    )


def _cycle(cycle_id, days_left):
    return ReviewCycleRecord(id=cycle_id, name=f"{cycle_id} Review", end_date=NOW + timedelta(days=days_left))


# --- Leave ---

def test_leave_balance_defaults_to_zero():
    assert leave_balance_value(None) == 0
    assert leave_balance_value(LeaveBalanceRecord(user_id=7, remaining=12.5)) == 12.5
    assert leave_balance_value(LeaveBalanceRecord(user_id=7, remaining=None)) == 0


def test_leave_status_summary():
    leaves = [_leave(1, "approved"), _leave(2, "pending"), _leave(3, "pending"), _leave(4, "approved"), _leave(5, "rejected")]
    summary = leave_status_summary(leaves)

    assert summary.pending_request.id == 2
    assert summary.approved_count == 2


def test_leave_status_summary_without_pending():
    summary = leave_status_summary([_leave(1, "rejected")])
    assert summary.pending_request is None
    assert summary.approved_count == 0


# --- Attendance ---

def test_attendance_summary_over_window():
    logs = [_log(0, "On Time"), _log(1, None), _log(2, "Late"), _log(3, "Absent"), _log(4, "On Time"), _log(5, "Late")]
    summary = employee_attendance_summary(logs)

    assert summary.on_time == 3
    assert summary.late == 2
    assert summary.rate == 50


def test_attendance_rate_is_whole_percent():
    summary = employee_attendance_summary([_log(0, "On Time"), _log(1, "On Time"), _log(2, "Late")])
    assert summary.rate == 67
    assert isinstance(summary.rate, int)


def test_attendance_summary_with_no_logs():
    summary = employee_attendance_summary([])
    assert summary.on_time == 0
    assert summary.late == 0
    assert summary.rate == 100


# --- Projects ---

def test_sla_percentage_uses_weight_scale():
    scores = [SlaScoreRecord(score_achieved=100, weight_percentage=50), SlaScoreRecord(score_achieved=80, weight_percentage=50)]
    assert sla_percentage(scores, weight_scale=120) == 1.5


def test_sla_percentage_without_weight_is_zero():
    assert sla_percentage([]) == 0
    assert sla_percentage([SlaScoreRecord(score_achieved=90, weight_percentage=0)]) == 0


def test_sla_percentage_treats_unscored_rows_as_zero():
    scores = [
        SlaScoreRecord(score_achieved=None, weight_percentage=50),
        SlaScoreRecord(score_achieved=180, weight_percentage=None),
        SlaScoreRecord(score_achieved=None, weight_percentage=None),
    ]
    assert sla_percentage(scores, weight_scale=120) == 3.0


def test_active_projects_counts_quality_scores():
    projects = build_active_projects([
        _assignment(1, [(100, 50), (80, 50)], [True, False, True]),
        _assignment(2, [], [], status="Completed"),
    ])

    assert len(projects) == 1
    assert projects[0].name == "Project 1"
    assert projects[0].sla_percentage == 1.5
    assert projects[0].quality_achieved == 2
    assert projects[0].quality_total == 3


def test_backfill_only_with_projects():
    overview = PerformanceOverview(review_score=88.0, quarter="2025-Q1")
    assert backfill_project_scores(overview, []) is overview

    projects = [
        ActiveProject(id=1, name="A", status="Active", sla_percentage=2.0, quality_achieved=1, quality_total=4),
        ActiveProject(id=2, name="B", status="Active", sla_percentage=1.0, quality_achieved=3, quality_total=4),
    ]
    patched = backfill_project_scores(overview, projects)

    assert patched.sla_score == 1.5
    assert patched.work_quality_score == 50.0
    assert patched.review_score == 88.0
    assert overview.sla_score is None


def test_backfill_with_no_quality_scores():
    overview = PerformanceOverview(quarter="2025-Q1")
    projects = [ActiveProject(id=1, name="A", status="Active", sla_percentage=0, quality_achieved=0, quality_total=0)]
    patched = backfill_project_scores(overview, projects)
    assert patched.work_quality_score == 0
    assert patched.sla_score == 0


# --- Reviews ---

def test_competency_average_over_self_and_peers():
    assert competency_average(4, [3, 5]) == pytest.approx(80.0)
    assert competency_average(5, []) == pytest.approx(100.0)


def test_competency_scores_per_dimension():
    review = CompletedReviewRecord(
        review_id=1,
        cycle_id="2024-Q4",
        self_scores=_competency(4),
        peer_scores=[_competency(3), _competency(5)],
    )
    scores = competency_scores(review)

    assert scores.leadership == pytest.approx(80.0)
    assert scores.initiative == pytest.approx(80.0)
    assert competency_scores(None) is None


def test_upcoming_reviews_flag_submissions():
    cycles = [_cycle("2025-Q2", 60), _cycle("2025-Q1", 10), _cycle("2024-Q4", -5)]
    upcoming = build_upcoming_reviews(cycles, frozenset({"2025-Q1"}), NOW, limit=3)

    assert [u.cycle_id for u in upcoming] == ["2025-Q1", "2025-Q2"]
    assert upcoming[0].has_submitted is True
    assert upcoming[1].has_submitted is False


def test_upcoming_reviews_capped():
    cycles = [_cycle(f"c{i}", i + 1) for i in range(5)]
    assert len(build_upcoming_reviews(cycles, frozenset(), NOW, limit=3)) == 3


# --- Assembly ---

def test_derive_employee_dashboard():
    fetched = EmployeeFetchResult(
        leave_balance=LeaveBalanceRecord(user_id=7, remaining=14),
        leave_requests=[_leave(1, "pending"), _leave(2, "approved")],
        attendance=[_log(0, "On Time"), _log(1, "Late")],
        review_summary=ReviewSummaryRecord(employee_id=7, cycle_id="2025-Q1", overall_percentage=91.5),
        assignments=[_assignment(1, [(100, 50), (80, 50)], [True, True])],
        cycles=[_cycle("2025-Q1", 10)],
        latest_review=CompletedReviewRecord(review_id=3, cycle_id="2024-Q4", self_scores=_competency(4)),
        submitted_cycle_ids=frozenset({"2025-Q1"}),
    )
    data = derive_employee_dashboard(PROFILE, fetched, "2025-Q1", NOW, DashboardSettings())

    assert data.user.full_name == "Dana Lee"
    assert data.leave_balance == 14
    assert [r.id for r in data.recent_leave_requests] == [1, 2]
    assert data.leave_status.pending_request.id == 1
    assert data.attendance_summary.rate == 50.0
    assert data.recent_attendance[0].status == "On Time"
    assert data.performance_overview.quarter == "2025-Q1"
    assert data.performance_overview.review_score == 91.5
    assert data.performance_overview.sla_score == 1.5
    assert data.performance_overview.work_quality_score == 100.0
    assert data.upcoming_reviews[0].has_submitted is True
    assert data.competency_scores.quality == pytest.approx(80.0)


def test_derive_employee_dashboard_for_new_hire():
    fetched = EmployeeFetchResult(leave_requests=[], attendance=[], assignments=[], cycles=[])
    data = derive_employee_dashboard(PROFILE, fetched, "2025-Q1", NOW, DashboardSettings())

    assert data.leave_balance == 0
    assert data.attendance_summary.rate == 100
    assert data.performance_overview.sla_score is None
    assert data.performance_overview.review_score is None
    assert data.performance_overview.work_quality_score is None
    assert data.active_projects == []
    assert data.competency_scores is None
