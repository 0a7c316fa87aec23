"""
Populate a development database with enough rows to light up both dashboards,
then print bearer tokens for the seeded admin and employee.

    python -m scripts.seed_dashboard
"""
from datetime import date, datetime, timedelta, timezone

from app.database import SessionLocal, init_db
from app.models import (
    AttendanceLog,
    LeaveBalance,
    LeaveRequest,
    PeerReview,
    PerformanceReview,
    Profile,
    ProfileRole,
    Project,
    ProjectAssignment,
    ProjectSlaScore,
    ProjectWorkQualityScore,
    ReviewCycle,
    ReviewSummary,
)
from app.services.auth import create_access_token
from app.services.dashboard_common import resolve_period

db = SessionLocal()


def get_or_create_profile(email, full_name, role, job_title=None):
    existing = db.query(Profile).filter(Profile.email == email).first()
    if existing:
        print(f"Profile {email} already exists. Skipping.")
        return existing

    profile = Profile(email=email, full_name=full_name, role=role, job_title=job_title, is_active=True)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    print(f"Created {role.value} -> {email}")
    return profile


def seed():
    init_db()
    today = date.today()
    now = datetime.now(timezone.utc)
    period = resolve_period(today)

    admin = get_or_create_profile("admin@example.com", "Avery Admin", ProfileRole.ADMIN, "HR Director")
    employee = get_or_create_profile("employee@example.com", "Emery Employee", ProfileRole.EMPLOYEE, "Engineer")
    peers = [
        get_or_create_profile(f"peer{i}@example.com", f"Peer {i}", ProfileRole.EMPLOYEE, "Engineer")
        for i in range(1, 5)
    ]

    if db.query(ReviewCycle).filter(ReviewCycle.id == period).first() is None:
        db.add(ReviewCycle(id=period, name=f"{period} Performance Review", end_date=now + timedelta(days=30), is_active=True))
        db.commit()

    for score, person in zip([97.0, 88.5, 72.0, 55.0, 81.0], [employee] + peers):
        if not db.query(ReviewSummary).filter_by(employee_id=person.id, cycle_id=period).first():
            db.add(ReviewSummary(employee_id=person.id, cycle_id=period, overall_percentage=score))
    db.commit()

    if db.query(PerformanceReview).filter_by(employee_id=employee.id, cycle_id=period).first():
        print(f"Activity for {period} already seeded. Skipping.")
    else:
        seed_activity(today, now, period, employee, peers)

    for profile in (admin, employee):
        token = create_access_token(data={"sub": profile.email, "role": profile.role.value})
        print(f"{profile.role.value} token: {token}")


def seed_activity(today, now, period, employee, peers):
    review = PerformanceReview(
        employee_id=employee.id, cycle_id=period, self_score=4.2,
        score_leadership=4, score_quality=5, score_reliability=4, score_communication=3, score_initiative=4,
        created_at=now - timedelta(days=2),
    )
    review.peer_reviews = [
        PeerReview(reviewer_id=peers[0].id, score_leadership=3, score_quality=4, score_reliability=5,
                   score_communication=4, score_initiative=3),
        PeerReview(reviewer_id=peers[1].id, score_leadership=5, score_quality=4, score_reliability=4,
                   score_communication=4, score_initiative=5),
    ]
    db.add(review)
    db.add(PerformanceReview(employee_id=peers[2].id, cycle_id=period, created_at=now - timedelta(days=1)))

    db.add(LeaveBalance(user_id=employee.id, remaining=12))
    db.add(LeaveRequest(user_id=employee.id, leave_type="Vacation", start_date=today + timedelta(days=7),
                        end_date=today + timedelta(days=9), days_requested=3, status="pending",
                        reason="Family trip", created_at=now - timedelta(hours=5)))
    db.add(LeaveRequest(user_id=peers[3].id, leave_type="Sick", start_date=today, end_date=today,
                        days_requested=1, status="approved", created_at=now - timedelta(hours=20)))

    for offset in range(7):
        day = today - timedelta(days=offset)
        db.add(AttendanceLog(user_id=employee.id, date=day, status="Late" if offset == 3 else "On Time"))
    for person, status in zip(peers[:2], ["On Time", "Late"]):
        db.add(AttendanceLog(user_id=person.id, date=today, status=status))

    project = Project(name="Payments Platform", status="Active", quarter_id=period, end_date=today + timedelta(days=60))
    assignment = ProjectAssignment(user_id=employee.id, project=project)
    assignment.sla_scores = [
        ProjectSlaScore(score_achieved=5400, weight_percentage=50),
        ProjectSlaScore(score_achieved=4800, weight_percentage=50),
    ]
    assignment.quality_scores = [ProjectWorkQualityScore(is_achieved=flag) for flag in (True, True, False)]
    db.add(assignment)

    db.commit()
    print(f"Seeded reviews, leave, attendance and projects for {period}")


if __name__ == "__main__":
    try:
        seed()
    finally:
        db.close()
