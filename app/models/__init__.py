# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    profile, review, leave_request, leave_balance,
    attendance_log, project
)

# Explicit class exports for cleaner imports
from .profile import Profile, ProfileRole
from .review import ReviewCycle, PerformanceReview, PeerReview, ReviewSummary
from .leave_request import LeaveRequest, LeaveStatus
from .leave_balance import LeaveBalance
from .attendance_log import AttendanceLog, AttendanceStatus
from .project import Project, ProjectAssignment, ProjectSlaScore, ProjectWorkQualityScore, ProjectStatus

__all__ = [
    "Profile",
    "ProfileRole",
    "ReviewCycle",
    "PerformanceReview",
    "PeerReview",
    "ReviewSummary",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveBalance",
    "AttendanceLog",
    "AttendanceStatus",
    "Project",
    "ProjectAssignment",
    "ProjectSlaScore",
    "ProjectWorkQualityScore",
    "ProjectStatus",
]
