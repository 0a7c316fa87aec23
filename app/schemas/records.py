"""
Read-only record shapes returned by the dashboard query layer.

Derivation code only ever sees these records, never ORM rows, so it can be
exercised without a database.
"""
from pydantic import AfterValidator, BaseModel, ConfigDict
from datetime import date, datetime, timezone
from typing import Annotated, List, Optional


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back out
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


class ProfileCard(Record):
    id: int
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    job_title: Optional[str] = None


class ReviewRecord(Record):
    id: int
    employee_id: int
    cycle_id: str
    self_score: Optional[float] = None
    created_at: UtcDatetime
    employee: Optional[ProfileCard] = None
    cycle_name: Optional[str] = None
    peer_review_count: int = 0

    @property
    def is_completed(self) -> bool:
        return self.self_score is not None


class ReviewCycleRecord(Record):
    id: str
    name: str
    end_date: UtcDatetime
    is_active: bool = True


class ReviewSummaryRecord(Record):
    employee_id: int
    cycle_id: str
    overall_percentage: float
    employee: Optional[ProfileCard] = None


class LeaveRequestRecord(Record):
    id: int
    user_id: int
    leave_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days_requested: Optional[float] = None
    status: str
    reason: Optional[str] = None
    created_at: UtcDatetime
    profile: Optional[ProfileCard] = None


class LeaveBalanceRecord(Record):
    user_id: int
    remaining: Optional[float] = 0.0


class AttendanceLogRecord(Record):
    id: int
    user_id: int
    date: date
    clock_in: Optional[UtcDatetime] = None
    clock_out: Optional[UtcDatetime] = None
    status: Optional[str] = None


class CompetencyRecord(Record):
    """Raw 1-5 scores on each competency dimension."""
    score_leadership: float
    score_quality: float
    score_reliability: float
    score_communication: float
    score_initiative: float


class CompletedReviewRecord(Record):
    review_id: int
    cycle_id: str
    self_scores: CompetencyRecord
    peer_scores: List[CompetencyRecord] = []


class ProjectRecord(Record):
    id: int
    name: str
    status: str
    quarter_id: Optional[str] = None
    end_date: Optional[date] = None


class SlaScoreRecord(Record):
    score_achieved: Optional[float] = None
    weight_percentage: Optional[float] = None


class QualityScoreRecord(Record):
    is_achieved: bool


class ProjectAssignmentRecord(Record):
    id: int
    project: ProjectRecord
    sla_scores: List[SlaScoreRecord] = []
    quality_scores: List[QualityScoreRecord] = []
