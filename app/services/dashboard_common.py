"""
Helpers shared by the admin and employee dashboard derivations.
"""
import enum
import math
from datetime import date
from typing import Iterable, Optional, Tuple

from app.models.attendance_log import AttendanceStatus
from app.schemas.records import AttendanceLogRecord


class PerformanceBand(str, enum.Enum):
    OUTSTANDING = "outstanding"
    ABOVE_EXPECTATION = "above_expectation"
    MEETS_EXPECTATION = "meets_expectation"
    BELOW_EXPECTATION = "below_expectation"
    NEEDS_IMPROVEMENT = "needs_improvement"


# Lower bounds, checked in order
BAND_THRESHOLDS: Tuple[Tuple[float, PerformanceBand], ...] = (
    (95, PerformanceBand.OUTSTANDING),
    (85, PerformanceBand.ABOVE_EXPECTATION),
    (75, PerformanceBand.MEETS_EXPECTATION),
    (60, PerformanceBand.BELOW_EXPECTATION),
)


def performance_band(percentage: float) -> PerformanceBand:
    for lower_bound, band in BAND_THRESHOLDS:
        if percentage >= lower_bound:
            return band
    return PerformanceBand.NEEDS_IMPROVEMENT


def round_half_up(value: float, digits: int = 1) -> float:
    """Round halves away from zero for positive values (2.25 -> 2.3), unlike round()."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def is_on_time(status: Optional[str]) -> bool:
    # A log without a status counts as on time
    return not status or status == AttendanceStatus.ON_TIME.value


def is_late(status: Optional[str]) -> bool:
    return status == AttendanceStatus.LATE.value


def count_on_time_and_late(logs: Iterable[AttendanceLogRecord]) -> Tuple[int, int]:
    on_time = late = 0
    for log in logs:
        if is_on_time(log.status):
            on_time += 1
        elif is_late(log.status):
            late += 1
    return on_time, late


def resolve_period(day: date, override: Optional[str] = None) -> str:
    """Explicit period wins; otherwise the calendar quarter of the day, e.g. 2025-Q1."""
    if override:
        return override
    quarter = (day.month - 1) // 3 + 1
    return f"{day.year}-Q{quarter}"
