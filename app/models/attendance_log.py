from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from app.database import Base
import enum

class AttendanceStatus(str, enum.Enum):
    ON_TIME = "On Time"
    LATE = "Late"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"

class AttendanceLog(Base):
    __tablename__ = "attendance_logs"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id"), index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    clock_in = Column(DateTime(timezone=True), nullable=True)
    clock_out = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, nullable=True) # null is read as "On Time"
