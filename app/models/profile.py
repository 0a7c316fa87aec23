"""
Profile Model.
The role column selects which dashboard pipeline a caller may run.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class ProfileRole(str, enum.Enum):
    """
    Profile roles.

    - ADMIN: Full dashboard access, aggregate team view
    - STAKEHOLDER: Read-only access to the aggregate team view
    - EMPLOYEE: Self-service view of their own performance
    """
    ADMIN = "admin"
    STAKEHOLDER = "stakeholder"
    EMPLOYEE = "employee"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    job_title = Column(String, nullable=True)

    role = Column(Enum(ProfileRole), default=ProfileRole.EMPLOYEE, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    leave_requests = relationship("LeaveRequest", back_populates="profile", cascade="all, delete-orphan")
    leave_balance = relationship("LeaveBalance", back_populates="profile", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Profile {self.email} ({self.role.value})>"

    @property
    def can_view_team(self) -> bool:
        """Check if profile may open the aggregate team dashboard."""
        return self.role in [ProfileRole.ADMIN, ProfileRole.STAKEHOLDER]
