from sqlalchemy import Column, Integer, String, Float, Boolean, Date, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
import enum

class ProjectStatus(str, enum.Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"

class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    status = Column(String, default=ProjectStatus.ACTIVE.value, nullable=False, index=True)
    quarter_id = Column(String, index=True)
    end_date = Column(Date, nullable=True)

    assignments = relationship("ProjectAssignment", back_populates="project", cascade="all, delete-orphan")

class ProjectAssignment(Base):
    __tablename__ = "project_assignments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id"), index=True, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), index=True, nullable=False)

    project = relationship("Project", back_populates="assignments")
    sla_scores = relationship("ProjectSlaScore", back_populates="assignment", cascade="all, delete-orphan")
    quality_scores = relationship("ProjectWorkQualityScore", back_populates="assignment", cascade="all, delete-orphan")

class ProjectSlaScore(Base):
    __tablename__ = "project_sla_scores"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("project_assignments.id"), index=True, nullable=False)
    score_achieved = Column(Float, default=0.0)
    weight_percentage = Column(Float, default=0.0)

    assignment = relationship("ProjectAssignment", back_populates="sla_scores")

class ProjectWorkQualityScore(Base):
    __tablename__ = "project_work_quality_scores"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("project_assignments.id"), index=True, nullable=False)
    is_achieved = Column(Boolean, default=False, nullable=False)

    assignment = relationship("ProjectAssignment", back_populates="quality_scores")
