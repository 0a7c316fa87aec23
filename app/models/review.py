"""
Performance review models: cycles, self reviews, peer reviews and the
per-period summary used for rankings.
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

COMPETENCY_FIELDS = (
    "leadership",
    "quality",
    "reliability",
    "communication",
    "initiative",
)


class ReviewCycle(Base):
    __tablename__ = "review_cycles"

    # Period code, e.g. "2025-Q1"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class PerformanceReview(Base):
    __tablename__ = "performance_reviews"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("profiles.id"), index=True, nullable=False)
    cycle_id = Column(String, ForeignKey("review_cycles.id"), index=True, nullable=False)

    # Null until the employee submits their self review
    self_score = Column(Float, nullable=True)
    score_leadership = Column(Integer, nullable=True)
    score_quality = Column(Integer, nullable=True)
    score_reliability = Column(Integer, nullable=True)
    score_communication = Column(Integer, nullable=True)
    score_initiative = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    employee = relationship("Profile")
    cycle = relationship("ReviewCycle")
    peer_reviews = relationship("PeerReview", back_populates="review", cascade="all, delete-orphan")


class PeerReview(Base):
    __tablename__ = "peer_reviews"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("performance_reviews.id"), index=True, nullable=False)
    reviewer_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)

    score_leadership = Column(Integer, nullable=False)
    score_quality = Column(Integer, nullable=False)
    score_reliability = Column(Integer, nullable=False)
    score_communication = Column(Integer, nullable=False)
    score_initiative = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    review = relationship("PerformanceReview", back_populates="peer_reviews")


class ReviewSummary(Base):
    __tablename__ = "review_summary"
    __table_args__ = (UniqueConstraint("employee_id", "cycle_id", name="uq_summary_employee_cycle"),)

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("profiles.id"), index=True, nullable=False)
    cycle_id = Column(String, index=True, nullable=False)
    overall_percentage = Column(Float, nullable=False)

    employee = relationship("Profile")
