from sqlalchemy import Column, Integer, DateTime, String, ForeignKey, JSON, Index, text
from sqlalchemy.orm import relationship
from app.db.base import Base
from datetime import datetime, timezone
from enum import Enum


class AssessmentStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


ACTIVE_STATUSES = (AssessmentStatus.NOT_STARTED.value, AssessmentStatus.IN_PROGRESS.value)

_ACTIVE_WHERE = text("status IN ('not_started', 'in_progress')")


class Assessment(Base):
    __tablename__ = "assessments"

    assessment_id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=AssessmentStatus.NOT_STARTED.value)

    # [{"question_id", "answer", "score", "answered_at"}], unique by question_id
    responses = Column(JSON, nullable=False, default=list)

    # Navigation state reported by the client
    current_step = Column(Integer, default=0)
    current_category = Column(String(20), nullable=True)
    time_spent_minutes = Column(Integer, default=0)

    # Progress, always derived from responses
    category_progress = Column(JSON, nullable=True)
    questions_answered = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=85)
    completion_percentage = Column(Integer, nullable=False, default=0)

    # Timing
    started_at = Column(DateTime(timezone=True), nullable=True)
    last_saved_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Four fixed-shape score maps, filled on submit
    scores = Column(JSON, nullable=True)

    # AI-generated career analysis
    # If null, indicates analysis has not been generated yet
    ai_analysis = Column(JSON, nullable=True)
    ai_analysis_generated_at = Column(DateTime(timezone=True), nullable=True)

    # Audit fields
    created_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User")

    __table_args__ = (
        # At most one non-terminal assessment per user
        Index(
            "uq_assessments_active_user",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_WHERE,
            sqlite_where=_ACTIVE_WHERE,
        ),
    )
