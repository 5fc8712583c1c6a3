from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, Index, func
from app.db.base import Base
from enum import Enum


class QuestionCategory(str, Enum):
    INTEREST = "interest"
    APTITUDE = "aptitude"
    PERSONALITY = "personality"
    ACADEMIC = "academic"


class ScoringType(str, Enum):
    RIASEC = "riasec"
    BIG_FIVE = "big_five"
    APTITUDE = "aptitude"
    ACADEMIC = "academic"


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(Integer, primary_key=True, index=True)
    question_text = Column(Text, nullable=False)
    category = Column(String(20), nullable=False)
    subcategory = Column(String(100), nullable=True)

    # multiple_choice, rating_scale, yes_no, ranking
    question_type = Column(String(30), nullable=False, default="multiple_choice")
    # [{"text": ..., "value": ..., "score": ...}]
    options = Column(JSON, nullable=True)

    # Scoring information
    scoring_type = Column(String(20), nullable=True)
    scoring_key = Column(String(50), nullable=True)
    max_score = Column(Integer, default=5)

    order = Column(Integer, nullable=False)
    is_required = Column(Boolean, default=True)
    help_text = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_questions_category_order", "category", "order"),
    )
