from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Index
from app.db.base import Base
from datetime import datetime, timezone
from enum import Enum


class EducationLevel(str, Enum):
    TENTH_PASS = "10th Pass"
    TWELFTH_PASS = "12th Pass"
    DIPLOMA = "Diploma"
    BACHELOR = "Bachelor Degree"
    MASTER = "Master Degree"


# Levels that carry no studying/completed status
SCHOOL_LEVELS = (EducationLevel.TENTH_PASS.value, EducationLevel.TWELFTH_PASS.value)


class EducationStatus(str, Enum):
    STUDYING = "Currently Studying"
    COMPLETED = "Completed"


class FamilyIncome(str, Enum):
    BELOW_2_LAKHS = "Below 2 Lakhs"
    FROM_2_TO_5_LAKHS = "2-5 Lakhs"
    FROM_5_TO_8_LAKHS = "5-8 Lakhs"
    ABOVE_8_LAKHS = "Above 8 Lakhs"


class CareerInterest(str, Enum):
    TECHNICAL = "Technical"
    RESEARCH = "Research"
    MANAGEMENT = "Management"
    CREATIVE = "Creative"
    GOVERNMENT = "Government Jobs"
    BUSINESS = "Business"


class OpportunityAnalysis(Base):
    __tablename__ = "opportunity_analyses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)

    # Form input
    education_level = Column(String(30), nullable=False)
    education_status = Column(String(30), nullable=True)
    family_income = Column(String(30), nullable=False)
    career_interest = Column(String(30), nullable=False)
    # Free-form academics: percentage, currentCGPA, finalCGPA, semestersCompleted, passingYear...
    academic_data = Column(JSON, nullable=False, default=dict)

    # {"scholarships", "higherEducation", "careerPaths", "skillDevelopment"}
    recommendations = Column(JSON, nullable=False, default=dict)
    confidence_score = Column(Integer, nullable=False, default=0)
    # "ai" or "fallback"
    source = Column(String(20), nullable=False, default="ai")

    is_active = Column(Boolean, nullable=False, default=True)
    regeneration_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_opportunity_analyses_user_created", "user_id", "created_at"),
    )
