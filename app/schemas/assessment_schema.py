# app/schemas/assessment_schema.py
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.models.question import QuestionCategory


class ResponseItem(BaseModel):
    """One answered question inside a save"""
    question_id: int = Field(..., description="Question being answered")
    answer: Any = None
    score: Optional[float] = Field(0, description="Score of the chosen option")


class SaveProgressRequest(BaseModel):
    """What the client sends on every incremental save"""
    responses: List[ResponseItem] = Field(default_factory=list)
    current_step: Optional[int] = Field(None, ge=0)
    current_category: Optional[QuestionCategory] = None
    time_spent_minutes: Optional[int] = Field(None, ge=0)


class ProgressSummary(BaseModel):
    assessment_id: int
    questions_answered: int
    completion_percentage: int
    current_step: Optional[int]
    current_category: Optional[str]
    category_progress: Optional[Dict[str, Dict[str, Any]]]
    last_saved_at: Optional[datetime]


class AssessmentSummary(BaseModel):
    """Lighter version for listing assessments, responses excluded"""
    assessment_id: int
    user_id: int
    status: str
    questions_answered: int
    total_questions: int
    completion_percentage: int
    current_step: Optional[int] = None
    current_category: Optional[str] = None
    time_spent_minutes: Optional[int] = None
    category_progress: Optional[Dict[str, Dict[str, Any]]] = None
    scores: Optional[Dict[str, Dict[str, Any]]] = None
    started_at: Optional[datetime] = None
    last_saved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    ai_analysis_generated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # Allows conversion from SQLAlchemy models


class AssessmentResponse(AssessmentSummary):
    """Full assessment including the stored responses"""
    responses: List[Dict[str, Any]] = Field(default_factory=list)


class StartAssessmentResponse(BaseModel):
    message: str
    created: bool
    assessment: AssessmentResponse


class SubmitAssessmentResponse(BaseModel):
    message: str
    assessment_id: int
    status: str
    scores: Optional[Dict[str, Dict[str, Any]]]
    completed_at: Optional[datetime]
    already_completed: bool = False


class QuestionResponse(BaseModel):
    question_id: int
    question_text: str
    category: str
    subcategory: Optional[str] = None
    question_type: str
    options: Optional[List[Dict[str, Any]]] = None
    scoring_type: Optional[str] = None
    scoring_key: Optional[str] = None
    max_score: Optional[int] = None
    order: int
    is_required: Optional[bool] = None
    help_text: Optional[str] = None

    class Config:
        from_attributes = True
