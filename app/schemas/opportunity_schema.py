from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


class OpportunityRequest(BaseModel):
    """Opportunity form; choices are checked by the service"""
    education_level: Optional[str] = Field(None, description="10th Pass, 12th Pass, Diploma, Bachelor Degree or Master Degree")
    education_status: Optional[str] = Field(None, description="Currently Studying or Completed; not used for 10th/12th")
    family_income: Optional[str] = None
    career_interest: Optional[str] = None
    academic_data: Optional[Dict[str, Any]] = None


class OpportunityAnalysisResponse(BaseModel):
    id: int
    user_id: int
    education_level: str
    education_status: Optional[str] = None
    family_income: str
    career_interest: str
    academic_data: Dict[str, Any] = Field(default_factory=dict)
    recommendations: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    confidence_score: int
    source: str
    regeneration_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OpportunityResult(BaseModel):
    message: str
    analysis: OpportunityAnalysisResponse


class OpportunitySummary(BaseModel):
    id: int
    education_level: str
    career_interest: str
    confidence_score: int
    source: str
    created_at: Optional[datetime] = None
    scholarships: List[Dict[str, Any]] = Field(default_factory=list)
    career_paths: List[Dict[str, Any]] = Field(default_factory=list)


class OpportunityHistoryResponse(BaseModel):
    analyses: List[OpportunitySummary]


class DeleteOpportunityResponse(BaseModel):
    message: str
