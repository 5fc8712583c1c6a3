from pydantic import BaseModel
from typing import Optional, Dict, Any, List
from datetime import datetime


class GenerateAnalysisRequest(BaseModel):
    regenerate: bool = False


class GeneratedAnalysisResponse(BaseModel):
    message: str
    assessment_id: int
    analysis: Dict[str, Any]
    cached: bool
    source: str
    generated_at: Optional[datetime] = None


class StoredAnalysisResponse(BaseModel):
    assessment_id: int
    analysis: Dict[str, Any]
    scores: Optional[Dict[str, Dict[str, Any]]] = None
    completed_at: Optional[datetime] = None
    generated_at: Optional[datetime] = None


class AnalysisSummary(BaseModel):
    assessment_id: int
    completed_at: Optional[datetime] = None
    has_analysis: bool
    summary: Optional[str] = None
    recommended_stream: Optional[str] = None
    generated_at: Optional[datetime] = None


class AnalysisListResponse(BaseModel):
    analyses: List[AnalysisSummary]
