from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Dict, Any, Optional, Union


class AnalysisState(BaseModel):
    scores: Dict[str, Dict[str, Any]]
    profile: Dict[str, Any] = Field(default_factory=dict)

    prompt: Optional[str] = None
    # final analysis, AI-generated or fallback
    analysis: Optional[Dict[str, Any]] = None
    # "ai" or "fallback"
    source: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None


class RecommendedStream(BaseModel):
    model_config = ConfigDict(extra="allow")

    primary: str
    reasoning: str = ""
    alternatives: List[str] = Field(default_factory=list)


class CareerPath(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    matchScore: Union[int, float, str]
    description: str = ""
    requiredEducation: str = ""
    entranceExams: List[str] = Field(default_factory=list)
    topColleges: List[str] = Field(default_factory=list)


class CareerAnalysis(BaseModel):
    """Required shape of a career analysis, whichever path produced it"""
    model_config = ConfigDict(extra="allow")

    summary: str
    recommendedStream: RecommendedStream
    careerPaths: List[CareerPath] = Field(min_length=3)
    riasecProfile: Dict[str, Any] = Field(default_factory=dict)
    strengths: List[str] = Field(default_factory=list)
    developmentAreas: List[str] = Field(default_factory=list)
    actionPlan: Dict[str, List[str]] = Field(default_factory=dict)
    resources: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("recommendedStream", mode="before")
    @classmethod
    def _stream_from_string(cls, value):
        if isinstance(value, str):
            return {"primary": value}
        return value

    @field_validator("summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("summary cannot be empty")
        return value
