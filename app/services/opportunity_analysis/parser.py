import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from app.core.exceptions import AnalysisParseError
from app.services.career_analysis.parser import strip_code_fences

DEFAULT_CONFIDENCE = 75

SECTIONS = ("scholarships", "higherEducation", "careerPaths", "skillDevelopment")


class OpportunityRecommendations(BaseModel):
    model_config = ConfigDict(extra="ignore")

    scholarships: List[Dict[str, Any]] = Field(default_factory=list)
    higherEducation: List[Dict[str, Any]] = Field(default_factory=list)
    careerPaths: List[Dict[str, Any]] = Field(default_factory=list)
    skillDevelopment: List[Dict[str, Any]] = Field(default_factory=list)
    confidenceScore: Optional[float] = Field(None, ge=0, le=100)


def parse_opportunity_response(text: str) -> Dict[str, Any]:
    """
    Parse an AI opportunity reply into stored recommendations.

    Returns:
        {"recommendations": {section: [...]}, "confidence_score": int}

    Raises:
        AnalysisParseError: Not JSON, wrong shape, or every section empty
    """
    payload = strip_code_fences(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f"AI response is not valid JSON: {str(e)}") from e
    if not isinstance(data, dict):
        raise AnalysisParseError("AI response is not a JSON object")

    try:
        parsed = OpportunityRecommendations.model_validate(data)
    except SchemaError as e:
        raise AnalysisParseError(f"Invalid AI response structure: {str(e)}") from e

    recommendations = {section: getattr(parsed, section) for section in SECTIONS}
    if not any(recommendations.values()):
        raise AnalysisParseError("AI response contains no recommendations")

    confidence = parsed.confidenceScore
    return {
        "recommendations": recommendations,
        "confidence_score": int(confidence) if confidence else DEFAULT_CONFIDENCE,
    }
