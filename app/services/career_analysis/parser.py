import json
import re
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError as SchemaError

from app.core.exceptions import AnalysisParseError
from .state import CareerAnalysis

_FENCED_BLOCK = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)
_FENCE_OPEN = re.compile(r"^```[a-zA-Z0-9_-]*\s*")


def strip_code_fences(text: str) -> str:
    """Return the first fenced block of a model reply, or the reply itself when unfenced"""
    text = (text or "").strip()
    match = _FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    # opening fence without a closing one
    if text.startswith("```"):
        text = _FENCE_OPEN.sub("", text)
    return text.strip()


def parse_analysis_response(text: str, model_used: str) -> Dict[str, Any]:
    """
    Parse and validate an AI career analysis.

    Raises:
        AnalysisParseError: If the reply is not JSON or misses required fields
    """
    payload = strip_code_fences(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f"AI response is not valid JSON: {str(e)}") from e
    if not isinstance(data, dict):
        raise AnalysisParseError("AI response is not a JSON object")

    try:
        CareerAnalysis.model_validate(data)
    except SchemaError as e:
        raise AnalysisParseError(f"Invalid AI response structure: {str(e)}") from e

    if isinstance(data.get("recommendedStream"), str):
        data["recommendedStream"] = {"primary": data["recommendedStream"], "reasoning": "", "alternatives": []}
    data["generatedAt"] = datetime.now(timezone.utc).isoformat()
    data["modelUsed"] = model_used
    return data
