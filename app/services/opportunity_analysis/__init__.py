from .fallback import confidence_for, generate_fallback_opportunities
from .parser import DEFAULT_CONFIDENCE, SECTIONS, parse_opportunity_response

__all__ = [
    "DEFAULT_CONFIDENCE",
    "SECTIONS",
    "confidence_for",
    "generate_fallback_opportunities",
    "parse_opportunity_response",
]
