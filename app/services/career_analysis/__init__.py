from .fallback import generate_fallback_analysis
from .graph import create_analysis_graph, run_career_analysis
from .parser import parse_analysis_response, strip_code_fences
from .state import AnalysisState, CareerAnalysis

__all__ = [
    "generate_fallback_analysis",
    "create_analysis_graph",
    "run_career_analysis",
    "parse_analysis_response",
    "strip_code_fences",
    "AnalysisState",
    "CareerAnalysis",
]
