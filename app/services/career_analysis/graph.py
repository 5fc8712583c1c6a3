"""
This graph turns assessment scores into a career analysis.

build_prompt -> generate_analysis. The second node calls the generative model
through the resilient call primitive, so it always ends with an analysis:
either the validated AI one or the deterministic fallback.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from langgraph.graph import StateGraph, END, START

from app.services.ai_service import GenerativeAIClient, get_ai_service
from app.services.prompts import build_career_analysis_prompt
from app.services.resilient_call import RetryPolicy, call_with_fallback
from .fallback import generate_fallback_analysis
from .parser import parse_analysis_response
from .state import AnalysisState

logger = logging.getLogger(__name__)


def build_prompt(state: AnalysisState) -> Dict[str, Any]:
    return {"prompt": build_career_analysis_prompt(state.scores, state.profile)}


def create_analysis_graph(
    client: Optional[GenerativeAIClient] = None,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
):
    """Create the career analysis graph bound to an AI client"""
    client = client or get_ai_service()

    async def generate_analysis(state: AnalysisState) -> Dict[str, Any]:
        async def operation() -> Dict[str, Any]:
            text = await client.generate(state.prompt)
            return parse_analysis_response(text, client.model)

        result = await call_with_fallback(
            operation,
            lambda: generate_fallback_analysis(state.scores, state.profile),
            policy=policy,
            sleep=sleep,
            label="career analysis",
        )
        if not result.succeeded:
            logger.warning(f"Career analysis fell back to deterministic output: {result.error}")
        return {
            "analysis": result.value,
            "source": "ai" if result.succeeded else "fallback",
            "attempts": result.attempts,
            "error": str(result.error) if result.error else None,
        }

    workflow = StateGraph(AnalysisState)

    workflow.add_node("build_prompt", build_prompt)
    workflow.add_node("generate_analysis", generate_analysis)

    workflow.add_edge(START, "build_prompt")
    workflow.add_edge("build_prompt", "generate_analysis")
    workflow.add_edge("generate_analysis", END)

    return workflow.compile()


async def run_career_analysis(
    scores: Dict[str, Dict[str, Any]],
    profile: Dict[str, Any],
    graph=None,
) -> Dict[str, Any]:
    """Invoke the graph and return its final state as a dict"""
    graph = graph or create_analysis_graph()
    result = await graph.ainvoke({"scores": scores or {}, "profile": profile or {}})
    if isinstance(result, AnalysisState):
        result = result.model_dump()
    return dict(result)
