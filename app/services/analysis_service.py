"""
Analysis Service - Business logic for AI career analysis of completed assessments
"""
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStateError, NotFoundError
from app.models.assessment import Assessment, AssessmentStatus
from app.repositories.assessment_repo import AssessmentRepository
from app.repositories.user_repo import get_user_by_id, profile_for_analysis
from app.services.career_analysis import create_analysis_graph, run_career_analysis
from app.services.logging import log_major_event

logger = logging.getLogger(__name__)


class AnalysisService:
    """Service class for career analysis business logic"""

    def __init__(self, graph=None):
        self._graph = graph

    @property
    def graph(self):
        # Built on first use so importing the service never needs AI credentials
        if self._graph is None:
            self._graph = create_analysis_graph()
        return self._graph

    async def _load_completed(self, db: AsyncSession, user_id: int, assessment_id: int) -> Assessment:
        assessment = await AssessmentRepository(db).get_user_assessment(user_id, assessment_id)
        if not assessment:
            raise NotFoundError(f"Assessment {assessment_id} not found")
        if assessment.status != AssessmentStatus.COMPLETED.value:
            raise InvalidStateError(
                f"Assessment must be completed before generating analysis. Current status: {assessment.status}")
        return assessment

    async def ensure_analysis(self, db: AsyncSession, assessment: Assessment, regenerate: bool = False) -> Dict[str, Any]:
        """
        Return the stored analysis or generate and store a new one

        Returns:
            Dict with analysis, cached flag and source ("cached", "ai" or "fallback")
        """
        if assessment.ai_analysis and not regenerate:
            logger.info(f"Returning cached analysis for assessment {assessment.assessment_id}")
            return {"analysis": assessment.ai_analysis, "cached": True, "source": "cached"}

        user = await get_user_by_id(db, assessment.user_id)
        profile = profile_for_analysis(user) if user else {}

        logger.info(f"Generating career analysis for assessment {assessment.assessment_id}")
        result = await run_career_analysis(assessment.scores or {}, profile, graph=self.graph)
        analysis = result["analysis"]
        source = result.get("source") or "fallback"

        await log_major_event(
            db,
            action="analysis_generated",
            status="success" if source == "ai" else "fallback",
            user=str(assessment.user_id),
            details=f"Analysis for assessment {assessment.assessment_id} via {analysis.get('modelUsed')} after {result.get('attempts')} attempt(s)",
            entity=f"assessment:{assessment.assessment_id}",
            source="analysis_service",
        )
        await AssessmentRepository(db).store_analysis(assessment, analysis)
        logger.info(f"Stored {source} analysis for assessment {assessment.assessment_id}")
        return {"analysis": analysis, "cached": False, "source": source}

    async def generate_analysis(self, db: AsyncSession, user_id: int, assessment_id: int, regenerate: bool = False) -> Dict[str, Any]:
        """
        Generate (or return the cached) career analysis for a completed assessment

        Raises:
            NotFoundError: If the assessment does not exist or is not the user's
            InvalidStateError: If the assessment is not completed
        """
        assessment = await self._load_completed(db, user_id, assessment_id)
        outcome = await self.ensure_analysis(db, assessment, regenerate=regenerate)
        return {
            "assessment_id": assessment.assessment_id,
            "analysis": outcome["analysis"],
            "cached": outcome["cached"],
            "source": outcome["source"],
            "generated_at": assessment.ai_analysis_generated_at,
        }

    async def get_analysis(self, db: AsyncSession, user_id: int, assessment_id: int) -> Dict[str, Any]:
        assessment = await AssessmentRepository(db).get_user_assessment(user_id, assessment_id)
        if not assessment:
            raise NotFoundError(f"Assessment {assessment_id} not found")
        if not assessment.ai_analysis:
            raise NotFoundError("Analysis not generated yet. Please generate analysis first.")
        return {
            "assessment_id": assessment.assessment_id,
            "analysis": assessment.ai_analysis,
            "scores": assessment.scores,
            "completed_at": assessment.completed_at,
            "generated_at": assessment.ai_analysis_generated_at,
        }

    async def list_my_analyses(self, db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
        """Summaries of every completed assessment, newest completion first"""
        assessments = await AssessmentRepository(db).get_completed_assessments_by_user(user_id)
        summaries = []
        for assessment in assessments:
            analysis: Optional[Dict[str, Any]] = assessment.ai_analysis
            stream = (analysis or {}).get("recommendedStream")
            if isinstance(stream, dict):
                stream = stream.get("primary")
            summaries.append({
                "assessment_id": assessment.assessment_id,
                "completed_at": assessment.completed_at,
                "has_analysis": bool(analysis),
                "summary": (analysis or {}).get("summary"),
                "recommended_stream": stream,
                "generated_at": assessment.ai_analysis_generated_at,
            })
        return summaries


# Singleton instance
analysis_service = AnalysisService()
