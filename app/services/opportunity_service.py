"""
Opportunity Service - scholarship, higher-education, career and skill
recommendations from a student's academic form and latest assessment
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.models.opportunity_analysis import (
    SCHOOL_LEVELS,
    CareerInterest,
    EducationLevel,
    EducationStatus,
    FamilyIncome,
    OpportunityAnalysis,
)
from app.models.user import User
from app.repositories.assessment_repo import AssessmentRepository
from app.repositories.opportunity_repo import OpportunityRepository
from app.services.ai_service import GenerativeAIClient, get_ai_service
from app.services.career_analysis.fallback import rank_riasec
from app.services.logging import log_major_event
from app.services.opportunity_analysis import generate_fallback_opportunities, parse_opportunity_response
from app.services.prompts import OPPORTUNITY_SYSTEM_PROMPT, build_opportunity_prompt
from app.services.resilient_call import RetryPolicy, call_with_fallback

logger = logging.getLogger(__name__)

_ALLOWED = {
    "education_level": {e.value for e in EducationLevel},
    "education_status": {e.value for e in EducationStatus},
    "family_income": {e.value for e in FamilyIncome},
    "career_interest": {e.value for e in CareerInterest},
}


def validate_opportunity_form(form: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check an opportunity form and return its normalised copy

    Raises:
        ValidationError: Missing fields, unknown choices, or a missing status
            for a diploma or degree level
    """
    level = form.get("education_level")
    income = form.get("family_income")
    interest = form.get("career_interest")
    academic = form.get("academic_data")
    if not level or not income or not interest or academic is None:
        raise ValidationError("All fields are required")
    if not isinstance(academic, dict):
        raise ValidationError("academic_data must be an object")

    status = form.get("education_status") or None
    if level in SCHOOL_LEVELS:
        status = None
    elif not status:
        raise ValidationError("Education status is required")

    normalised = {
        "education_level": level,
        "education_status": status,
        "family_income": income,
        "career_interest": interest,
        "academic_data": dict(academic),
    }
    for field, allowed in _ALLOWED.items():
        value = normalised[field]
        if value is not None and value not in allowed:
            raise ValidationError(f"Invalid {field.replace('_', ' ')}: {value}")
    return normalised


def _form_of(analysis: OpportunityAnalysis) -> Dict[str, Any]:
    return {
        "education_level": analysis.education_level,
        "education_status": analysis.education_status,
        "family_income": analysis.family_income,
        "career_interest": analysis.career_interest,
        "academic_data": dict(analysis.academic_data or {}),
    }


class OpportunityService:
    """Service class for opportunity analysis business logic"""

    def __init__(
        self,
        client: Optional[GenerativeAIClient] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._client = client
        self.policy = policy
        self.sleep = sleep

    @property
    def client(self) -> GenerativeAIClient:
        if self._client is None:
            self._client = get_ai_service()
        return self._client

    async def _assessment_insights(self, db: AsyncSession, user_id: int) -> Optional[Dict[str, Any]]:
        assessment = await AssessmentRepository(db).get_latest_completed_assessment(user_id)
        if not assessment:
            return None
        analysis = assessment.ai_analysis or {}
        paths = analysis.get("careerPaths") or []
        return {
            "top_types": [t["name"] for t in rank_riasec((assessment.scores or {}).get("interest"))[:3]],
            "top_career": paths[0].get("title") if paths and isinstance(paths[0], dict) else None,
            "strengths": list(analysis.get("strengths") or [])[:3],
        }

    async def _recommend(self, db: AsyncSession, user: User, form: Dict[str, Any]) -> Tuple[Dict[str, Any], str]:
        insights = await self._assessment_insights(db, user.user_id)
        prompt = build_opportunity_prompt(
            {"name": user.name, "current_grade": user.current_grade, "stream": user.stream}, form, insights)
        messages = [
            {"role": "system", "content": OPPORTUNITY_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        async def operation():
            return parse_opportunity_response(await self.client.chat(messages))

        result = await call_with_fallback(
            operation,
            lambda: generate_fallback_opportunities(form, insights),
            policy=self.policy,
            sleep=self.sleep,
            label="opportunity analysis",
        )
        return result.value, "ai" if result.succeeded else "fallback"

    async def submit_analysis(self, db: AsyncSession, user: User, form: Dict[str, Any]) -> OpportunityAnalysis:
        """
        Generate and store opportunity recommendations for a submitted form

        Raises:
            ValidationError: If the form is incomplete or invalid
        """
        form = validate_opportunity_form(form)
        logger.info(f"Generating opportunity analysis for user {user.user_id}")
        outcome, source = await self._recommend(db, user, form)

        await log_major_event(
            db,
            action="opportunity_analysis_generated",
            status="success" if source == "ai" else "fallback",
            user=str(user.user_id),
            details=f"{form['education_level']} / {form['career_interest']} via {source}",
            entity="opportunity_analysis",
            source="opportunity_service",
        )
        return await OpportunityRepository(db).create_analysis(
            user_id=user.user_id,
            recommendations=outcome["recommendations"],
            confidence_score=outcome["confidence_score"],
            source=source,
            is_active=True,
            regeneration_count=0,
            **form,
        )

    async def list_history(self, db: AsyncSession, user_id: int, limit: int = 20) -> List[Dict[str, Any]]:
        """Active analyses, newest first, with scholarships and career paths only"""
        analyses = await OpportunityRepository(db).list_active(user_id, limit=limit)
        return [
            {
                "id": analysis.id,
                "education_level": analysis.education_level,
                "career_interest": analysis.career_interest,
                "confidence_score": analysis.confidence_score,
                "source": analysis.source,
                "created_at": analysis.created_at,
                "scholarships": (analysis.recommendations or {}).get("scholarships") or [],
                "career_paths": (analysis.recommendations or {}).get("careerPaths") or [],
            }
            for analysis in analyses
        ]

    async def get_analysis(self, db: AsyncSession, user_id: int, analysis_id: int) -> OpportunityAnalysis:
        analysis = await OpportunityRepository(db).get_user_analysis(user_id, analysis_id)
        if not analysis:
            raise NotFoundError("Analysis not found")
        return analysis

    async def regenerate_analysis(self, db: AsyncSession, user: User, analysis_id: int) -> OpportunityAnalysis:
        """Rerun the recommendations for a stored form against fresh assessment context"""
        repo = OpportunityRepository(db)
        analysis = await repo.get_user_analysis(user.user_id, analysis_id)
        if not analysis:
            raise NotFoundError("Analysis not found")

        outcome, source = await self._recommend(db, user, _form_of(analysis))
        analysis.recommendations = outcome["recommendations"]
        analysis.confidence_score = outcome["confidence_score"]
        analysis.source = source
        analysis.regeneration_count = (analysis.regeneration_count or 0) + 1

        await log_major_event(
            db,
            action="opportunity_analysis_regenerated",
            status="success" if source == "ai" else "fallback",
            user=str(user.user_id),
            details=f"Regeneration {analysis.regeneration_count} via {source}",
            entity=f"opportunity_analysis:{analysis.id}",
            source="opportunity_service",
        )
        analysis = await repo.save(analysis)
        logger.info(f"Regenerated opportunity analysis {analysis.id} via {source}")
        return analysis

    async def delete_analysis(self, db: AsyncSession, user_id: int, analysis_id: int) -> None:
        """Soft delete: the row stays but drops out of history and lookups"""
        repo = OpportunityRepository(db)
        analysis = await repo.get_user_analysis(user_id, analysis_id, active_only=False)
        if not analysis:
            raise NotFoundError("Analysis not found")
        analysis.is_active = False
        await repo.save(analysis)
        logger.info(f"Opportunity analysis {analysis_id} deleted by user {user_id}")


# Singleton instance
opportunity_service = OpportunityService()
