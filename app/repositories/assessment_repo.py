from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from app.core.exceptions import ConflictError
from app.models.assessment import Assessment, AssessmentStatus, ACTIVE_STATUSES
from datetime import datetime, timezone
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class AssessmentRepository:
    """Repository for Assessment entity operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_assessment(self, **values) -> Assessment:
        """
        Insert a new assessment for a user

        Raises:
            ConflictError: If the user already holds a non-terminal assessment
        """
        assessment = Assessment(**values)
        self.db.add(assessment)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Active assessment already exists for user {values.get('user_id')}: {str(e)}")
            raise ConflictError(
                "An assessment is already in progress for this user") from e
        await self.db.refresh(assessment)
        logger.info(
            f"Created assessment {assessment.assessment_id} for user {assessment.user_id}")
        return assessment

    async def get_assessment_by_id(self, assessment_id: int) -> Optional[Assessment]:
        """Get assessment by ID"""
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.assessment_id == assessment_id)
        )
        return result.scalar_one_or_none()

    async def get_user_assessment(self, user_id: int, assessment_id: int) -> Optional[Assessment]:
        """Get an assessment only if it belongs to the user"""
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.assessment_id == assessment_id,
                Assessment.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def get_active_assessment(self, user_id: int) -> Optional[Assessment]:
        """The user's non-terminal (not_started / in_progress) assessment, if any"""
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.user_id == user_id,
                Assessment.status.in_(ACTIVE_STATUSES)
            ).order_by(Assessment.created_at.desc())
        )
        return result.scalars().first()

    async def get_in_progress_assessment(self, user_id: int) -> Optional[Assessment]:
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.user_id == user_id,
                Assessment.status == AssessmentStatus.IN_PROGRESS.value
            ).order_by(Assessment.created_at.desc())
        )
        return result.scalars().first()

    async def get_latest_completed_assessment(self, user_id: int) -> Optional[Assessment]:
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.user_id == user_id,
                Assessment.status == AssessmentStatus.COMPLETED.value
            ).order_by(Assessment.completed_at.desc(), Assessment.assessment_id.desc())
        )
        return result.scalars().first()

    async def get_assessments_by_user(self, user_id: int) -> List[Assessment]:
        result = await self.db.execute(
            select(Assessment).where(Assessment.user_id == user_id)
            .order_by(Assessment.created_at.desc(), Assessment.assessment_id.desc())
        )
        return list(result.scalars().all())

    async def get_completed_assessments_by_user(self, user_id: int) -> List[Assessment]:
        result = await self.db.execute(
            select(Assessment).where(
                Assessment.user_id == user_id,
                Assessment.status == AssessmentStatus.COMPLETED.value
            ).order_by(Assessment.completed_at.desc(), Assessment.assessment_id.desc())
        )
        return list(result.scalars().all())

    async def save(self, assessment: Assessment) -> Assessment:
        """Commit pending changes on an assessment and reload it"""
        assessment.updated_at = datetime.now(timezone.utc)
        self.db.add(assessment)
        try:
            await self.db.commit()
        except Exception as e:
            logger.error(
                f"Error saving assessment {assessment.assessment_id}: {str(e)}")
            await self.db.rollback()
            raise
        await self.db.refresh(assessment)
        return assessment

    async def store_analysis(self, assessment: Assessment, analysis: dict) -> Assessment:
        """Store generated AI analysis on the assessment"""
        assessment.ai_analysis = analysis
        assessment.ai_analysis_generated_at = datetime.now(timezone.utc)
        return await self.save(assessment)
