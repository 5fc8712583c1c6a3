from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.opportunity_analysis import OpportunityAnalysis
from datetime import datetime, timezone
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class OpportunityRepository:
    """Repository for OpportunityAnalysis entity operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_analysis(self, **values) -> OpportunityAnalysis:
        analysis = OpportunityAnalysis(**values)
        self.db.add(analysis)
        try:
            await self.db.commit()
        except Exception as e:
            logger.error(
                f"Error creating opportunity analysis for user {values.get('user_id')}: {str(e)}")
            await self.db.rollback()
            raise
        await self.db.refresh(analysis)
        logger.info(
            f"Created opportunity analysis {analysis.id} for user {analysis.user_id}")
        return analysis

    async def get_user_analysis(self, user_id: int, analysis_id: int, active_only: bool = True) -> Optional[OpportunityAnalysis]:
        """Get an analysis only if it belongs to the user (and, by default, is not deleted)"""
        stmt = select(OpportunityAnalysis).where(
            OpportunityAnalysis.id == analysis_id,
            OpportunityAnalysis.user_id == user_id
        )
        if active_only:
            stmt = stmt.where(OpportunityAnalysis.is_active.is_(True))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active(self, user_id: int, limit: int = 20) -> List[OpportunityAnalysis]:
        result = await self.db.execute(
            select(OpportunityAnalysis).where(
                OpportunityAnalysis.user_id == user_id,
                OpportunityAnalysis.is_active.is_(True)
            ).order_by(OpportunityAnalysis.created_at.desc(), OpportunityAnalysis.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def save(self, analysis: OpportunityAnalysis) -> OpportunityAnalysis:
        analysis.updated_at = datetime.now(timezone.utc)
        self.db.add(analysis)
        try:
            await self.db.commit()
        except Exception as e:
            logger.error(
                f"Error saving opportunity analysis {analysis.id}: {str(e)}")
            await self.db.rollback()
            raise
        await self.db.refresh(analysis)
        return analysis
