from typing import Dict, Iterable, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.question import Question

logger = logging.getLogger(__name__)


class QuestionRepository:
    """Read-only access to the question bank"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_questions(self, category: Optional[str] = None, active_only: bool = True) -> List[Question]:
        """Questions ordered by their display position"""
        stmt = select(Question)
        if active_only:
            stmt = stmt.where(Question.is_active.is_(True))
        if category:
            stmt = stmt.where(Question.category == category)
        stmt = stmt.order_by(Question.order, Question.question_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_question_map(self, question_ids: Optional[Iterable] = None) -> Dict[str, Question]:
        """
        question_id (as str) -> Question, including inactive questions

        Args:
            question_ids: Restrict the lookup to these ids; None loads the whole bank
        """
        stmt = select(Question)
        if question_ids is not None:
            ids = []
            for qid in question_ids:
                try:
                    ids.append(int(qid))
                except (TypeError, ValueError):
                    logger.debug(f"Ignoring non-numeric question id {qid!r}")
            if not ids:
                return {}
            stmt = stmt.where(Question.question_id.in_(ids))
        result = await self.db.execute(stmt)
        return {str(q.question_id): q for q in result.scalars().all()}
