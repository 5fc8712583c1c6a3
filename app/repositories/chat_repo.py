from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from app.core.exceptions import ConflictError
from app.models.chat_session import ChatSession
from datetime import datetime, timezone
from typing import Optional, List
import logging
import time
import uuid

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class ChatSessionRepository:
    """Repository for ChatSession entity operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_session(self, user_id: int) -> Optional[ChatSession]:
        result = await self.db.execute(
            select(ChatSession).where(
                ChatSession.user_id == user_id,
                ChatSession.is_active.is_(True)
            ).order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
        )
        return result.scalars().first()

    async def get_user_session(self, user_id: int, session_id: str) -> Optional[ChatSession]:
        result = await self.db.execute(
            select(ChatSession).where(
                ChatSession.user_id == user_id,
                ChatSession.session_id == session_id
            )
        )
        return result.scalar_one_or_none()

    async def list_sessions(self, user_id: int, session_id: Optional[str] = None, limit: int = 50) -> List[ChatSession]:
        stmt = select(ChatSession).where(ChatSession.user_id == user_id)
        if session_id:
            stmt = stmt.where(ChatSession.session_id == session_id)
        stmt = stmt.order_by(ChatSession.updated_at.desc(), ChatSession.id.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_session(self, user_id: int) -> ChatSession:
        """
        Create a fresh active session

        Raises:
            ConflictError: If the user already has an active session
        """
        session = ChatSession(
            user_id=user_id,
            session_id=new_session_id(),
            messages=[],
            context={},
            is_active=True
        )
        self.db.add(session)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(
                f"User {user_id} already has an active chat session") from e
        await self.db.refresh(session)
        logger.info(
            f"Created chat session {session.session_id} for user {user_id}")
        return session

    async def deactivate_sessions(self, user_id: int, session_id: Optional[str] = None) -> int:
        """Mark one session, or every active session, of the user as inactive"""
        stmt = update(ChatSession).where(
            ChatSession.user_id == user_id,
            ChatSession.is_active.is_(True)
        )
        if session_id:
            stmt = stmt.where(ChatSession.session_id == session_id)
        stmt = stmt.values(is_active=False, updated_at=datetime.now(timezone.utc))
        stmt = stmt.execution_options(synchronize_session="fetch")
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount

    async def save(self, session: ChatSession) -> ChatSession:
        session.updated_at = datetime.now(timezone.utc)
        self.db.add(session)
        try:
            await self.db.commit()
        except Exception as e:
            logger.error(
                f"Error saving chat session {session.session_id}: {str(e)}")
            await self.db.rollback()
            raise
        await self.db.refresh(session)
        return session
