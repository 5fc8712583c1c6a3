from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Index, text
from app.db.base import Base
from datetime import datetime, timezone
from enum import Enum


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


_ACTIVE_WHERE = text("is_active = true")


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    session_id = Column(String(64), nullable=False, unique=True, index=True)

    # [{"role", "content", "timestamp"}] in conversation order
    messages = Column(JSON, nullable=False, default=list)

    # Snapshot of the latest completed assessment used to ground replies
    context = Column(JSON, nullable=False, default=dict)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        # One active session per user
        Index(
            "uq_chat_sessions_active_user",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_WHERE,
            sqlite_where=_ACTIVE_WHERE,
        ),
    )
