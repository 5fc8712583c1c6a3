from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import CareerCoreError, status_code_for
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.user import User
from app.schemas.chat_schema import (
    ChatHistoryResponse,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatSessionResponse,
    ClearHistoryRequest,
    ClearHistoryResponse,
    SuggestionsResponse,
)
from app.services.chat_service import chat_service
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/message", response_model=ChatMessageResponse)
async def send_message(payload: ChatMessageRequest, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await chat_service.send_message(db, current_user, payload.message, session_id=payload.session_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"AI chat error for user {current_user.user_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process message: {str(e)}")


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    session_id: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        sessions = await chat_service.get_history(db, current_user.user_id, session_id=session_id, limit=limit)
    except Exception as e:
        logger.error(f"Error retrieving chat history: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to retrieve chat history: {str(e)}")
    return {"sessions": sessions}


@router.get("/session", response_model=ChatSessionResponse)
async def get_active_session(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await chat_service.get_active_session(db, current_user.user_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error retrieving active chat session: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to retrieve chat session: {str(e)}")


@router.post("/clear", response_model=ClearHistoryResponse)
async def clear_history(
    payload: Optional[ClearHistoryRequest] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate the current conversation and open a fresh one"""
    try:
        session_id = await chat_service.clear_history(
            db, current_user.user_id, session_id=payload.session_id if payload else None)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error clearing chat history: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to clear chat history: {str(e)}")
    return {"message": "Chat history cleared", "session_id": session_id}


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggested_questions(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await chat_service.suggested_questions(db, current_user.user_id)
    except Exception as e:
        logger.error(f"Error getting suggested questions: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get suggested questions: {str(e)}")
