from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


class ChatMessageRequest(BaseModel):
    message: str = Field(..., max_length=4000)
    session_id: Optional[str] = None


class ChatMessageResponse(BaseModel):
    message: str
    session_id: str
    has_context: bool
    source: str


class ChatSessionResponse(BaseModel):
    session_id: str
    messages: List[Dict[str, Any]]
    context: Optional[Dict[str, Any]] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatHistoryResponse(BaseModel):
    sessions: List[ChatSessionResponse]


class ClearHistoryRequest(BaseModel):
    session_id: Optional[str] = None


class ClearHistoryResponse(BaseModel):
    message: str
    session_id: str


class SuggestionsResponse(BaseModel):
    suggestions: List[str]
    has_assessment: bool
