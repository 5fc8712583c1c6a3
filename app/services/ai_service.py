"""
AI Service for OpenAI integration
Wraps the LangChain chat model behind a small generate/chat interface and
normalises provider failures into the core's error taxonomy.
"""
import logging
from typing import Dict, List, Optional

import openai
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, RateLimitedError

logger = logging.getLogger(__name__)


def _is_rate_limit(error: Exception) -> bool:
    if isinstance(error, openai.RateLimitError):
        return True
    status = getattr(error, "status_code", None) or getattr(error, "status", None)
    return status == 429


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    converted: List[BaseMessage] = []
    for message in messages:
        role = message.get("role")
        content = message.get("content", "")
        if role == "system":
            converted.append(SystemMessage(content=content))
        elif role == "assistant":
            converted.append(AIMessage(content=content))
        else:
            converted.append(HumanMessage(content=content))
    return converted


class GenerativeAIClient:
    """Generative AI collaborator following Single Responsibility Principle"""

    def __init__(self, llm: Optional[ChatOpenAI] = None):
        self._llm = llm
        self.model = settings.OPENAI_MODEL
        api_key = settings.OPENAI_API_KEY
        if llm is None and (not api_key or api_key == "your-openai-api-key-here"):
            logger.warning("OPENAI_API_KEY is missing or not set properly! AI features will use fallbacks.")

    def _get_llm(self) -> ChatOpenAI:
        if self._llm is None:
            if not settings.OPENAI_API_KEY:
                raise ExternalServiceError("Generative AI is not configured")
            # Retries are owned by the resilient call layer
            self._llm = ChatOpenAI(
                model=self.model,
                api_key=settings.OPENAI_API_KEY,
                temperature=settings.AI_TEMPERATURE,
                max_retries=0,
            )
        return self._llm

    async def _ainvoke(self, messages: List[BaseMessage]) -> str:
        llm = self._get_llm()
        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            if _is_rate_limit(e):
                raise RateLimitedError(f"AI rate limit: {str(e)}") from e
            logger.error(f"AI generation error: {str(e)}")
            raise ExternalServiceError(f"AI generation failed: {str(e)}") from e
        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
        return content.strip()

    async def generate(self, prompt: str) -> str:
        """Single-prompt completion"""
        return await self._ainvoke([HumanMessage(content=prompt)])

    async def chat(self, messages: List[Dict[str, str]]) -> str:
        """Multi-turn completion from role/content dicts"""
        return await self._ainvoke(to_langchain_messages(messages))


# Singleton instance
ai_service = GenerativeAIClient()

def get_ai_service() -> GenerativeAIClient:
    """Dependency injection for AI service"""
    return ai_service
