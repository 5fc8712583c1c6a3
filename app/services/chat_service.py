"""
Chat Service - AI career counselling chat with a bounded conversational window
grounded in the student's latest assessment results
"""
import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.chat_session import ChatSession, MessageRole
from app.models.user import User
from app.repositories.assessment_repo import AssessmentRepository
from app.repositories.chat_repo import ChatSessionRepository
from app.services.ai_service import GenerativeAIClient, get_ai_service
from app.services.career_analysis.fallback import rank_riasec
from app.services.prompts import build_chat_system_prompt
from app.services.resilient_call import RetryPolicy, call_with_fallback

logger = logging.getLogger(__name__)

SUGGESTIONS_WITH_ASSESSMENT = [
    "What are the best career paths based on my assessment results?",
    "Which colleges in India should I target for my top career matches?",
    "What skills should I develop to excel in my recommended careers?",
    "Can you compare my top 3 career matches?",
    "What entrance exams should I prepare for?",
]

SUGGESTIONS_WITHOUT_ASSESSMENT = [
    "How does the career assessment work?",
    "What career options are available after Class 12?",
    "Tell me about engineering vs medical careers in India",
    "How do I choose the right stream in Class 11?",
    "What are the top entrance exams in India?",
]

# (pattern, reply) checked in order against the lowercased message
_CANNED_REPLIES = [
    (r"\b(12th|after class|what next|graduation)\b",
     "**What to do after 12th?**\n\n"
     "- **Science (PCM):** B.Tech/B.E., B.Arch, B.Sc, integrated M.Sc\n"
     "- **Science (PCB):** MBBS, BDS, B.Pharm, B.Sc Nursing\n"
     "- **Commerce:** B.Com, BBA, CA, CS\n"
     "- **Arts/Humanities:** BA, BA LLB, B.Des, Journalism\n\n"
     "Which stream are you from? I can give more specific guidance."),
    (r"\bstream\b|\bclass 11\b|\bpcm\b|\bpcb\b|\bcommerce\b",
     "**Choosing the right stream in Class 11:**\n\n"
     "- **Science (PCM):** Engineering, Architecture, Research\n"
     "- **Science (PCB):** Medicine, Dentistry, Pharmacy\n"
     "- **Commerce:** CA, CS, Business Management\n"
     "- **Arts/Humanities:** Law, Design, Psychology, Journalism\n\n"
     "Your choice should follow your interests and strengths."),
    (r"\bengineering\b.*\bmedical\b|\bmedical\b.*\bengineering\b",
     "**Engineering vs Medical:**\n\n"
     "- **Engineering:** 4-year B.Tech through JEE Main/Advanced, suits problem-solvers and builders\n"
     "- **Medical:** 5.5-year MBBS through NEET, suits those drawn to biology and patient care\n\n"
     "Both are excellent careers. What matters is your passion."),
    (r"\b(college|colleges|university|iit|nit)\b",
     "**Top institutions in India:**\n\n"
     "- Engineering: IITs (JEE Advanced), NITs (JEE Main), BITS Pilani (BITSAT)\n"
     "- Medical: AIIMS, JIPMER, state medical colleges (NEET)\n"
     "- Design: NID, NIFT; Law: NLUs (CLAT)\n\n"
     "Start entrance preparation early and practice consistently."),
    (r"\b(exam|exams|jee|neet|clat|preparation)\b",
     "**Major entrance exams:**\n\n"
     "- Engineering: JEE Main, JEE Advanced, BITSAT\n"
     "- Medical: NEET UG\n"
     "- Other: CLAT (Law), NIFT/NID (Design), CA Foundation\n\n"
     "Focus on NCERT thoroughly and solve previous years' papers."),
    (r"\b(skill|skills|learn|develop)\b",
     "**Skills worth building:**\n\n"
     "- Technical: programming, data analysis, digital literacy\n"
     "- Soft skills: communication, problem-solving, time management\n\n"
     "Online courses, school clubs and small projects are good places to start."),
    (r"\b(hi|hello|hey)\b",
     "Hi there! I'm your AI Career Counselor. I can help with career paths, "
     "stream selection, colleges, entrance exams and skill development. How can I help you today?"),
    (r"\b(guide|help)\b",
     "I'm here to guide you on your career journey. Ask me about choosing a stream, "
     "college selection, entrance exam preparation or career options."),
]


def fallback_reply(message: str, context: Optional[Dict[str, Any]] = None) -> str:
    """Keyword-matched canned reply used when the AI is unavailable"""
    text = (message or "").lower()
    has_results = bool((context or {}).get("assessment_results"))

    if re.search(r"\b(career|careers|path|field|job|profession)\b", text):
        interests = (context or {}).get("career_interests") or []
        if interests:
            return (
                f"Based on your assessment, your strongest interest areas are {', '.join(interests)}. "
                "Careers that combine these areas are likely to suit you well. "
                "Would you like to know more about any specific career?"
            )
        return (
            "Some high-demand career fields in India include technology and IT, healthcare, "
            "engineering, business and finance, and creative fields like design. "
            "Would you like guidance on any of these?"
        )

    for pattern, reply in _CANNED_REPLIES:
        if re.search(pattern, text):
            return reply

    suffix = (
        "Based on your assessment results, I can provide personalised recommendations."
        if has_results
        else "Consider taking the career assessment for personalised guidance."
    )
    return (
        "Thank you for your question! I can help with career path recommendations, "
        "stream selection, college and entrance exam guidance, and skill development. "
        f"{suffix}"
    )


def _message(role: MessageRole, content: str) -> Dict[str, str]:
    return {
        "role": role.value,
        "content": content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class ChatService:
    """Service class for conversational context management"""

    def __init__(
        self,
        client: Optional[GenerativeAIClient] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        window: Optional[int] = None,
    ):
        self._client = client
        self.policy = policy
        self.sleep = sleep
        self.window = window if window is not None else settings.CHAT_CONTEXT_WINDOW

    @property
    def client(self) -> GenerativeAIClient:
        if self._client is None:
            self._client = get_ai_service()
        return self._client

    async def get_active_session(self, db: AsyncSession, user_id: int) -> ChatSession:
        """The user's active session, created when none exists"""
        repo = ChatSessionRepository(db)
        session = await repo.get_active_session(user_id)
        if session:
            return session
        try:
            return await repo.create_session(user_id)
        except ConflictError:
            session = await repo.get_active_session(user_id)
            if session is None:
                raise
            return session

    async def _refresh_context(self, db: AsyncSession, session: ChatSession, user: User) -> bool:
        assessment = await AssessmentRepository(db).get_latest_completed_assessment(user.user_id)
        if not assessment:
            return False
        scores = assessment.scores or {}
        session.context = {
            "assessment_results": scores,
            "career_interests": [t["name"] for t in rank_riasec(scores.get("interest"))[:3]],
            "aptitude_scores": dict(scores.get("aptitude") or {}),
            "user_profile": {
                "current_grade": user.current_grade,
                "stream": user.stream,
                "subjects": user.subjects or [],
            },
        }
        return True

    async def send_message(self, db: AsyncSession, user: User, message: str, session_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Answer a chat message using the recent window and assessment context

        Raises:
            ValidationError: Empty message
            NotFoundError: session_id does not belong to the user
        """
        if not message or not message.strip():
            raise ValidationError("Message is required")
        message = message.strip()

        repo = ChatSessionRepository(db)
        if session_id:
            session = await repo.get_user_session(user.user_id, session_id)
            if not session:
                raise NotFoundError("Chat session not found")
        else:
            session = await self.get_active_session(db, user.user_id)

        has_context = await self._refresh_context(db, session, user)
        history = list(session.messages or [])
        window = history[-self.window:] if self.window > 0 else []

        prompt_messages = [{"role": "system", "content": build_chat_system_prompt(session.context, {
            "name": user.name,
            "current_grade": user.current_grade,
            "stream": user.stream,
            "subjects": user.subjects,
        })}]
        prompt_messages.extend(
            {"role": "user" if m.get("role") == MessageRole.USER.value else "assistant", "content": m.get("content", "")}
            for m in window
        )
        prompt_messages.append({"role": "user", "content": message})

        context = session.context
        result = await call_with_fallback(
            lambda: self.client.chat(prompt_messages),
            lambda: fallback_reply(message, context),
            policy=self.policy,
            sleep=self.sleep,
            label="career chat",
        )

        # JSON column is reassigned, never mutated in place
        session.messages = history + [
            _message(MessageRole.USER, message),
            _message(MessageRole.ASSISTANT, result.value),
        ]
        session = await repo.save(session)
        logger.info(
            f"Chat reply for user {user.user_id} in {session.session_id} via {result.status}")
        return {
            "message": result.value,
            "session_id": session.session_id,
            "has_context": has_context,
            "source": "ai" if result.succeeded else "fallback",
        }

    async def clear_history(self, db: AsyncSession, user_id: int, session_id: Optional[str] = None) -> str:
        """
        Deactivate the user's active session and open a fresh one; returns its id.
        An explicit session_id must belong to the user but may already be inactive.
        """
        repo = ChatSessionRepository(db)
        if session_id and not await repo.get_user_session(user_id, session_id):
            raise NotFoundError("Chat session not found")
        deactivated = await repo.deactivate_sessions(user_id)
        logger.info(f"Deactivated {deactivated} chat session(s) for user {user_id}")
        session = await self.get_active_session(db, user_id)
        return session.session_id

    async def get_history(self, db: AsyncSession, user_id: int, session_id: Optional[str] = None, limit: int = 50) -> List[ChatSession]:
        return await ChatSessionRepository(db).list_sessions(user_id, session_id=session_id, limit=limit)

    async def suggested_questions(self, db: AsyncSession, user_id: int) -> Dict[str, Any]:
        assessment = await AssessmentRepository(db).get_latest_completed_assessment(user_id)
        suggestions = SUGGESTIONS_WITH_ASSESSMENT if assessment else SUGGESTIONS_WITHOUT_ASSESSMENT
        return {"suggestions": list(suggestions), "has_assessment": assessment is not None}


# Singleton instance
chat_service = ChatService()
