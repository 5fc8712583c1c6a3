# Models module
from .user import User
from .question import Question, QuestionCategory, ScoringType
from .assessment import Assessment, AssessmentStatus
from .chat_session import ChatSession, MessageRole
from .opportunity_analysis import OpportunityAnalysis
from .log import Log

__all__ = [
    "User",
    "Question",
    "QuestionCategory",
    "ScoringType",
    "Assessment",
    "AssessmentStatus",
    "ChatSession",
    "MessageRole",
    "OpportunityAnalysis",
    "Log"
]
