from .merge import merge_responses, completion_percentage
from .progress import CATEGORY_QUOTAS, TOTAL_QUESTIONS, initial_category_progress, compute_category_progress
from .scoring import SCORE_KEYS, empty_scores, calculate_scores
from .state_machine import can_transition, ensure_transition, is_terminal

__all__ = [
    "merge_responses",
    "completion_percentage",
    "CATEGORY_QUOTAS",
    "TOTAL_QUESTIONS",
    "initial_category_progress",
    "compute_category_progress",
    "SCORE_KEYS",
    "empty_scores",
    "calculate_scores",
    "can_transition",
    "ensure_transition",
    "is_terminal",
]
