"""Assessment lifecycle transitions"""
from app.core.exceptions import InvalidStateError
from app.models.assessment import AssessmentStatus

_TRANSITIONS = {
    AssessmentStatus.NOT_STARTED: {
        AssessmentStatus.IN_PROGRESS,
        AssessmentStatus.COMPLETED,
        AssessmentStatus.ABANDONED,
    },
    AssessmentStatus.IN_PROGRESS: {
        AssessmentStatus.COMPLETED,
        AssessmentStatus.ABANDONED,
    },
    AssessmentStatus.COMPLETED: set(),
    AssessmentStatus.ABANDONED: set(),
}


def is_terminal(status) -> bool:
    return not _TRANSITIONS[AssessmentStatus(status)]


def can_transition(current, target) -> bool:
    return AssessmentStatus(target) in _TRANSITIONS[AssessmentStatus(current)]


def ensure_transition(current, target) -> None:
    if not can_transition(current, target):
        raise InvalidStateError(
            f"Cannot move assessment from {AssessmentStatus(current).value} to {AssessmentStatus(target).value}")
