"""
Response merge - folds partial answer submissions into an assessment's response set.

Responses are keyed by question_id. Re-submitting a question replaces the stored
entry in place, so replaying the same submission never changes the result.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional


def _key(question_id: Any) -> str:
    return str(question_id)


def merge_responses(
    existing: Optional[List[Dict[str, Any]]],
    incoming: Iterable[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Merge incoming responses into the existing list by question_id.

    Args:
        existing: Stored responses (not mutated)
        incoming: Partial submissions with question_id, answer and score
        now: Timestamp written to answered_at for every merged entry

    Returns:
        A new list with existing order preserved and new questions appended
    """
    answered_at = (now or datetime.now(timezone.utc)).isoformat()
    merged = [dict(r) for r in (existing or [])]
    index = {_key(r["question_id"]): i for i, r in enumerate(merged)}

    for response in incoming:
        entry = {
            "question_id": response["question_id"],
            "answer": response.get("answer"),
            "score": response.get("score") or 0,
            "answered_at": answered_at,
        }
        position = index.get(_key(entry["question_id"]))
        if position is not None:
            merged[position] = {**merged[position], **entry}
        else:
            index[_key(entry["question_id"])] = len(merged)
            merged.append(entry)

    return merged


def completion_percentage(questions_answered: int, total_questions: int) -> int:
    """round(100 * answered / total), clamped to [0, 100]"""
    if total_questions <= 0:
        return 0
    # Math.round semantics: halves go up
    value = int((100 * questions_answered / total_questions) + 0.5)
    return max(0, min(100, value))
