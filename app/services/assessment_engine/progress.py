"""
Per-category progress derived from the response set.

Every response counts toward its own question's category, regardless of which
category the client currently has open.
"""
from typing import Any, Dict, List, Mapping

CATEGORY_QUOTAS: Dict[str, int] = {
    "interest": 20,
    "aptitude": 25,
    "personality": 20,
    "academic": 20,
}

TOTAL_QUESTIONS = sum(CATEGORY_QUOTAS.values())


def initial_category_progress() -> Dict[str, Dict[str, Any]]:
    return {
        category: {"total": total, "answered": 0, "completed": False}
        for category, total in CATEGORY_QUOTAS.items()
    }


def compute_category_progress(
    responses: List[Dict[str, Any]],
    question_categories: Mapping[str, str],
) -> Dict[str, Dict[str, Any]]:
    """
    Count answered questions per category.

    Args:
        responses: Merged response list
        question_categories: question_id (as str) -> category

    Returns:
        {category: {total, answered, completed}} for the four fixed categories
    """
    progress = initial_category_progress()
    for response in responses:
        category = question_categories.get(str(response["question_id"]))
        if category in progress:
            progress[category]["answered"] += 1

    for record in progress.values():
        record["completed"] = record["answered"] >= record["total"]
    return progress
