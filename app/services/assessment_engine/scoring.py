"""
Scoring engine - reduces a response set into four trait score maps.

Each bucket is the rounded unweighted mean of the scores mapped to it, so values
stay on the same 0-100 scale however many questions feed a trait.
"""
from typing import Any, Dict, List, Mapping, Tuple

from app.models.question import ScoringType

SCORE_KEYS: Dict[str, Tuple[str, ...]] = {
    "interest": (
        "realistic", "investigative", "artistic",
        "social", "enterprising", "conventional",
    ),
    "aptitude": (
        "numerical", "verbal", "spatial", "logical", "technical",
        "analytical", "creative", "attention", "critical",
    ),
    "personality": (
        "extraversion", "agreeableness", "conscientiousness",
        "emotional_stability", "openness",
    ),
    "academic": (
        "mathematics", "science", "languages", "social_studies",
        "computer_science", "study_time", "learning_confidence",
    ),
}

# question.scoring_type -> score group
SCORING_TYPE_GROUPS: Dict[str, str] = {
    ScoringType.RIASEC.value: "interest",
    ScoringType.APTITUDE.value: "aptitude",
    ScoringType.BIG_FIVE.value: "personality",
    ScoringType.ACADEMIC.value: "academic",
}


def empty_scores() -> Dict[str, Dict[str, int]]:
    return {group: {key: 0 for key in keys} for group, keys in SCORE_KEYS.items()}


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def calculate_scores(
    responses: List[Dict[str, Any]],
    question_map: Mapping[str, Any],
) -> Dict[str, Dict[str, int]]:
    """
    Accumulate response scores into their questions' scoring buckets.

    Args:
        responses: Response dicts with question_id and score
        question_map: question_id (as str) -> object or dict exposing
            scoring_type and scoring_key

    Returns:
        {"interest": {...}, "aptitude": {...}, "personality": {...}, "academic": {...}}
    """
    sums = {group: {key: 0.0 for key in keys} for group, keys in SCORE_KEYS.items()}
    counts = {group: {key: 0 for key in keys} for group, keys in SCORE_KEYS.items()}

    for response in responses:
        question = question_map.get(str(response["question_id"]))
        if question is None:
            continue
        scoring_type = _field(question, "scoring_type")
        scoring_key = _field(question, "scoring_key")
        group = SCORING_TYPE_GROUPS.get(scoring_type)
        if group is None or scoring_key not in sums[group]:
            continue
        sums[group][scoring_key] += float(response.get("score") or 0)
        counts[group][scoring_key] += 1

    return {
        group: {
            key: _round_half_up(sums[group][key] / max(counts[group][key], 1))
            for key in keys
        }
        for group, keys in SCORE_KEYS.items()
    }


def _field(question: Any, name: str):
    if isinstance(question, Mapping):
        return question.get(name)
    return getattr(question, name, None)
