from app.services.assessment_engine import (
    CATEGORY_QUOTAS,
    TOTAL_QUESTIONS,
    compute_category_progress,
    initial_category_progress,
)


def test_quotas_add_up_to_the_full_battery():
    assert CATEGORY_QUOTAS == {"interest": 20, "aptitude": 25, "personality": 20, "academic": 20}
    assert TOTAL_QUESTIONS == 85


def test_initial_progress_is_zeroed():
    progress = initial_category_progress()

    assert progress["aptitude"] == {"total": 25, "answered": 0, "completed": False}
    assert set(progress) == set(CATEGORY_QUOTAS)


def test_each_response_counts_toward_its_own_question_category():
    responses = [{"question_id": 1}, {"question_id": 2}, {"question_id": 3}]
    categories = {"1": "interest", "2": "aptitude", "3": "aptitude"}

    progress = compute_category_progress(responses, categories)

    assert progress["interest"]["answered"] == 1
    assert progress["aptitude"]["answered"] == 2
    assert progress["personality"]["answered"] == 0


def test_category_completes_when_quota_is_reached():
    responses = [{"question_id": i} for i in range(20)]
    categories = {str(i): "personality" for i in range(20)}

    progress = compute_category_progress(responses, categories)

    assert progress["personality"]["completed"] is True
    assert progress["interest"]["completed"] is False


def test_unknown_questions_and_categories_are_ignored():
    responses = [{"question_id": 1}, {"question_id": 99}]
    categories = {"1": "hobbies"}

    progress = compute_category_progress(responses, categories)

    assert all(record["answered"] == 0 for record in progress.values())
