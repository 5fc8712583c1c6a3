from app.services.assessment_engine import SCORE_KEYS, calculate_scores, empty_scores


def _question(scoring_type, scoring_key):
    return {"scoring_type": scoring_type, "scoring_key": scoring_key}


def test_empty_scores_have_every_fixed_key_at_zero():
    scores = empty_scores()

    assert set(scores) == {"interest", "aptitude", "personality", "academic"}
    for group, keys in SCORE_KEYS.items():
        assert scores[group] == {key: 0 for key in keys}


def test_bucket_is_the_mean_not_the_sum():
    question_map = {
        "1": _question("riasec", "investigative"),
        "2": _question("riasec", "investigative"),
        "3": _question("riasec", "investigative"),
    }
    responses = [
        {"question_id": 1, "score": 80},
        {"question_id": 2, "score": 90},
        {"question_id": 3, "score": 70},
    ]

    scores = calculate_scores(responses, question_map)

    assert scores["interest"]["investigative"] == 80
    assert scores["interest"]["realistic"] == 0


def test_scoring_types_map_to_their_groups():
    question_map = {
        "1": _question("big_five", "openness"),
        "2": _question("aptitude", "numerical"),
        "3": _question("academic", "mathematics"),
    }
    responses = [
        {"question_id": 1, "score": 55},
        {"question_id": 2, "score": 72},
        {"question_id": 3, "score": 64},
    ]

    scores = calculate_scores(responses, question_map)

    assert scores["personality"]["openness"] == 55
    assert scores["aptitude"]["numerical"] == 72
    assert scores["academic"]["mathematics"] == 64


def test_means_round_half_up():
    question_map = {"1": _question("aptitude", "verbal"), "2": _question("aptitude", "verbal")}
    responses = [{"question_id": 1, "score": 60}, {"question_id": 2, "score": 61}]

    assert calculate_scores(responses, question_map)["aptitude"]["verbal"] == 61


def test_unknown_inputs_are_skipped():
    question_map = {
        "1": _question("riasec", "curiosity"),
        "2": _question("learning_style", "visual"),
        "3": _question(None, None),
        "4": _question("riasec", "social"),
    }
    responses = [
        {"question_id": 1, "score": 100},
        {"question_id": 2, "score": 100},
        {"question_id": 3, "score": 100},
        {"question_id": 4, "score": 40},
        {"question_id": 404, "score": 100},
    ]

    scores = calculate_scores(responses, question_map)

    assert scores["interest"]["social"] == 40
    assert "curiosity" not in scores["interest"]
    assert set(scores) == set(SCORE_KEYS)


def test_orm_like_question_objects_are_supported():
    class Q:
        scoring_type = "riasec"
        scoring_key = "artistic"

    scores = calculate_scores([{"question_id": 5, "score": 90}], {"5": Q()})

    assert scores["interest"]["artistic"] == 90
