import json

import pytest

from conftest import FakeAIClient, RecordingSleep, rate_limited
from app.core.exceptions import AnalysisParseError, ExternalServiceError
from app.services.assessment_engine import empty_scores
from app.services.career_analysis import (
    CareerAnalysis,
    create_analysis_graph,
    generate_fallback_analysis,
    parse_analysis_response,
    run_career_analysis,
    strip_code_fences,
)
from app.services.career_analysis.fallback import recommend_stream
from app.services.prompts import build_career_analysis_prompt
from app.services.resilient_call import RetryPolicy


def _scores(**overrides):
    scores = empty_scores()
    for dotted, value in overrides.items():
        group, key = dotted.split("__")
        scores[group][key] = value
    return scores


def _ai_payload(**extra):
    payload = {
        "summary": "A curious, analytical student.",
        "riasecProfile": {"dominantType": "Investigative", "description": "Likes research"},
        "recommendedStream": {"primary": "Science (PCB)", "reasoning": "Strong biology", "alternatives": ["Science (PCM)"]},
        "careerPaths": [
            {"title": "Doctor", "matchScore": 92},
            {"title": "Researcher", "matchScore": 88},
            {"title": "Pharmacist", "matchScore": 80},
        ],
    }
    payload.update(extra)
    return payload


class TestParser:
    def test_code_fences_are_stripped(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'
        assert strip_code_fences('Here you go:\n```json\n{"a": 1}\n```\nEnjoy') == '{"a": 1}'
        assert strip_code_fences('Here it is:\n```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```json\n{"a": 1}') == '{"a": 1}'
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_untagged_fence_after_prose_still_parses(self):
        reply = "Here is the analysis:\n```\n" + json.dumps(_ai_payload()) + "\n```"

        analysis = parse_analysis_response(reply, "m")

        assert analysis["summary"] == "A curious, analytical student."
        assert analysis["modelUsed"] == "m"

    def test_valid_reply_is_stamped_with_model_and_time(self):
        text = "```json\n" + json.dumps(_ai_payload()) + "\n```"

        analysis = parse_analysis_response(text, "gpt-test")

        assert analysis["modelUsed"] == "gpt-test"
        assert analysis["generatedAt"]
        assert analysis["recommendedStream"]["primary"] == "Science (PCB)"

    def test_string_stream_is_normalised(self):
        analysis = parse_analysis_response(json.dumps(_ai_payload(recommendedStream="Commerce")), "m")

        assert analysis["recommendedStream"] == {"primary": "Commerce", "reasoning": "", "alternatives": []}

    def test_non_json_is_rejected(self):
        with pytest.raises(AnalysisParseError):
            parse_analysis_response("I think you should be a doctor.", "m")

    def test_fewer_than_three_career_paths_is_rejected(self):
        payload = _ai_payload()
        payload["careerPaths"] = payload["careerPaths"][:2]

        with pytest.raises(AnalysisParseError):
            parse_analysis_response(json.dumps(payload), "m")

    def test_missing_summary_is_rejected(self):
        payload = _ai_payload()
        del payload["summary"]

        with pytest.raises(AnalysisParseError):
            parse_analysis_response(json.dumps(payload), "m")


class TestFallback:
    def test_dominant_secondary_and_stream(self):
        scores = _scores(interest__investigative=82, interest__social=68, aptitude__numerical=50)

        analysis = generate_fallback_analysis(scores, {"name": "Asha"})

        assert analysis["riasecProfile"]["dominantType"] == "Investigative"
        assert analysis["riasecProfile"]["secondaryType"] == "Social"
        assert analysis["recommendedStream"]["primary"] == "Science"
        assert analysis["modelUsed"] == "fallback-analysis"
        assert analysis["generatedAt"]

    def test_strong_social_interest_recommends_humanities(self):
        scores = _scores(interest__investigative=82, interest__social=75, aptitude__numerical=50)

        analysis = generate_fallback_analysis(scores, {"name": "Asha"})

        assert analysis["riasecProfile"]["dominantType"] == "Investigative"
        assert analysis["recommendedStream"]["primary"] == "Arts/Humanities"

    def test_career_paths_follow_the_top_traits(self):
        scores = _scores(interest__enterprising=90, interest__artistic=70)

        paths = generate_fallback_analysis(scores, {})["careerPaths"]

        assert [p["title"] for p in paths] == [
            "Business & Management", "Creative Arts & Design", "Interdisciplinary Fields"]
        assert [p["matchScore"] for p in paths] == [95, 85, 75]
        assert [p["ranking"] for p in paths] == [1, 2, 3]
        assert all(p["requiredEducation"] for p in paths)

    def test_ties_keep_declaration_order(self):
        analysis = generate_fallback_analysis(empty_scores(), None)

        assert analysis["riasecProfile"]["topTraits"] == ["Realistic", "Investigative", "Artistic"]

    @pytest.mark.parametrize("overrides,stream", [
        ({"aptitude__numerical": 70, "academic__mathematics": 70}, "Science (PCM)"),
        ({"aptitude__numerical": 70, "academic__mathematics": 60, "interest__conventional": 65}, "Commerce"),
        ({"aptitude__numerical": 65, "academic__mathematics": 90}, "Science"),
        ({"interest__artistic": 71}, "Arts/Humanities"),
        ({"interest__social": 75}, "Arts/Humanities"),
        ({"interest__social": 70}, "Science"),
    ])
    def test_stream_thresholds(self, overrides, stream):
        assert recommend_stream(_scores(**overrides)) == stream

    def test_fallback_satisfies_the_analysis_schema(self):
        analysis = generate_fallback_analysis(_scores(interest__social=80), {"name": "Ravi"})

        CareerAnalysis.model_validate(analysis)


class TestPrompt:
    def test_every_score_and_profile_default_is_embedded(self):
        prompt = build_career_analysis_prompt(_scores(aptitude__critical=77), {})

        assert "Critical: 77/100" in prompt
        assert "Learning Confidence: 0/100" in prompt
        assert "Emotional Stability: 0/100" in prompt
        assert "Name: Student" in prompt
        assert "Class/Grade: 10th/12th" in prompt
        assert "Age: 15-18" in prompt
        assert '"careerPaths"' in prompt


class TestGraph:
    async def test_ai_analysis_is_used_when_valid(self):
        client = FakeAIClient(json.dumps(_ai_payload()))
        graph = create_analysis_graph(client, policy=RetryPolicy(), sleep=RecordingSleep())

        result = await run_career_analysis(_scores(interest__investigative=80), {"name": "Asha"}, graph=graph)

        assert result["source"] == "ai"
        assert result["attempts"] == 1
        assert result["analysis"]["modelUsed"] == "fake-model"
        assert "Name: Asha" in client.prompts[0]

    async def test_rate_limits_exhaust_into_fallback(self):
        client = FakeAIClient(*rate_limited(4))
        sleep = RecordingSleep()
        graph = create_analysis_graph(client, policy=RetryPolicy(), sleep=sleep)

        result = await run_career_analysis(_scores(interest__investigative=82, interest__social=75), {}, graph=graph)

        assert result["source"] == "fallback"
        assert result["attempts"] == 4
        assert sleep.delays == [1.0, 2.0, 4.0]
        assert result["analysis"]["riasecProfile"]["dominantType"] == "Investigative"

    async def test_unparseable_reply_falls_back_without_retry(self):
        client = FakeAIClient("not json at all", json.dumps(_ai_payload()))
        sleep = RecordingSleep()
        graph = create_analysis_graph(client, policy=RetryPolicy(), sleep=sleep)

        result = await run_career_analysis(empty_scores(), {}, graph=graph)

        assert result["source"] == "fallback"
        assert client.calls == 1
        assert sleep.delays == []
        assert result["error"]

    async def test_service_errors_fall_back(self):
        client = FakeAIClient(ExternalServiceError("Generative AI is not configured"))
        graph = create_analysis_graph(client, policy=RetryPolicy(), sleep=RecordingSleep())

        result = await run_career_analysis(empty_scores(), {}, graph=graph)

        assert result["source"] == "fallback"
        assert result["analysis"]["modelUsed"] == "fallback-analysis"
