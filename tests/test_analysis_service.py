import json
from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from conftest import FakeAIClient, RecordingSleep, rate_limited
from app.core.exceptions import InvalidStateError, NotFoundError
from app.models import Assessment, Log
from app.services.analysis_service import AnalysisService
from app.services.assessment_engine import empty_scores
from app.services.career_analysis import create_analysis_graph
from app.services.resilient_call import RetryPolicy

AI_REPLY = json.dumps({
    "summary": "Strong analytical thinker with a caring streak.",
    "riasecProfile": {"dominantType": "Investigative", "description": "Research minded"},
    "recommendedStream": {"primary": "Science (PCB)", "reasoning": "Biology and care", "alternatives": []},
    "careerPaths": [
        {"title": "Doctor", "matchScore": 93},
        {"title": "Biotechnologist", "matchScore": 88},
        {"title": "Psychologist", "matchScore": 81},
    ],
})


def _service(client, sleep=None):
    return AnalysisService(graph=create_analysis_graph(client, policy=RetryPolicy(), sleep=sleep or RecordingSleep()))


async def _assessment(db, user, status="completed"):
    scores = empty_scores()
    scores["interest"].update(investigative=82, social=68)
    assessment = Assessment(
        user_id=user.user_id,
        status=status,
        responses=[],
        questions_answered=85,
        total_questions=85,
        completion_percentage=100,
        scores=scores,
        completed_at=datetime.now(timezone.utc) if status == "completed" else None,
    )
    db.add(assessment)
    await db.commit()
    await db.refresh(assessment)
    return assessment


async def test_generates_and_stores_ai_analysis(db, user):
    assessment = await _assessment(db, user)
    client = FakeAIClient(AI_REPLY)

    result = await _service(client).generate_analysis(db, user.user_id, assessment.assessment_id)

    assert result["cached"] is False
    assert result["source"] == "ai"
    assert result["analysis"]["recommendedStream"]["primary"] == "Science (PCB)"
    assert result["generated_at"] is not None
    assert "Name: Asha" in client.prompts[0]
    assert "Class/Grade: 10th" in client.prompts[0]

    logs = (await db.execute(select(Log).where(Log.action == "analysis_generated"))).scalars().all()
    assert [log.status for log in logs] == ["success"]


async def test_missing_profile_fields_use_prompt_defaults(db, other_user):
    assessment = await _assessment(db, other_user)
    client = FakeAIClient(AI_REPLY)

    await _service(client).generate_analysis(db, other_user.user_id, assessment.assessment_id)

    assert "Name: Ravi" in client.prompts[0]
    assert "Class/Grade: 10th/12th" in client.prompts[0]
    assert "Age: 15-18" in client.prompts[0]
    assert "Not specified" not in client.prompts[0]


async def test_cached_analysis_makes_no_external_call(db, user):
    assessment = await _assessment(db, user)
    await _service(FakeAIClient(AI_REPLY)).generate_analysis(db, user.user_id, assessment.assessment_id)
    idle_client = FakeAIClient()

    result = await _service(idle_client).generate_analysis(db, user.user_id, assessment.assessment_id)

    assert result["cached"] is True
    assert idle_client.calls == 0
    assert result["analysis"]["summary"].startswith("Strong analytical")


async def test_regenerate_replaces_the_stored_analysis(db, user):
    assessment = await _assessment(db, user)
    await _service(FakeAIClient(AI_REPLY)).generate_analysis(db, user.user_id, assessment.assessment_id)
    client = FakeAIClient(RuntimeError("provider down"))

    result = await _service(client).generate_analysis(db, user.user_id, assessment.assessment_id, regenerate=True)

    assert result["cached"] is False
    assert result["source"] == "fallback"
    assert client.calls == 1
    stored = (await db.execute(select(Assessment))).scalars().one()
    assert stored.ai_analysis["modelUsed"] == "fallback-analysis"


async def test_rate_limited_ai_still_yields_an_analysis(db, user):
    assessment = await _assessment(db, user)
    sleep = RecordingSleep()

    result = await _service(FakeAIClient(*rate_limited(4)), sleep).generate_analysis(
        db, user.user_id, assessment.assessment_id)

    assert result["source"] == "fallback"
    assert sleep.delays == [1.0, 2.0, 4.0]
    analysis = result["analysis"]
    assert analysis["riasecProfile"]["dominantType"] == "Investigative"
    assert analysis["riasecProfile"]["secondaryType"] == "Social"
    assert analysis["recommendedStream"]["primary"] == "Science"


async def test_incomplete_assessment_is_rejected(db, user):
    assessment = await _assessment(db, user, status="in_progress")
    client = FakeAIClient()

    with pytest.raises(InvalidStateError):
        await _service(client).generate_analysis(db, user.user_id, assessment.assessment_id)
    assert client.calls == 0


async def test_unknown_or_foreign_assessment_is_not_found(db, user, other_user):
    assessment = await _assessment(db, user)

    with pytest.raises(NotFoundError):
        await _service(FakeAIClient()).generate_analysis(db, other_user.user_id, assessment.assessment_id)
    with pytest.raises(NotFoundError):
        await _service(FakeAIClient()).generate_analysis(db, user.user_id, 4242)


async def test_get_analysis_requires_a_generated_analysis(db, user):
    assessment = await _assessment(db, user)
    service = _service(FakeAIClient(AI_REPLY))

    with pytest.raises(NotFoundError):
        await service.get_analysis(db, user.user_id, assessment.assessment_id)

    await service.generate_analysis(db, user.user_id, assessment.assessment_id)
    stored = await service.get_analysis(db, user.user_id, assessment.assessment_id)

    assert stored["analysis"]["summary"]
    assert stored["scores"]["interest"]["investigative"] == 82


async def test_list_my_analyses_summarises_completed_assessments(db, user):
    analysed = await _assessment(db, user)
    service = _service(FakeAIClient(AI_REPLY))
    await service.generate_analysis(db, user.user_id, analysed.assessment_id)
    await _assessment(db, user)

    summaries = await service.list_my_analyses(db, user.user_id)

    assert len(summaries) == 2
    by_id = {s["assessment_id"]: s for s in summaries}
    assert by_id[analysed.assessment_id]["has_analysis"] is True
    assert by_id[analysed.assessment_id]["recommended_stream"] == "Science (PCB)"
    assert sum(1 for s in summaries if not s["has_analysis"]) == 1
