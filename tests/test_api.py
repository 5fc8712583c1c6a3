import asyncio
import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from conftest import FakeAIClient, RecordingSleep, build_question_bank
from app.db.base import Base
from app.db.database import get_db
from app.models import User
from app.services.analysis_service import analysis_service
from app.services.career_analysis import create_analysis_graph
from app.services.chat_service import chat_service
from app.services.opportunity_service import opportunity_service
from app.services.resilient_call import RetryPolicy
import main

AI_REPLY = json.dumps({
    "summary": "You thrive on solving problems.",
    "recommendedStream": {"primary": "Science (PCM)", "reasoning": "Numbers", "alternatives": []},
    "careerPaths": [
        {"title": "Software Engineer", "matchScore": 94},
        {"title": "Data Scientist", "matchScore": 90},
        {"title": "Actuary", "matchScore": 82},
    ],
})

OPPORTUNITY_REPLY = json.dumps({
    "scholarships": [{"type": "STEM", "name": "INSPIRE SHE", "matchPercentage": 88}],
    "careerPaths": [{"title": "Software Engineer", "matchPercentage": 90}],
    "confidenceScore": 82,
})


@pytest.fixture
def api(tmp_path, monkeypatch):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with factory() as session:
            student = User(name="Meera", email="meera@example.com", current_grade="12th")
            bank = build_question_bank()
            session.add(student)
            session.add_all(bank)
            await session.commit()
            return student.user_id, [q.question_id for q in bank]

    user_id, question_ids = asyncio.run(setup())

    async def override_get_db():
        async with factory() as session:
            yield session

    analysis_client = FakeAIClient(AI_REPLY)
    chat_client = FakeAIClient("Focus on mathematics and coding.")
    monkeypatch.setattr(analysis_service, "_graph", create_analysis_graph(
        analysis_client, policy=RetryPolicy(), sleep=RecordingSleep()))
    monkeypatch.setattr(chat_service, "_client", chat_client)
    monkeypatch.setattr(chat_service, "sleep", RecordingSleep())
    monkeypatch.setattr(opportunity_service, "_client", FakeAIClient(OPPORTUNITY_REPLY))
    monkeypatch.setattr(opportunity_service, "sleep", RecordingSleep())
    main.app.dependency_overrides[get_db] = override_get_db

    client = TestClient(main.app)
    client.headers.update({"X-User-Id": str(user_id)})
    try:
        yield client, question_ids, analysis_client
    finally:
        main.app.dependency_overrides.clear()


def _answers(question_ids, score=60):
    return [{"question_id": qid, "answer": "4", "score": score} for qid in question_ids]


def test_health(api):
    client, _, _ = api

    assert client.get("/health").json() == {"status": "healthy"}


def test_caller_must_be_a_known_user(api):
    client, _, _ = api

    assert client.post("/assessments/start", headers={"X-User-Id": "999"}).status_code == 404


def test_assessment_lifecycle(api, dispatched):
    client, question_ids, _ = api

    started = client.post("/assessments/start")
    assert started.status_code == 200
    assert started.json()["created"] is True
    assessment_id = started.json()["assessment"]["assessment_id"]

    again = client.post("/assessments/start").json()
    assert again["created"] is False
    assert again["assessment"]["assessment_id"] == assessment_id

    questions = client.get("/assessments/questions", params={"category": "aptitude"}).json()
    assert len(questions) == 25

    saved = client.put(f"/assessments/{assessment_id}/save", json={
        "responses": _answers(question_ids[:40]),
        "current_step": 41,
        "current_category": "aptitude",
    })
    assert saved.status_code == 200
    assert saved.json()["questions_answered"] == 40
    assert saved.json()["completion_percentage"] == 47

    early = client.post(f"/assessments/{assessment_id}/submit")
    assert early.status_code == 400
    assert early.json()["detail"] == "Please answer all questions. 45 questions remaining."

    unknown = client.put(f"/assessments/{assessment_id}/save", json={"responses": _answers([123456])})
    assert unknown.status_code == 404

    client.put(f"/assessments/{assessment_id}/save", json={"responses": _answers(question_ids[40:])})
    submitted = client.post(f"/assessments/{assessment_id}/submit")
    assert submitted.status_code == 200
    body = submitted.json()
    assert body["status"] == "completed"
    assert body["scores"]["aptitude"]["numerical"] == 60
    assert dispatched == [assessment_id]

    repeat = client.post(f"/assessments/{assessment_id}/submit").json()
    assert repeat["already_completed"] is True
    assert dispatched == [assessment_id]

    locked = client.put(f"/assessments/{assessment_id}/save", json={"responses": _answers(question_ids[:1])})
    assert locked.status_code == 409

    mine = client.get("/assessments/mine").json()
    assert [a["assessment_id"] for a in mine] == [assessment_id]
    assert "responses" not in mine[0]

    assert client.get("/assessments/resume").status_code == 404


def test_analysis_endpoints(api):
    client, question_ids, analysis_client = api
    assessment_id = client.post("/assessments/start").json()["assessment"]["assessment_id"]

    assert client.post(f"/analysis/{assessment_id}/generate").status_code == 409
    assert client.get(f"/analysis/{assessment_id}").status_code == 404

    client.put(f"/assessments/{assessment_id}/save", json={"responses": _answers(question_ids)})
    client.post(f"/assessments/{assessment_id}/submit")

    generated = client.post(f"/analysis/{assessment_id}/generate")
    assert generated.status_code == 200
    assert generated.json()["cached"] is False
    assert generated.json()["source"] == "ai"

    cached = client.post(f"/analysis/{assessment_id}/generate", json={"regenerate": False}).json()
    assert cached["cached"] is True
    assert analysis_client.calls == 1

    stored = client.get(f"/analysis/{assessment_id}").json()
    assert stored["analysis"]["recommendedStream"]["primary"] == "Science (PCM)"

    mine = client.get("/analysis/mine").json()["analyses"]
    assert mine[0]["recommended_stream"] == "Science (PCM)"


def test_abandon_endpoint(api):
    client, _, _ = api
    assessment_id = client.post("/assessments/start").json()["assessment"]["assessment_id"]

    abandoned = client.post(f"/assessments/{assessment_id}/abandon")

    assert abandoned.status_code == 200
    assert abandoned.json()["status"] == "abandoned"
    assert client.post(f"/assessments/{assessment_id}/abandon").status_code == 409
    assert client.post(f"/assessments/{assessment_id}/submit").status_code == 409


def test_chat_endpoints(api):
    client, _, _ = api

    assert client.post("/ai/chat/message", json={"message": " "}).status_code == 400

    reply = client.post("/ai/chat/message", json={"message": "What should I focus on?"})
    assert reply.status_code == 200
    assert reply.json()["message"] == "Focus on mathematics and coding."
    session_id = reply.json()["session_id"]

    assert client.get("/ai/chat/session").json()["session_id"] == session_id
    assert client.post("/ai/chat/message", json={"message": "hi", "session_id": "session_0_missing"}).status_code == 404

    cleared = client.post("/ai/chat/clear").json()
    assert cleared["session_id"] != session_id

    sessions = client.get("/ai/chat/history").json()["sessions"]
    assert {s["session_id"] for s in sessions} == {session_id, cleared["session_id"]}

    suggestions = client.get("/ai/chat/suggestions").json()
    assert suggestions["has_assessment"] is False
    assert suggestions["suggestions"]


def test_opportunity_endpoints(api):
    client, _, _ = api

    missing = client.post("/opportunity", json={"education_level": "Bachelor Degree"})
    assert missing.status_code == 400

    no_status = client.post("/opportunity", json={
        "education_level": "Bachelor Degree",
        "family_income": "2-5 Lakhs",
        "career_interest": "Technical",
        "academic_data": {"currentCGPA": 8.2},
    })
    assert no_status.status_code == 400
    assert no_status.json()["detail"] == "Education status is required"

    created = client.post("/opportunity", json={
        "education_level": "12th Pass",
        "family_income": "Below 2 Lakhs",
        "career_interest": "Technical",
        "academic_data": {"percentage": 88},
    })
    assert created.status_code == 200
    analysis = created.json()["analysis"]
    assert analysis["source"] == "ai"
    assert analysis["confidence_score"] == 82
    assert analysis["recommendations"]["scholarships"][0]["name"] == "INSPIRE SHE"
    analysis_id = analysis["id"]

    history = client.get("/opportunity/history").json()["analyses"]
    assert [h["id"] for h in history] == [analysis_id]

    regenerated = client.post(f"/opportunity/{analysis_id}/regenerate").json()["analysis"]
    assert regenerated["regeneration_count"] == 1
    assert regenerated["source"] == "fallback"

    assert client.delete(f"/opportunity/{analysis_id}").status_code == 200
    assert client.get(f"/opportunity/{analysis_id}").status_code == 404
    assert client.get("/opportunity/history").json()["analyses"] == []
