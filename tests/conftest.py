import os
import sys
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_DEFAULT_DB_DIR = tempfile.mkdtemp(prefix="career-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DEFAULT_DB_DIR}/default.db")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("SENDGRID_API_KEY", "")

from app.db.base import Base  # noqa: E402
from app import models  # noqa: E402,F401
from app.core.exceptions import RateLimitedError  # noqa: E402
from app.models import Question, User  # noqa: E402
from app.services.assessment_engine.progress import CATEGORY_QUOTAS  # noqa: E402
from app.services.assessment_engine.scoring import SCORE_KEYS  # noqa: E402

CATEGORY_SCORING = {
    "interest": "riasec",
    "aptitude": "aptitude",
    "personality": "big_five",
    "academic": "academic",
}


class FakeAIClient:
    """Scripted stand-in for GenerativeAIClient; each outcome is a reply or an exception"""

    model = "fake-model"

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.prompts = []
        self.chats = []

    def _next(self):
        if not self.outcomes:
            raise AssertionError("FakeAIClient called more times than scripted")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def calls(self):
        return len(self.prompts) + len(self.chats)

    async def generate(self, prompt):
        self.prompts.append(prompt)
        return self._next()

    async def chat(self, messages):
        self.chats.append(messages)
        return self._next()


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def rate_limited(n=1):
    return [RateLimitedError("429 Too Many Requests") for _ in range(n)]


def build_question_bank():
    """85 questions honouring the category quotas, scoring keys assigned round-robin"""
    questions = []
    order = 1
    for category, quota in CATEGORY_QUOTAS.items():
        scoring_type = CATEGORY_SCORING[category]
        keys = SCORE_KEYS[category]
        for i in range(quota):
            questions.append(Question(
                question_text=f"{category} question {i + 1}",
                category=category,
                question_type="rating_scale",
                options=[{"text": str(v), "value": v, "score": v * 20} for v in range(1, 6)],
                scoring_type=scoring_type,
                scoring_key=keys[i % len(keys)],
                max_score=100,
                order=order,
                is_active=True,
            ))
            order += 1
    return questions


def all_answers(questions, score=60):
    return [{"question_id": q.question_id, "answer": "4", "score": score} for q in questions]


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def engine(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def user(db):
    student = User(
        name="Asha",
        email="asha@example.com",
        current_grade="10th",
        age=15,
        stream=None,
        subjects=["Mathematics", "Science"],
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


@pytest_asyncio.fixture
async def other_user(db):
    student = User(name="Ravi", email="ravi@example.com")
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


@pytest_asyncio.fixture
async def questions(db):
    bank = build_question_bank()
    db.add_all(bank)
    await db.commit()
    for question in bank:
        await db.refresh(question)
    return bank


@pytest.fixture(autouse=True)
def dispatched(monkeypatch):
    """Captures completion side-effect dispatches instead of enqueueing Celery tasks"""
    calls = []
    monkeypatch.setattr(
        "app.services.assessment_service.dispatch_completion_side_effects",
        lambda assessment_id: calls.append(assessment_id) or True,
    )
    return calls


@pytest.fixture
def fake_sleep():
    return RecordingSleep()
