import os
# Override DATABASE_URL before any signal_engine imports; the app engine is only
# touched by the API lifespan, tests use their own in-memory engine below.
os.environ["DATABASE_URL"] = "sqlite:///./test_signal_engine.db"
# Keep external integrations disabled by default for unit/API tests. Individual
# tests can opt-in by monkeypatching settings.
os.environ["MVP_DISABLE_CELERY"] = "true"
os.environ["MVP_DISABLE_EMBEDDINGS"] = "true"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ["CLAUDE_MODEL"] = "claude-3-5-haiku-latest"

import json
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from signal_engine import models  # noqa: F401
from signal_engine.components.video_evaluation.pipeline import VideoEvaluationPipeline
from signal_engine.components.video_evaluation.rubric_loader import seed_default_rubric
from signal_engine.models.video_assessment import VideoAssessment, VideoAssessmentStatus
from signal_engine.platform.database import Base
from signal_engine.shared.background import drain_detached_tasks
from signal_engine.shared.retry import RetryPolicy

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_engine():
    return create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
async def session_factory():
    engine = make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    yield factory
    await drain_detached_tasks()
    await engine.dispose()


@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def seeded_db(db):
    await seed_default_rubric(db)
    return db


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeVideoModel:
    """Stands in for GeminiVideoEvaluator; replays queued responses or errors."""

    def __init__(self, *responses, model="fake-video-model"):
        self.model = model
        self.responses = list(responses)
        self.calls = []

    async def generate(self, video_url, prompt):
        self.calls.append(SimpleNamespace(video_url=video_url, prompt=prompt))
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item


async def _no_sleep(_delay):
    return None


def make_pipeline(session_factory, model_client, **overrides):
    embedding_calls = overrides.pop("embedding_calls", None)

    async def fake_embeddings(video_assessment_id):
        if embedding_calls is not None:
            embedding_calls.append(video_assessment_id)
        return {"success": True, "error": None}

    kwargs = dict(
        session_factory=session_factory,
        model_client=model_client,
        embedding_generator=fake_embeddings,
        retry_policy=RetryPolicy(max_attempts=3, base_delay_seconds=1.0, max_delay_seconds=30.0),
        sleep=_no_sleep,
        max_retries=3,
        default_role_family_slug="engineering",
        embeddings_enabled=True,
    )
    kwargs.update(overrides)
    return VideoEvaluationPipeline(**kwargs)


async def create_video_assessment(db, **fields):
    values = dict(
        assessment_id="asmt-1",
        candidate_id="cand-1",
        video_url="https://storage.example.com/recordings/asmt-1.mp4",
        status=VideoAssessmentStatus.PENDING,
        retry_count=0,
    )
    values.update(fields)
    row = VideoAssessment(**values)
    db.add(row)
    await db.commit()
    return row


def valid_evaluation_response(**overrides):
    """A v3-shaped model response covering scored, null-scored and red-flag fields."""
    payload = {
        "evaluation_version": "3.0.0",
        "role_family_slug": "engineering",
        "overall_score": 3.2,
        "dimension_scores": {
            "communication": {
                "score": 3,
                "confidence": "high",
                "rationale": "Explained the retry design before coding.",
                "observable_behaviors": [
                    {"timestamp": "02:15", "behavior": "Walked the reviewer through the queue design"},
                    {"timestamp": "14:40", "behavior": "Asked which error codes are retryable"},
                ],
                "trainable_gap": False,
            },
            "technical_execution": {
                "score": 4,
                "observable_behaviors": [{"timestamp": "1:05:10", "behavior": "Added a failing test first"}],
            },
            "learning_velocity": {
                "score": None,
                "rationale": "Not enough unfamiliar material in the session.",
            },
        },
        "detected_red_flags": [{"slug": "no_verification", "evidence": "Never ran the suite", "timestamps": ["40:00"]}],
        "overall_summary": "Solid, methodical engineer with clear explanations.",
    }
    payload.update(overrides)
    return json.dumps(payload)


# ---------------------------------------------------------------------------
# API client (file-backed SQLite created by the app lifespan)
# ---------------------------------------------------------------------------

async def _drop_app_tables():
    from signal_engine.platform.database import async_engine

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture()
def video_model():
    return FakeVideoModel(valid_evaluation_response())


@pytest.fixture()
def client(video_model):
    from fastapi.testclient import TestClient

    from signal_engine.domains.video_assessments.routes import get_evaluation_pipeline
    from signal_engine.main import app
    from signal_engine.platform.database import async_session_maker

    app.dependency_overrides[get_evaluation_pipeline] = lambda: make_pipeline(async_session_maker, video_model)
    with TestClient(app) as test_client:
        yield test_client
        test_client.portal.call(drain_detached_tasks)
        test_client.portal.call(_drop_app_tables)
    app.dependency_overrides.clear()


def wait_for_background(client):
    """Block until evaluations started by the last request have finished."""
    client.portal.call(drain_detached_tasks)
