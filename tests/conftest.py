import os

# Settings refuse to load without a database URL
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from opentutor import models  # noqa: F401
from opentutor.core.database import build_engine, get_session
from opentutor.main import app
from opentutor.api.v1.endpoints.utils import get_feedback_generator
from opentutor.services.achievement_service import seed_default_achievements
from opentutor.services.user_service import sync_user

DEFAULT_FEEDBACK = (
    "Nice use of the flat third against the C7 sound, it gives the line a bluesy edge.\n"
    "Watch the Gb4 on the way down, it clashes with the chord tone.\n"
    "SCORE: 85\n"
    "ACCURACY: 60\n"
    "BLUE_NOTES: Eb4, Gb4\n"
    "CHORDS: C7\n"
    "SUGGESTION: Resolve the Gb4 down to F4 on the next beat.\n"
)


class StubFeedbackGenerator:
    """Fixed-output stand-in for the Gemini generator."""

    def __init__(self, text=DEFAULT_FEEDBACK, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate(self, note_names, context):
        self.calls.append((list(note_names), context))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(session):
    user, _ = sync_user(session, "uid-student", "student@example.com", "Student")
    return user


@pytest.fixture
def feedback_generator():
    return StubFeedbackGenerator()


@pytest.fixture
def client(engine, feedback_generator):
    def override_get_session():
        with Session(engine) as session:
            yield session

    with Session(engine) as seed_session:
        seed_default_achievements(seed_session)

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_feedback_generator] = lambda: feedback_generator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    response = client.post(
        "/api/v1/auth/sync-user",
        json={"external_uid": "uid-api", "email": "api@example.com", "display_name": "Api"}
    )
    assert response.status_code == 200
    return {"X-User-Uid": "uid-api"}
