from datetime import date

import pytest

from opentutor.core.exceptions import ConflictError, NotFoundError, UpstreamServiceError, ValidationError
from opentutor.models.models import Achievement
from opentutor.schemas.practice import NoteEvent, PracticeSessionUpdate
from opentutor.services import practice_service, streak_service
from opentutor.services.user_service import sync_user

from tests.conftest import StubFeedbackGenerator

NOTES = [
    NoteEvent(note="C4", time=0.0, velocity=90),
    NoteEvent(note="Eb4", time=0.5, velocity=84),
    NoteEvent(note="G4", time=1.1, velocity=88),
]


@pytest.fixture
def first_steps(session):
    achievement = Achievement(
        name="First Steps", category="practice", requirement={"type": "sessions", "count": 1}, xp_reward=10
    )
    session.add(achievement)
    session.commit()
    return achievement


def test_create_session_uses_placeholders(session, user):
    practice_session = practice_service.create_session(session, user.id, "blue_notes")
    assert practice_session.id is not None
    assert practice_session.duration_seconds == 1
    assert practice_session.score is None
    assert practice_session.notes_played == []
    assert practice_session.completed is False


def test_patch_only_writes_provided_fields(session, user):
    practice_session = practice_service.create_session(session, user.id, "jazz_harmony")
    practice_service.patch_session(
        session, user.id, practice_session.id, PracticeSessionUpdate(score=72, ai_feedback="Solid")
    )

    updated, new_achievements = practice_service.patch_session(
        session, user.id, practice_session.id, PracticeSessionUpdate(duration_seconds=42)
    )
    assert updated.duration_seconds == 42
    assert updated.score == 72
    assert updated.ai_feedback == "Solid"
    assert new_achievements == []


def test_patch_explicit_null_clears_nullable_field(session, user):
    practice_session = practice_service.create_session(session, user.id, "jazz_harmony")
    practice_service.patch_session(session, user.id, practice_session.id, PracticeSessionUpdate(score=72))
    updated, _ = practice_service.patch_session(
        session, user.id, practice_session.id, PracticeSessionUpdate.model_validate({"score": None})
    )
    assert updated.score is None


def test_patch_rejects_null_for_required_field(session, user):
    practice_session = practice_service.create_session(session, user.id, "jazz_harmony")
    with pytest.raises(ValidationError):
        practice_service.patch_session(
            session, user.id, practice_session.id, PracticeSessionUpdate.model_validate({"completed": None})
        )


def test_patch_other_users_session_is_not_found(session, user):
    other, _ = sync_user(session, "uid-other", "other@example.com")
    practice_session = practice_service.create_session(session, other.id, "jazz_harmony")
    with pytest.raises(NotFoundError):
        practice_service.patch_session(session, user.id, practice_session.id, PracticeSessionUpdate(score=10))


def test_completing_updates_streak_and_achievements(session, user, first_steps):
    practice_session = practice_service.create_session(session, user.id, "jazz_harmony")
    updated, new_achievements = practice_service.patch_session(
        session, user.id, practice_session.id,
        PracticeSessionUpdate(score=88, completed=True),
        today=date(2024, 1, 1)
    )
    assert updated.completed is True
    assert [a.name for a in new_achievements] == ["First Steps"]
    assert streak_service.get_streak(session, user.id).last_practice_date == date(2024, 1, 1)


def test_completed_session_is_immutable(session, user, first_steps):
    practice_session = practice_service.create_session(session, user.id, "jazz_harmony")
    practice_service.patch_session(session, user.id, practice_session.id, PracticeSessionUpdate(completed=True))
    with pytest.raises(ConflictError):
        practice_service.patch_session(session, user.id, practice_session.id, PracticeSessionUpdate(score=100))


def test_recent_sessions_newest_first(session, user):
    ids = [practice_service.create_session(session, user.id, "sight_reading").id for _ in range(3)]
    recent = practice_service.recent_sessions(session, user.id, limit=2)
    assert [s.id for s in recent] == list(reversed(ids))[:2]
    with pytest.raises(ValidationError):
        practice_service.recent_sessions(session, user.id, limit=0)


def test_analyze_requires_notes():
    generator = StubFeedbackGenerator()
    with pytest.raises(ValidationError):
        practice_service.analyze_notes(generator, [])
    assert generator.calls == []


def test_analyze_sends_note_names_and_default_context():
    generator = StubFeedbackGenerator()
    feedback, analysis, missing = practice_service.analyze_notes(generator, NOTES, session_type="blue_notes")
    assert generator.calls == [(["C4", "Eb4", "G4"], "Analyzing blue_notes practice")]
    assert analysis.score == 85
    assert analysis.accuracy == 60
    assert analysis.blue_notes == ["Eb4", "Gb4"]
    assert missing == []


def test_complete_session_pipeline(session, user, first_steps):
    practice_session = practice_service.create_session(session, user.id, "blue_notes")
    generator = StubFeedbackGenerator()

    completed, new_achievements, feedback, analysis = practice_service.complete_session(
        session, user.id, practice_session.id, generator, NOTES, duration_seconds=95, today=date(2024, 1, 1)
    )

    assert generator.calls[0][1] == "Practice session: blue_notes"
    assert completed.completed is True
    assert completed.score == 85
    assert completed.accuracy_percentage == 60
    assert completed.duration_seconds == 95
    assert [n["note"] for n in completed.notes_played] == ["C4", "Eb4", "G4"]
    assert completed.ai_feedback == feedback
    assert completed.ai_suggestions == ["Resolve the Gb4 down to F4 on the next beat."]
    assert completed.harmony_analysis["blue_notes"] == ["Eb4", "Gb4"]
    assert [a.name for a in new_achievements] == ["First Steps"]


def test_complete_session_upstream_failure_writes_nothing(session, user, first_steps):
    practice_session = practice_service.create_session(session, user.id, "blue_notes")
    generator = StubFeedbackGenerator(error=UpstreamServiceError("quota exceeded", service="gemini"))

    with pytest.raises(UpstreamServiceError, match="quota exceeded"):
        practice_service.complete_session(session, user.id, practice_session.id, generator, NOTES, 30)

    stored = practice_service.get_user_session(session, user.id, practice_session.id)
    assert stored.completed is False
    assert stored.score is None
    assert streak_service.get_streak(session, user.id) is None


def test_complete_session_twice_conflicts_before_calling_model(session, user, first_steps):
    practice_session = practice_service.create_session(session, user.id, "blue_notes")
    practice_service.complete_session(session, user.id, practice_session.id, StubFeedbackGenerator(), NOTES, 30)

    generator = StubFeedbackGenerator()
    with pytest.raises(ConflictError):
        practice_service.complete_session(session, user.id, practice_session.id, generator, NOTES, 30)
    assert generator.calls == []
