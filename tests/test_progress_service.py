import pytest

from opentutor.core.exceptions import NotFoundError, ValidationError
from opentutor.services import progress_service


def test_first_update_creates_record(session, user):
    progress = progress_service.update_progress(
        session, user.id, "blue_notes", xp_gained=50, score=80, session_completed=True
    )
    assert progress.xp == 50
    assert progress.level == 1
    assert progress.total_sessions == 1
    assert progress.average_score == 80
    assert progress.best_score == 80
    assert progress.mastery_percentage == 10


def test_second_update_accumulates(session, user):
    progress_service.update_progress(session, user.id, "blue_notes", xp_gained=50, score=80, session_completed=True)
    progress = progress_service.update_progress(
        session, user.id, "blue_notes", xp_gained=60, score=90, session_completed=True
    )
    assert progress.xp == 110
    assert progress.level == 2
    assert progress.total_sessions == 2
    assert progress.average_score == pytest.approx(85)
    assert progress.best_score == 90
    assert progress.mastery_percentage == 20


def test_lower_score_keeps_best(session, user):
    progress_service.update_progress(session, user.id, "rhythm", xp_gained=10, score=90, session_completed=True)
    progress = progress_service.update_progress(session, user.id, "rhythm", xp_gained=10, score=60, session_completed=True)
    assert progress.best_score == 90
    assert progress.average_score == pytest.approx(75)


def test_update_without_score_leaves_averages(session, user):
    progress_service.update_progress(session, user.id, "rhythm", xp_gained=10, score=80, session_completed=True)
    progress = progress_service.update_progress(session, user.id, "rhythm", xp_gained=0, session_completed=True)
    assert progress.xp == 10
    assert progress.total_sessions == 2
    assert progress.average_score == pytest.approx(80)
    assert progress.best_score == 80


def test_unscored_session_does_not_skew_the_average(session, user):
    # Sessions without a score are not part of the average's denominator
    progress_service.update_progress(session, user.id, "rhythm", xp_gained=10, score=80, session_completed=True)
    progress_service.update_progress(session, user.id, "rhythm", xp_gained=10, session_completed=True)
    progress = progress_service.update_progress(
        session, user.id, "rhythm", xp_gained=10, score=100, session_completed=True
    )
    assert progress.total_sessions == 3
    assert progress.scored_sessions == 2
    assert progress.average_score == pytest.approx(90)


def test_mastery_is_capped(session, user):
    progress = progress_service.update_progress(session, user.id, "improvisation", xp_gained=1500)
    assert progress.level == 16
    assert progress.mastery_percentage == 100
    assert progress.total_sessions == 0


def test_negative_xp_is_rejected(session, user):
    with pytest.raises(ValidationError):
        progress_service.update_progress(session, user.id, "rhythm", xp_gained=-5)
    assert progress_service.get_progress(session, user.id) == []


def test_initialize_is_idempotent(session, user):
    progress_service.update_progress(session, user.id, "sight_reading", xp_gained=30)
    progress = progress_service.initialize_progress(session, user.id, "sight_reading")
    assert progress.xp == 30
    assert progress.level == 1


def test_get_progress(session, user):
    progress_service.initialize_progress(session, user.id, "rhythm")
    progress_service.initialize_progress(session, user.id, "blue_notes")

    records = progress_service.get_progress(session, user.id)
    assert [p.skill_area for p in records] == ["blue_notes", "rhythm"]
    assert progress_service.get_progress(session, user.id, "rhythm").skill_area == "rhythm"
    with pytest.raises(NotFoundError):
        progress_service.get_progress(session, user.id, "improvisation")
