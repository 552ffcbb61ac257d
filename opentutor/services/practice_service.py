"""
Practice session service - the session store and the analysis pipeline.

Pipeline on stop: notes -> harmony feedback generator -> feedback parser ->
session patch (marks it complete) -> streak -> achievements.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlmodel import Session, select

from opentutor.core.database import commit_or_raise
from opentutor.core.exceptions import ConflictError, NotFoundError, ValidationError
from opentutor.models.models import Achievement, PracticeSession
from opentutor.schemas.practice import HarmonyAnalysis, NoteEvent, PracticeSessionUpdate
from opentutor.services import achievement_service, streak_service
from opentutor.services.feedback_parser import parse_harmony_feedback

logger = logging.getLogger(__name__)

MAX_RECENT_SESSIONS = 100

# Columns that cannot be set to NULL through a patch
NON_NULLABLE_FIELDS = {
    "duration_seconds",
    "notes_played",
    "mistakes_count",
    "ai_suggestions",
    "completed",
}


def create_session(session: Session, user_id: int, session_type: str) -> PracticeSession:
    """Start a session with placeholder values; it is filled in when stopped."""
    practice_session = PracticeSession(user_id=user_id, session_type=session_type)
    session.add(practice_session)
    commit_or_raise(session, f"create practice session for user {user_id}")
    session.refresh(practice_session)
    logger.info(f"Started {session_type} session {practice_session.id} for user {user_id}")
    return practice_session


def get_user_session(session: Session, user_id: int, session_id: int) -> PracticeSession:
    """
    Get a session owned by the user.

    Raises:
        NotFoundError: If the session does not exist or belongs to someone else
    """
    practice_session = session.get(PracticeSession, session_id)
    if not practice_session or practice_session.user_id != user_id:
        raise NotFoundError(f"Practice session with id {session_id} not found")
    return practice_session


def recent_sessions(session: Session, user_id: int, limit: int = 10) -> List[PracticeSession]:
    """The user's sessions, newest first."""
    if limit < 1 or limit > MAX_RECENT_SESSIONS:
        raise ValidationError(f"limit must be between 1 and {MAX_RECENT_SESSIONS}")
    return list(session.exec(
        select(PracticeSession)
        .where(PracticeSession.user_id == user_id)
        .order_by(PracticeSession.created_at.desc(), PracticeSession.id.desc())
        .limit(limit)
    ).all())


def _update_values(changes: PracticeSessionUpdate) -> dict:
    """Column values for the fields explicitly set in the patch."""
    values = changes.model_dump(exclude_unset=True)
    for field, value in values.items():
        if value is None and field in NON_NULLABLE_FIELDS:
            raise ValidationError(f"{field} cannot be null")
    # Nested models are dumped to plain dicts already; notes keep their order
    if values.get("notes_played") is not None:
        values["notes_played"] = [
            {k: v for k, v in note.items() if v is not None}
            for note in values["notes_played"]
        ]
    return values


def patch_session(
    session: Session,
    user_id: int,
    session_id: int,
    changes: PracticeSessionUpdate,
    today: Optional[date] = None
) -> Tuple[PracticeSession, List[Achievement]]:
    """
    Apply a partial update to an incomplete session.

    Omitted fields keep their stored value. The update only matches a row that
    is still incomplete, so a completed session stays immutable even when two
    requests race to complete it. Completing the session touches the streak
    and evaluates achievements.

    Returns:
        Tuple of (updated session, achievements newly unlocked by this call)

    Raises:
        NotFoundError: If the session does not belong to the user
        ConflictError: If the session is already completed
        ValidationError: If a non-nullable field is set to null
    """
    practice_session = get_user_session(session, user_id, session_id)
    values = _update_values(changes)

    if not values:
        if practice_session.completed:
            raise ConflictError(f"Practice session {session_id} is already completed")
        return practice_session, []

    result = session.execute(
        update(PracticeSession)
        .where(
            PracticeSession.id == session_id,
            PracticeSession.user_id == user_id,
            PracticeSession.completed == False  # noqa: E712
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        session.rollback()
        raise ConflictError(f"Practice session {session_id} is already completed")
    commit_or_raise(session, f"update practice session {session_id}")

    practice_session = session.get(PracticeSession, session_id)

    new_achievements: List[Achievement] = []
    if values.get("completed"):
        logger.info(f"Session {session_id} completed by user {user_id} (score={practice_session.score})")
        streak_service.touch_streak(session, user_id, today)
        new_achievements = achievement_service.evaluate(session, user_id)

    return practice_session, new_achievements


def analyze_notes(
    generator,
    notes: List[NoteEvent],
    context: Optional[str] = None,
    session_type: Optional[str] = None
) -> Tuple[str, HarmonyAnalysis, List[str]]:
    """
    Get AI feedback for recorded notes and parse it.

    Args:
        generator: Object with generate(note_names, context) -> str
        notes: Recorded notes in playing order
        context: Optional free-text context for the model
        session_type: Used to build a default context

    Returns:
        Tuple of (feedback text, parsed analysis, fields missing from the feedback)

    Raises:
        ValidationError: If no notes were given (nothing is sent upstream)
        UpstreamServiceError: If the generator fails
    """
    if not notes:
        raise ValidationError("Notes array is required")

    note_names = [note.note for note in notes]
    context_info = context or f"Analyzing {session_type or 'jazz harmony'} practice"

    feedback = generator.generate(note_names, context_info)
    analysis, missing = parse_harmony_feedback(feedback, notes)
    return feedback, analysis, missing


def complete_session(
    session: Session,
    user_id: int,
    session_id: int,
    generator,
    notes: List[NoteEvent],
    duration_seconds: int,
    context: Optional[str] = None,
    today: Optional[date] = None
) -> Tuple[PracticeSession, List[Achievement], str, HarmonyAnalysis]:
    """
    Stop a session: analyze its notes and persist the result.

    The session is checked before the model is called, and nothing is written
    if the model call fails.

    Returns:
        Tuple of (completed session, newly unlocked achievements, feedback, analysis)
    """
    practice_session = get_user_session(session, user_id, session_id)
    if practice_session.completed:
        raise ConflictError(f"Practice session {session_id} is already completed")

    feedback, analysis, _ = analyze_notes(
        generator,
        notes,
        context=context or f"Practice session: {practice_session.session_type}",
        session_type=practice_session.session_type
    )

    changes = PracticeSessionUpdate(
        duration_seconds=duration_seconds,
        notes_played=notes,
        score=analysis.score,
        accuracy_percentage=analysis.accuracy,
        ai_feedback=feedback,
        ai_suggestions=analysis.suggestions,
        harmony_analysis=analysis,
        completed=True,
    )
    practice_session, new_achievements = patch_session(session, user_id, session_id, changes, today)
    return practice_session, new_achievements, feedback, analysis
