"""
Progress service - XP, level and score statistics per skill area.

Updates are a single UPDATE statement whose new values are computed from the
stored row, so two sessions completing at the same time cannot lose each
other's XP.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportOptionalOperand=false
# pyright: reportArgumentType=false
import logging
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy import case, func, update
from sqlmodel import Session, select

from opentutor.core.database import commit_or_raise, dialect_insert
from opentutor.core.exceptions import NotFoundError, ValidationError
from opentutor.models.models import UserProgress

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100
MASTERY_PER_LEVEL = 10
MAX_MASTERY = 100


def level_for_xp(xp: int) -> int:
    """Level 1 covers 0-99 XP, level 2 covers 100-199, and so on."""
    return xp // XP_PER_LEVEL + 1


def mastery_for_level(level: int) -> int:
    return min(MAX_MASTERY, level * MASTERY_PER_LEVEL)


def _insert_default_progress(session: Session, user_id: int, skill_area: str) -> None:
    stmt = dialect_insert(session, UserProgress).values(
        user_id=user_id,
        skill_area=skill_area,
        level=1,
        xp=0,
        total_sessions=0,
        scored_sessions=0,
        mastery_percentage=0,
        updated_at=datetime.utcnow(),
    ).on_conflict_do_nothing(index_elements=["user_id", "skill_area"])
    session.execute(stmt)


def _fetch_progress(session: Session, user_id: int, skill_area: str) -> Optional[UserProgress]:
    return session.exec(
        select(UserProgress).where(
            UserProgress.user_id == user_id,
            UserProgress.skill_area == skill_area
        )
    ).first()


def initialize_progress(session: Session, user_id: int, skill_area: str) -> UserProgress:
    """
    Create the progress record for (user, skill area) if it does not exist.

    Idempotent: an existing record is returned untouched.
    """
    _insert_default_progress(session, user_id, skill_area)
    commit_or_raise(session, f"initialize progress for user {user_id}")
    return _fetch_progress(session, user_id, skill_area)


def get_progress(
    session: Session,
    user_id: int,
    skill_area: Optional[str] = None
) -> Union[UserProgress, List[UserProgress]]:
    """
    Get one progress record, or all of a user's records ordered by skill area.

    Raises:
        NotFoundError: If a skill area is given and the user has no record for it
    """
    if skill_area:
        progress = _fetch_progress(session, user_id, skill_area)
        if not progress:
            raise NotFoundError(f"No progress recorded for skill area '{skill_area}'")
        return progress

    return list(session.exec(
        select(UserProgress)
        .where(UserProgress.user_id == user_id)
        .order_by(UserProgress.skill_area)
    ).all())


def update_progress(
    session: Session,
    user_id: int,
    skill_area: str,
    xp_gained: int = 0,
    score: Optional[int] = None,
    session_completed: bool = False
) -> UserProgress:
    """
    Add XP (and optionally a score) to a skill area.

    The record is created lazily with level 1 and 0 XP, then updated:
    - xp = xp + xp_gained
    - level = xp // 100 + 1
    - total_sessions += 1 when session_completed
    - average_score / best_score only change when a score is given
    - mastery = min(100, level * 10)

    Args:
        session: Database session
        user_id: The user ID
        skill_area: SkillArea value
        xp_gained: XP to add (>= 0)
        score: Optional session score (0-100)
        session_completed: Whether this update counts as a finished session

    Returns:
        The updated UserProgress

    Raises:
        ValidationError: If xp_gained is negative or score is out of range
    """
    if xp_gained < 0:
        raise ValidationError("xp_gained must be >= 0")
    if score is not None and not 0 <= score <= 100:
        raise ValidationError("score must be between 0 and 100")

    _insert_default_progress(session, user_id, skill_area)

    new_xp = UserProgress.xp + xp_gained
    new_level = new_xp // XP_PER_LEVEL + 1
    new_mastery = case(
        (new_level * MASTERY_PER_LEVEL > MAX_MASTERY, MAX_MASTERY),
        else_=new_level * MASTERY_PER_LEVEL
    )

    values = {
        "xp": new_xp,
        "level": new_level,
        "total_sessions": UserProgress.total_sessions + (1 if session_completed else 0),
        "mastery_percentage": new_mastery,
        "updated_at": datetime.utcnow(),
    }

    if score is not None:
        new_scored = UserProgress.scored_sessions + 1
        values["scored_sessions"] = new_scored
        values["average_score"] = case(
            (UserProgress.average_score.is_(None), float(score)),
            else_=(UserProgress.average_score * UserProgress.scored_sessions + score) / new_scored
        )
        values["best_score"] = case(
            (func.coalesce(UserProgress.best_score, -1) >= score, UserProgress.best_score),
            else_=score
        )

    session.execute(
        update(UserProgress)
        .where(
            UserProgress.user_id == user_id,
            UserProgress.skill_area == skill_area
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    commit_or_raise(session, f"update progress for user {user_id}")

    progress = _fetch_progress(session, user_id, skill_area)
    logger.info(
        f"Progress updated for user {user_id}, skill {skill_area}: "
        f"xp={progress.xp}, level={progress.level}, sessions={progress.total_sessions}"
    )
    return progress
