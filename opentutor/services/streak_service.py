"""
Streak service - consecutive calendar days with a completed session.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import case
from sqlmodel import Session, select

from opentutor.core.database import commit_or_raise, dialect_insert
from opentutor.models.models import PracticeStreak

logger = logging.getLogger(__name__)


def get_streak(session: Session, user_id: int) -> Optional[PracticeStreak]:
    return session.exec(
        select(PracticeStreak).where(PracticeStreak.user_id == user_id)
    ).first()


def touch_streak(session: Session, user_id: int, today: Optional[date] = None) -> PracticeStreak:
    """
    Record a practice day for the user.

    - No record yet: current = longest = 1
    - Last practice was yesterday: current + 1
    - Last practice was today: unchanged
    - Any older date: current resets to 1
    - longest = max(longest, new current)

    Runs as a single INSERT ... ON CONFLICT DO UPDATE whose new values are
    computed from the stored row, so concurrent completions never compute
    from a stale current streak.

    Args:
        session: Database session
        user_id: The user ID
        today: Calendar day of the practice (UTC today if not given)

    Returns:
        The updated PracticeStreak
    """
    today = today or datetime.utcnow().date()
    yesterday = today - timedelta(days=1)

    new_current = case(
        (PracticeStreak.last_practice_date == yesterday, PracticeStreak.current_streak + 1),
        (PracticeStreak.last_practice_date == today, PracticeStreak.current_streak),
        else_=1
    )
    new_longest = case(
        (new_current > PracticeStreak.longest_streak, new_current),
        else_=PracticeStreak.longest_streak
    )

    stmt = dialect_insert(session, PracticeStreak).values(
        user_id=user_id,
        current_streak=1,
        longest_streak=1,
        last_practice_date=today,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={
            "current_streak": new_current,
            "longest_streak": new_longest,
            "last_practice_date": today,
        }
    )
    session.execute(stmt)
    commit_or_raise(session, f"update practice streak for user {user_id}")

    streak = get_streak(session, user_id)
    logger.info(
        f"Streak for user {user_id} on {today}: current={streak.current_streak}, longest={streak.longest_streak}"
    )
    return streak
