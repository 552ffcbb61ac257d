"""
Achievement service - catalog, unlock bookkeeping and evaluation.

An unlock is keyed by the unique pair (user, achievement) and inserted with
ON CONFLICT DO NOTHING, so evaluating an already satisfied requirement again
is a no-op.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
import logging
from datetime import datetime
from typing import Any, Dict, List, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from opentutor.core.database import commit_or_raise, dialect_insert
from opentutor.models.enums import AchievementCategory, RequirementType
from opentutor.models.models import Achievement, UserAchievement, PracticeSession, PracticeStreak

logger = logging.getLogger(__name__)


DEFAULT_ACHIEVEMENTS: List[Dict[str, Any]] = [
    {
        "name": "First Steps",
        "description": "Complete your first practice session",
        "icon": "music",
        "category": AchievementCategory.PRACTICE.value,
        "requirement": {"type": RequirementType.SESSIONS.value, "count": 1},
        "xp_reward": 10,
    },
    {
        "name": "Getting Into The Groove",
        "description": "Complete 5 practice sessions",
        "icon": "metronome",
        "category": AchievementCategory.PRACTICE.value,
        "requirement": {"type": RequirementType.SESSIONS.value, "count": 5},
        "xp_reward": 50,
    },
    {
        "name": "Woodshedder",
        "description": "Complete 25 practice sessions",
        "icon": "piano",
        "category": AchievementCategory.PRACTICE.value,
        "requirement": {"type": RequirementType.SESSIONS.value, "count": 25},
        "xp_reward": 200,
    },
    {
        "name": "Sweet Spot",
        "description": "Score 90 or more in a session",
        "icon": "star",
        "category": AchievementCategory.MASTERY.value,
        "requirement": {"type": RequirementType.SCORE.value, "count": 90},
        "xp_reward": 75,
    },
    {
        "name": "Three In A Row",
        "description": "Practice three days in a row",
        "icon": "flame",
        "category": AchievementCategory.STREAK.value,
        "requirement": {"type": RequirementType.STREAK.value, "count": 3},
        "xp_reward": 30,
    },
    {
        "name": "Week Of Blues",
        "description": "Practice seven days in a row",
        "icon": "calendar",
        "category": AchievementCategory.STREAK.value,
        "requirement": {"type": RequirementType.STREAK.value, "count": 7},
        "xp_reward": 100,
    },
]


def seed_default_achievements(session: Session) -> int:
    """Insert the default catalog when no achievements exist. Returns rows added."""
    existing = session.exec(select(func.count(Achievement.id))).one()
    if existing:
        return 0

    for definition in DEFAULT_ACHIEVEMENTS:
        session.add(Achievement(**definition))
    commit_or_raise(session, "seed achievements")
    logger.info(f"Seeded {len(DEFAULT_ACHIEVEMENTS)} default achievements")
    return len(DEFAULT_ACHIEVEMENTS)


def list_catalog(session: Session) -> List[Achievement]:
    """All achievements, ordered by category then reward ascending."""
    return list(session.exec(
        select(Achievement).order_by(Achievement.category, Achievement.xp_reward, Achievement.id)
    ).all())


def list_unlocked(session: Session, user_id: int) -> List[Tuple[Achievement, datetime]]:
    """Achievements the user has unlocked with their unlock time, newest first."""
    rows = session.exec(
        select(Achievement, UserAchievement.unlocked_at)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at.desc(), UserAchievement.id.desc())
    ).all()
    return [(achievement, unlocked_at) for achievement, unlocked_at in rows]


def get_user_stats(session: Session, user_id: int) -> Dict[str, int]:
    """Statistics that achievement requirements are evaluated against."""
    completed_sessions = session.exec(
        select(func.count(PracticeSession.id)).where(
            PracticeSession.user_id == user_id,
            PracticeSession.completed == True  # noqa: E712
        )
    ).one()
    best_score = session.exec(
        select(func.max(PracticeSession.score)).where(
            PracticeSession.user_id == user_id,
            PracticeSession.completed == True  # noqa: E712
        )
    ).one()
    longest_streak = session.exec(
        select(PracticeStreak.longest_streak).where(PracticeStreak.user_id == user_id)
    ).first()

    return {
        RequirementType.SESSIONS.value: completed_sessions or 0,
        RequirementType.SCORE.value: best_score or 0,
        RequirementType.STREAK.value: longest_streak or 0,
    }


def requirement_met(requirement: Dict[str, Any], stats: Dict[str, int]) -> bool:
    """
    Check a requirement predicate such as {"type": "sessions", "count": 5}.

    Unknown types and malformed counts never unlock.
    """
    req_type = (requirement or {}).get("type")
    count = (requirement or {}).get("count")
    if req_type not in stats:
        logger.warning(f"Unknown achievement requirement type: {req_type}")
        return False
    if not isinstance(count, int) or isinstance(count, bool):
        logger.warning(f"Achievement requirement has invalid count: {requirement}")
        return False
    return stats[req_type] >= count


def unlock(session: Session, user_id: int, achievement_id: int) -> bool:
    """
    Unlock an achievement for a user.

    Returns True only if this call created the unlock; False if it already
    existed. The caller commits.
    """
    stmt = dialect_insert(session, UserAchievement).values(
        user_id=user_id,
        achievement_id=achievement_id,
        unlocked_at=datetime.utcnow(),
    ).on_conflict_do_nothing(index_elements=["user_id", "achievement_id"])
    result = session.execute(stmt)
    return result.rowcount == 1


def evaluate(session: Session, user_id: int) -> List[Achievement]:
    """
    Unlock every achievement whose requirement the user now satisfies.

    Returns:
        Only the achievements unlocked by this call; ones unlocked earlier are
        excluded even though they are still satisfied
    """
    stats = get_user_stats(session, user_id)
    catalog = list_catalog(session)

    newly_unlocked: List[Achievement] = []
    for achievement in catalog:
        if requirement_met(achievement.requirement, stats) and unlock(session, user_id, achievement.id):
            newly_unlocked.append(achievement)

    commit_or_raise(session, f"unlock achievements for user {user_id}")

    if newly_unlocked:
        logger.info(
            f"User {user_id} unlocked achievements: {[a.name for a in newly_unlocked]}"
        )
    return newly_unlocked
