"""
Dashboard service - one call that gathers everything the dashboard shows.
"""
# pyright: reportAttributeAccessIssue=false
import logging

from sqlalchemy import func
from sqlmodel import Session, select

from opentutor.core.config import settings
from opentutor.models.models import PracticeSession, User
from opentutor.schemas.achievement import AchievementResponse, UnlockedAchievementResponse
from opentutor.schemas.auth import UserResponse
from opentutor.schemas.dashboard import DashboardResponse, UserStats
from opentutor.schemas.practice import PracticeSessionResponse
from opentutor.schemas.progress import ProgressResponse
from opentutor.services import achievement_service, practice_service, progress_service, streak_service

logger = logging.getLogger(__name__)


def get_dashboard(session: Session, user: User) -> DashboardResponse:
    total_practice_time, total_sessions, avg_score = session.exec(
        select(
            func.coalesce(func.sum(PracticeSession.duration_seconds), 0),
            func.count(PracticeSession.id),
            func.coalesce(func.avg(PracticeSession.score), 0),
        ).where(
            PracticeSession.user_id == user.id,
            PracticeSession.completed == True  # noqa: E712
        )
    ).one()

    recent = practice_service.recent_sessions(session, user.id, settings.dashboard_recent_sessions)
    progress = progress_service.get_progress(session, user.id)
    unlocked = achievement_service.list_unlocked(session, user.id)
    streak = streak_service.get_streak(session, user.id)

    stats = UserStats(
        total_practice_time=int(total_practice_time),
        total_sessions=total_sessions,
        current_streak=streak.current_streak if streak else 0,
        achievements_count=len(unlocked),
        overall_progress=round(float(avg_score)),
    )

    return DashboardResponse(
        user=UserResponse.model_validate(user),
        stats=stats,
        recent_sessions=[PracticeSessionResponse.model_validate(s) for s in recent],
        progress_by_skill=[ProgressResponse.model_validate(p) for p in progress],
        achievements=[
            UnlockedAchievementResponse(
                **AchievementResponse.model_validate(achievement).model_dump(),
                unlocked_at=unlocked_at
            )
            for achievement, unlocked_at in unlocked
        ],
    )

