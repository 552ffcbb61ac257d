"""
Dashboard schemas.
"""
from pydantic import BaseModel
from typing import List

from opentutor.schemas.auth import UserResponse
from opentutor.schemas.practice import PracticeSessionResponse
from opentutor.schemas.progress import ProgressResponse
from opentutor.schemas.achievement import UnlockedAchievementResponse


class UserStats(BaseModel):
    total_practice_time: int  # Seconds across completed sessions
    total_sessions: int
    current_streak: int
    achievements_count: int
    overall_progress: int  # Rounded average score of completed sessions


class DashboardResponse(BaseModel):
    user: UserResponse
    stats: UserStats
    recent_sessions: List[PracticeSessionResponse]
    progress_by_skill: List[ProgressResponse]
    achievements: List[UnlockedAchievementResponse]
