"""
Models module - re-exports all table models.

Allows imports like:
    from opentutor.models.models import PracticeSession
"""
from opentutor.models.user import User
from opentutor.models.practice_session import PracticeSession
from opentutor.models.user_progress import UserProgress
from opentutor.models.practice_streak import PracticeStreak
from opentutor.models.achievement import Achievement, UserAchievement

__all__ = [
    'User',
    'PracticeSession',
    'UserProgress',
    'PracticeStreak',
    'Achievement',
    'UserAchievement',
]
