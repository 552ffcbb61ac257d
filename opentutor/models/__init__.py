"""
Models package - importing it registers every table with SQLModel.
"""
from opentutor.models.enums import (
    SkillLevel,
    SessionType,
    SkillArea,
    AchievementCategory,
    RequirementType,
)
from opentutor.models.models import (
    User,
    PracticeSession,
    UserProgress,
    PracticeStreak,
    Achievement,
    UserAchievement,
)

__all__ = [
    'SkillLevel',
    'SessionType',
    'SkillArea',
    'AchievementCategory',
    'RequirementType',
    'User',
    'PracticeSession',
    'UserProgress',
    'PracticeStreak',
    'Achievement',
    'UserAchievement',
]
