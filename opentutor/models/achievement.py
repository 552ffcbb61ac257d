"""
Achievement and UserAchievement models.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON, UniqueConstraint
from typing import Optional
from datetime import datetime


class Achievement(SQLModel, table=True):
    """Achievement table - catalog of unlockable achievements."""
    __tablename__ = "achievement"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    description: Optional[str] = Field(default=None)
    icon: Optional[str] = Field(default=None)
    category: str  # AchievementCategory value
    requirement: dict = Field(default_factory=dict, sa_column=Column(JSON))  # e.g. {"type": "sessions", "count": 5}
    xp_reward: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserAchievement(SQLModel, table=True):
    """UserAchievement table - one row per achievement a user has unlocked."""
    __tablename__ = "user_achievement"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    achievement_id: int = Field(foreign_key="achievement.id")
    unlocked_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    achievement: Achievement = Relationship()
