"""
UserProgress model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime


class UserProgress(SQLModel, table=True):
    """UserProgress table - XP and score statistics per (user, skill area)."""
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "skill_area", name="uq_user_progress_user_skill"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    skill_area: str  # SkillArea value, e.g. 'blue_notes'
    level: int = Field(default=1)  # Always xp // 100 + 1
    xp: int = Field(default=0)
    total_sessions: int = Field(default=0)
    scored_sessions: int = Field(default=0)  # Denominator of average_score
    average_score: Optional[float] = Field(default=None)
    best_score: Optional[int] = Field(default=None)
    mastery_percentage: int = Field(default=0)  # min(100, level * 10)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
