"""
PracticeStreak model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date


class PracticeStreak(SQLModel, table=True):
    """PracticeStreak table - consecutive practice days, one row per user."""
    __tablename__ = "practice_streak"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True)
    current_streak: int = Field(default=1)
    longest_streak: int = Field(default=1)
    last_practice_date: Optional[date] = Field(default=None)
