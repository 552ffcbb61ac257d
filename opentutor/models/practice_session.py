"""
PracticeSession model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from opentutor.models.user import User


class PracticeSession(SQLModel, table=True):
    """PracticeSession table - one practice window and its AI analysis."""
    __tablename__ = "practice_session"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    session_type: str  # SessionType value, e.g. 'jazz_harmony'
    duration_seconds: int = Field(default=1)  # Placeholder until the session is stopped
    score: Optional[int] = Field(default=None)  # 0-100, set once analyzed
    accuracy_percentage: Optional[int] = Field(default=None)  # 0-100, set once analyzed
    notes_played: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    mistakes_count: int = Field(default=0)
    ai_feedback: Optional[str] = Field(default=None)
    ai_suggestions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    harmony_analysis: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    completed: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    # Relationships
    user: "User" = Relationship(back_populates="practice_sessions")
