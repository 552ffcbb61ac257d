"""
User model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from opentutor.models.practice_session import PracticeSession


class User(SQLModel, table=True):
    """User table - mirrors an identity held by the external provider."""
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    external_uid: str = Field(unique=True, index=True)  # Opaque identifier from the identity provider
    email: str = Field(index=True)
    display_name: Optional[str] = Field(default=None)
    skill_level: str = Field(default="beginner")  # 'beginner', 'intermediate' or 'advanced'
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = Field(default=None)

    # Relationships
    practice_sessions: List["PracticeSession"] = Relationship(back_populates="user")
