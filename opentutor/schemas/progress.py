"""
Progress and streak schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import date, datetime

from opentutor.models.enums import SkillArea


class UpdateProgressRequest(BaseModel):
    """Request to add XP (and optionally a score) to one skill area."""
    skill_area: SkillArea
    xp_gained: int = Field(0, ge=0, description="XP to add; XP never decreases")
    score: Optional[int] = Field(None, ge=0, le=100)
    session_completed: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "skill_area": "blue_notes",
                "xp_gained": 50,
                "score": 80,
                "session_completed": True
            }
        }


class InitializeProgressRequest(BaseModel):
    skill_area: SkillArea


class ProgressResponse(BaseModel):
    id: int
    user_id: int
    skill_area: str
    level: int
    xp: int
    total_sessions: int
    scored_sessions: int
    average_score: Optional[float] = None
    best_score: Optional[int] = None
    mastery_percentage: int
    updated_at: datetime

    class Config:
        from_attributes = True


class ProgressEnvelope(BaseModel):
    success: bool = True
    progress: Union[ProgressResponse, List[ProgressResponse]]


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_practice_date: Optional[date] = None

    class Config:
        from_attributes = True
