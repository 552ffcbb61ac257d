"""
Achievement schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    category: str
    requirement: dict = Field(default_factory=dict)
    xp_reward: int

    class Config:
        from_attributes = True


class UnlockedAchievementResponse(AchievementResponse):
    unlocked_at: datetime


class AchievementCatalogEntry(AchievementResponse):
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None


class AchievementCatalogResponse(BaseModel):
    success: bool = True
    achievements: List[AchievementCatalogEntry]
