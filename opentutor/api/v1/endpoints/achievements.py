"""
Achievement endpoints.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from opentutor.core.database import get_session
from opentutor.models.models import User
from opentutor.schemas.achievement import AchievementCatalogEntry, AchievementCatalogResponse, AchievementResponse
from opentutor.services import achievement_service
from opentutor.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("", response_model=AchievementCatalogResponse)
async def list_achievements(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """The full catalog, with the user's unlocked ones flagged."""
    unlocked_at = {
        achievement.id: when
        for achievement, when in achievement_service.list_unlocked(session, user.id)
    }
    entries = [
        AchievementCatalogEntry(
            **AchievementResponse.model_validate(achievement).model_dump(),
            unlocked=achievement.id in unlocked_at,
            unlocked_at=unlocked_at.get(achievement.id)
        )
        for achievement in achievement_service.list_catalog(session)
    ]
    return AchievementCatalogResponse(achievements=entries)
