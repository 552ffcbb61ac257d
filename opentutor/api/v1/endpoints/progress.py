"""
Progress endpoints.
"""
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import Optional

from opentutor.core.database import get_session
from opentutor.models.enums import SkillArea
from opentutor.models.models import User
from opentutor.schemas.progress import (
    InitializeProgressRequest,
    ProgressEnvelope,
    ProgressResponse,
    UpdateProgressRequest,
)
from opentutor.services import progress_service
from opentutor.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("", response_model=ProgressEnvelope)
async def read_progress(
    skill: Optional[SkillArea] = Query(None, description="Only return this skill area"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get the user's progress for one skill area, or all of them."""
    progress = progress_service.get_progress(session, user.id, skill.value if skill else None)
    if isinstance(progress, list):
        return ProgressEnvelope(progress=[ProgressResponse.model_validate(p) for p in progress])
    return ProgressEnvelope(progress=ProgressResponse.model_validate(progress))


@router.post("/update", response_model=ProgressEnvelope)
async def update_progress(
    request: UpdateProgressRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Add XP and optionally a score to a skill area."""
    progress = progress_service.update_progress(
        session,
        user.id,
        request.skill_area.value,
        xp_gained=request.xp_gained,
        score=request.score,
        session_completed=request.session_completed
    )
    return ProgressEnvelope(progress=ProgressResponse.model_validate(progress))


@router.put("", response_model=ProgressEnvelope)
async def initialize_progress(
    request: InitializeProgressRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Create the progress record for a skill area if it does not exist yet."""
    progress = progress_service.initialize_progress(session, user.id, request.skill_area.value)
    return ProgressEnvelope(progress=ProgressResponse.model_validate(progress))
