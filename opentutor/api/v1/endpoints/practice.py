"""
Practice session endpoints.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional

from opentutor.core.config import settings
from opentutor.core.database import get_session
from opentutor.models.models import Achievement, User
from opentutor.schemas.achievement import AchievementResponse
from opentutor.schemas.practice import (
    AnalyzeRequest,
    AnalyzeResponse,
    CompleteSessionRequest,
    CompleteSessionResponse,
    CreateSessionRequest,
    PracticeSessionResponse,
    PracticeSessionUpdate,
    SessionListResponse,
    SessionResponse,
)
from opentutor.services import practice_service
from opentutor.api.v1.endpoints.utils import get_current_user, get_feedback_generator

router = APIRouter(prefix="/practice", tags=["practice"])


def _achievements_or_none(achievements: List[Achievement]) -> Optional[List[AchievementResponse]]:
    if not achievements:
        return None
    return [AchievementResponse.model_validate(a) for a in achievements]


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(
    limit: int = Query(settings.recent_sessions_default_limit, ge=1, le=practice_service.MAX_RECENT_SESSIONS),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """List the user's most recent practice sessions, newest first."""
    sessions = practice_service.recent_sessions(session, user.id, limit)
    return SessionListResponse(
        sessions=[PracticeSessionResponse.model_validate(s) for s in sessions]
    )


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: CreateSessionRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Start a new practice session."""
    practice_session = practice_service.create_session(session, user.id, request.session_type.value)
    return SessionResponse(session=PracticeSessionResponse.model_validate(practice_session))


@router.patch("/sessions/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: int,
    changes: PracticeSessionUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """
    Partially update a session.

    Only the fields present in the body are written. Setting completed=true
    also updates the practice streak and returns any newly unlocked
    achievements.
    """
    practice_session, new_achievements = practice_service.patch_session(
        session, user.id, session_id, changes
    )
    return SessionResponse(
        session=PracticeSessionResponse.model_validate(practice_session),
        new_achievements=_achievements_or_none(new_achievements)
    )


@router.post("/sessions/{session_id}/complete", response_model=CompleteSessionResponse)
def complete_session(
    session_id: int,
    request: CompleteSessionRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    generator=Depends(get_feedback_generator)
):
    """
    Stop a session: analyze the recorded notes with AI, store the result,
    update the streak and unlock achievements.
    """
    practice_session, new_achievements, feedback, analysis = practice_service.complete_session(
        session,
        user.id,
        session_id,
        generator,
        notes=request.notes,
        duration_seconds=request.duration_seconds,
        context=request.context
    )
    return CompleteSessionResponse(
        session=PracticeSessionResponse.model_validate(practice_session),
        new_achievements=_achievements_or_none(new_achievements),
        feedback=feedback,
        analysis=analysis
    )


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze(
    request: AnalyzeRequest,
    user: User = Depends(get_current_user),
    generator=Depends(get_feedback_generator)
):
    """Analyze notes with AI without storing anything."""
    feedback, analysis, missing = practice_service.analyze_notes(
        generator,
        request.notes,
        context=request.context,
        session_type=request.session_type.value if request.session_type else None
    )
    return AnalyzeResponse(feedback=feedback, analysis=analysis, missing_fields=missing)
