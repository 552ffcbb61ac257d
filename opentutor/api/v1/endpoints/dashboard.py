from fastapi import APIRouter, Depends
from sqlmodel import Session

from opentutor.core.database import get_session
from opentutor.models.models import User
from opentutor.schemas.dashboard import DashboardResponse
from opentutor.services.dashboard_service import get_dashboard
from opentutor.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def read_dashboard(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Stats, recent sessions, progress and achievements for the user."""
    return get_dashboard(session, user)
