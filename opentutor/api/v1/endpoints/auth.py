from fastapi import APIRouter, Depends
from sqlmodel import Session

from opentutor.core.database import get_session
from opentutor.schemas.auth import SyncUserRequest, SyncUserResponse, UserResponse
from opentutor.services.user_service import sync_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sync-user", response_model=SyncUserResponse)
async def sync_user_endpoint(
    sync_data: SyncUserRequest,
    session: Session = Depends(get_session)
):
    """Create or refresh the local user for an identity verified upstream."""
    user, created = sync_user(
        session,
        external_uid=sync_data.external_uid,
        email=sync_data.email,
        display_name=sync_data.display_name
    )
    return SyncUserResponse(user=UserResponse.model_validate(user), created=created)
