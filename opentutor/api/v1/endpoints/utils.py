"""
Shared dependencies for endpoint operations.
"""
from typing import Optional

from fastapi import Depends, Header, Request
from sqlmodel import Session

from opentutor.core.database import get_session
from opentutor.core.exceptions import AuthenticationError
from opentutor.models.models import User
from opentutor.services.harmony_feedback_service import HarmonyFeedbackGenerator
from opentutor.services.user_service import require_user

USER_UID_HEADER = "X-User-Uid"


def get_current_user(
    x_user_uid: Optional[str] = Header(None, alias=USER_UID_HEADER),
    session: Session = Depends(get_session)
) -> User:
    """
    Resolve the identity asserted by the caller.

    The identifier was verified upstream by the identity provider; it is only
    looked up here, never authenticated.
    """
    if not x_user_uid:
        raise AuthenticationError(f"Unauthorized - no {USER_UID_HEADER} header provided")
    return require_user(session, x_user_uid)


def get_feedback_generator(request: Request) -> HarmonyFeedbackGenerator:
    """The process-wide generator created at startup."""
    return request.app.state.feedback_generator
