"""
User service for business logic related to user operations.

Identity is verified upstream by the external provider; these functions only
map its opaque identifier onto a local user row.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from opentutor.core.database import commit_or_raise
from opentutor.core.exceptions import NotFoundError, ValidationError
from opentutor.models.models import User

logger = logging.getLogger(__name__)


def get_user_by_external_uid(session: Session, external_uid: str) -> Optional[User]:
    return session.exec(select(User).where(User.external_uid == external_uid)).first()


def require_user(session: Session, external_uid: str) -> User:
    """
    Resolve the caller's identifier to a user.

    Raises:
        NotFoundError: If no user has been synced for the identifier
    """
    user = get_user_by_external_uid(session, external_uid)
    if not user:
        raise NotFoundError("User not found")
    return user


def sync_user(
    session: Session,
    external_uid: str,
    email: str,
    display_name: Optional[str] = None
) -> Tuple[User, bool]:
    """
    Create the local user for an external identity, or stamp its last login.

    Two first logins can race to create the same user. A uniqueness violation
    on insert therefore means the other request won: the row is re-fetched
    instead of failing.

    Returns:
        Tuple of (user, created) where created is True if this call inserted it

    Raises:
        ValidationError: If external_uid or email is missing
    """
    if not external_uid or not email:
        raise ValidationError("Missing required fields: external_uid and email are required")

    user = get_user_by_external_uid(session, external_uid)
    if user:
        user.last_login = datetime.utcnow()
        user.updated_at = datetime.utcnow()
        session.add(user)
        commit_or_raise(session, f"update last login for user {user.id}")
        session.refresh(user)
        return user, False

    user = User(external_uid=external_uid, email=email, display_name=display_name)
    try:
        session.add(user)
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info(f"User {external_uid} was created concurrently, re-fetching")
        existing = get_user_by_external_uid(session, external_uid)
        if not existing:
            raise
        return existing, False

    session.refresh(user)
    logger.info(f"Created user {user.id} for external identity {external_uid}")
    return user, True
