from datetime import datetime

from sqlmodel import Session

from karigarverse.errors import NotFoundError
from karigarverse.models.user import User
from karigarverse.schemas.user_schemas import UserProfileUpdate
import logging

logger = logging.getLogger(__name__)


def profile_response(user: User) -> dict:
    """Public view of a user; never includes the password hash."""
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "full_name": user.full_name,
        "phone": user.phone,
        "avatar_url": user.avatar_url,
        "date_of_birth": user.date_of_birth,
        "address": user.address,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def get_user_profile(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("Profile", user_id)
    return user


def update_user_profile(session: Session, user: User, data: UserProfileUpdate) -> User:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = datetime.utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Profile of user {user.id} updated: {sorted(changes)}")
    return user


def public_profile_response(user: User) -> dict:
    """What anyone may see about another user: name and avatar."""
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
        "created_at": user.created_at,
    }
