"""
Artisan onboarding and profile edits.

Request bodies come straight from the onboarding and profile forms, which
post more keys than a profile has. Only the keys in ``PROFILE_FIELDS`` are
ever written; everything else is dropped.
"""
from datetime import datetime
import re
from typing import Any, Callable, Dict, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from karigarverse.errors import ConflictError, InvalidArgumentError, NotFoundError
from karigarverse.models.artisan import ArtisanProfile
from karigarverse.models.user import User
import logging

logger = logging.getLogger(__name__)

# ASCII digits only; int() would accept other scripts
_INTEGER_TEXT = re.compile(r"-?[0-9]+")


def _text(field: str, value: Any):
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be a string")
    return value.strip()


def _required_text(field: str, value: Any):
    value = _text(field, value)
    if not value:
        raise InvalidArgumentError(f"{field} must not be empty")
    return value


def _integer(field: str, value: Any):
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be an integer")
    if isinstance(value, str):
        if not _INTEGER_TEXT.fullmatch(value.strip()):
            raise InvalidArgumentError(f"{field} must be an integer")
        value = int(value)
    if not isinstance(value, int):
        raise InvalidArgumentError(f"{field} must be an integer")
    if value < 0:
        raise InvalidArgumentError(f"{field} must not be negative")
    return value


def _string_list(field: str, value: Any):
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidArgumentError(f"{field} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def _mapping(field: str, value: Any):
    if value is None:
        return None
    if not isinstance(value, dict):
        raise InvalidArgumentError(f"{field} must be an object")
    return value


# request key -> (column, converter)
PROFILE_FIELDS: Dict[str, Tuple[str, Callable[[str, Any], Any]]] = {
    "shop_name": ("shop_name", _required_text),
    "description": ("description", _text),
    "specialties": ("specialties", _string_list),
    "location": ("location", _text),
    "business_license": ("business_license", _text),
    "established_year": ("established_year", _integer),
    "experience_years": ("experience_years", _integer),
    "phone": ("phone", _text),
    "contact_phone": ("phone", _text),
    "email": ("email", _text),
    "contact_email": ("email", _text),
    "website": ("website", _text),
    "website_url": ("website", _text),
    "social_media": ("social_media", _mapping),
    "banner_image": ("banner_image", _text),
    "shop_logo": ("shop_logo", _text),
    "business_hours": ("business_hours", _mapping),
    "return_policy": ("return_policy", _text),
    "shipping_policy": ("shipping_policy", _text),
    "preferred_language": ("preferred_language", _text),
}


def clean_profile_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map allow-listed request keys to typed column values."""
    values = {}
    for key, raw in data.items():
        entry = PROFILE_FIELDS.get(key)
        if entry is None:
            continue
        column, convert = entry
        values[column] = convert(key, raw)
    return values


def get_artisan_profile(session: Session, user_id: int) -> ArtisanProfile:
    profile = session.exec(
        select(ArtisanProfile).where(ArtisanProfile.user_id == user_id)
    ).first()
    if not profile:
        raise NotFoundError("Artisan profile")
    return profile


def get_artisan_profile_by_id(session: Session, artisan_id: int) -> ArtisanProfile:
    profile = session.get(ArtisanProfile, artisan_id)
    if not profile:
        raise NotFoundError("Artisan profile", artisan_id)
    return profile


def create_artisan_profile(session: Session, user: User, data: Dict[str, Any]) -> ArtisanProfile:
    existing = session.exec(
        select(ArtisanProfile.id).where(ArtisanProfile.user_id == user.id)
    ).first()
    if existing is not None:
        raise ConflictError("Artisan profile already exists")

    values = clean_profile_fields(data)
    if "shop_name" not in values:
        raise InvalidArgumentError("shop_name is required")

    profile = ArtisanProfile(user_id=user.id, **values)
    session.add(profile)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("Artisan profile already exists")

    session.refresh(profile)
    logger.info(f"Artisan profile {profile.id} created for user {user.id}")
    return profile


def _apply_update(session: Session, user_id: int, values: Dict[str, Any]) -> int:
    result = session.execute(
        update(ArtisanProfile)
        .where(ArtisanProfile.user_id == user_id)
        .values(**values, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def update_artisan_profile(session: Session, user: User, updates: Dict[str, Any]) -> ArtisanProfile:
    """
    Partial update of the caller's profile.

    When the user has no profile yet a minimal one is created from the
    same values instead of failing, all within one transaction.
    """
    values = clean_profile_fields(updates)

    try:
        if _apply_update(session, user.id, values) == 0:
            insert_values = dict(values)
            insert_values.setdefault(
                "shop_name", f"{user.full_name}'s Shop" if user.full_name else "My Shop"
            )
            session.add(ArtisanProfile(user_id=user.id, **insert_values))
            session.flush()
            logger.info(f"Created artisan profile on update for user {user.id}")
        session.commit()
    except IntegrityError:
        # a concurrent request inserted the profile first
        session.rollback()
        _apply_update(session, user.id, values)
        session.commit()
    except Exception:
        session.rollback()
        raise

    profile = get_artisan_profile(session, user.id)
    session.refresh(profile)
    return profile
