from fastapi import APIRouter, Depends
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.schemas.user_schemas import UserProfileUpdate
from karigarverse.services import user_service
from karigarverse.utils.token import get_current_user

router = APIRouter()


@router.get("")
def get_my_profile(current_user: User = Depends(get_current_user)):
    return {"data": user_service.profile_response(current_user)}


@router.put("")
def update_my_profile(
    data: UserProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    user = user_service.update_user_profile(session, current_user, data)
    return {"data": user_service.profile_response(user)}


@router.get("/{user_id}")
def get_profile(user_id: int, session: Session = Depends(get_session)):
    user = user_service.get_user_profile(session, user_id)
    return {"data": user_service.public_profile_response(user)}
