from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.services import artisan_service
from karigarverse.utils.token import get_current_user

router = APIRouter()


@router.get("")
def get_my_profile(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"data": artisan_service.get_artisan_profile(session, current_user.id)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_profile(
    data: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    profile = artisan_service.create_artisan_profile(session, current_user, data)
    return {
        "success": True,
        "data": profile,
        "message": "Artisan profile created successfully",
    }


@router.put("")
def update_profile(
    updates: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    profile = artisan_service.update_artisan_profile(session, current_user, updates)
    return {
        "success": True,
        "data": profile,
        "message": "Artisan profile updated successfully",
    }


@router.get("/{artisan_id}")
def get_profile(artisan_id: int, session: Session = Depends(get_session)):
    return {"data": artisan_service.get_artisan_profile_by_id(session, artisan_id)}
