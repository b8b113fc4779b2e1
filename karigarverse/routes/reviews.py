from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.schemas.review_schemas import ReviewCreate
from karigarverse.services import review_service
from karigarverse.utils.token import get_current_user

router = APIRouter()


@router.get("/{product_id}")
def list_reviews(
    product_id: int,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    session: Session = Depends(get_session),
):
    reviews = review_service.list_product_reviews(session, product_id, limit=limit, offset=offset)
    return {"data": reviews}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(
    data: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"data": review_service.create_review(session, current_user.id, data)}
