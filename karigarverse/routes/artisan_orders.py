from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.services.order_service import list_artisan_orders
from karigarverse.utils.token import get_current_user

router = APIRouter()


@router.get("")
def get_artisan_orders(
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    orders = list_artisan_orders(session, current_user.id, limit=limit, offset=offset)
    return {"data": orders}
