from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.schemas.order_schemas import OrderCreate
from karigarverse.services import order_service
from karigarverse.utils.token import get_current_user

router = APIRouter()


@router.get("")
def list_my_orders(
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    orders = order_service.list_orders(session, current_user.id, limit=limit, offset=offset)
    return {"data": orders}


@router.post("")
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = order_service.place_order(session, current_user.id, payload)
    return {"data": order}


# public: no bearer token required
@router.get("/detail/{order_id}")
def get_order_detail(order_id: int, session: Session = Depends(get_session)):
    return {"data": order_service.get_order_detail(session, order_id)}


@router.post("/{order_id}/cancel")
def cancel_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = order_service.cancel_order(session, current_user.id, order_id)
    return {"data": order}
