from fastapi import APIRouter, Depends
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.schemas.cart_schemas import CartAddRequest, CartRemoveRequest, CartUpdateRequest
from karigarverse.services import cart_service
from karigarverse.utils.token import get_current_user

router = APIRouter()


# View Cart

@router.get("")
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"data": cart_service.list_cart(session, current_user.id)}


# Add to Cart

@router.post("")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = cart_service.add_to_cart(session, current_user.id, data.product_id, data.quantity)
    return {"data": item}


# Update Cart

@router.put("")
def update_cart_item(
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = cart_service.set_cart_quantity(session, current_user.id, data.product_id, data.quantity)
    if item is None:
        return {"success": True}
    return {"data": item}


# Remove from Cart

@router.delete("")
def remove_item(
    data: CartRemoveRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart_service.remove_from_cart(session, current_user.id, data.product_id)
    return {"success": True}
