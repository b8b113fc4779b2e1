from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.models.user import User
from karigarverse.schemas.product_schemas import ProductCreate, ProductUpdate
from karigarverse.services import product_service
from karigarverse.utils.token import get_current_user

router = APIRouter()


@router.get("")
def list_products(
    category: Optional[str] = None,
    artisan_id: Optional[int] = None,
    is_featured: Optional[bool] = None,
    is_active: Optional[bool] = True,
    search: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    session: Session = Depends(get_session),
):
    products = product_service.list_products(
        session,
        category=category,
        artisan_id=artisan_id,
        is_featured=is_featured,
        is_active=is_active,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {"data": products}


@router.get("/{product_id}")
def get_product(product_id: int, session: Session = Depends(get_session)):
    return {"data": product_service.get_product_detail(session, product_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"data": product_service.create_product(session, current_user, data)}


@router.put("/{product_id}")
def update_product(
    product_id: int,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"data": product_service.update_product(session, current_user, product_id, data)}


@router.post("/{product_id}/views")
def increment_views(product_id: int, session: Session = Depends(get_session)):
    views = product_service.increment_product_views(session, product_id)
    return {"data": {"views_count": views}}
