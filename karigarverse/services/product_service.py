from datetime import datetime
from typing import Optional

from sqlalchemy import or_, update
from sqlmodel import Session, select

from karigarverse.errors import NotFoundError, PermissionDeniedError
from karigarverse.models.artisan import ArtisanProfile
from karigarverse.models.category import Category
from karigarverse.models.product import Product
from karigarverse.models.user import User
from karigarverse.schemas.product_schemas import ProductCreate, ProductUpdate
from karigarverse.services.artisan_service import get_artisan_profile
from karigarverse.services.category_service import get_category
import logging

logger = logging.getLogger(__name__)


def _with_names(product: Product, category_name, category_slug, shop_name) -> dict:
    return {
        **product.model_dump(),
        "category_name": category_name,
        "category_slug": category_slug,
        "artisan_shop_name": shop_name,
    }


def _detail_query():
    return (
        select(Product, Category.name, Category.slug, ArtisanProfile.shop_name)
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(ArtisanProfile, Product.artisan_id == ArtisanProfile.id)
    )


def list_products(
    session: Session,
    category: Optional[str] = None,
    artisan_id: Optional[int] = None,
    is_featured: Optional[bool] = None,
    is_active: Optional[bool] = True,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
):
    """Catalog rows with category and shop names; ``category`` is a slug."""
    query = _detail_query()

    if category:
        query = query.where(Category.slug == category)
    if artisan_id is not None:
        query = query.where(Product.artisan_id == artisan_id)
    if is_featured is not None:
        query = query.where(Product.is_featured == is_featured)
    if is_active is not None:
        query = query.where(Product.is_active == is_active)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        )

    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    if limit:
        query = query.limit(limit)
    if offset:
        query = query.offset(offset)

    return [_with_names(*row) for row in session.exec(query).all()]


def get_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", product_id)
    return product


def get_product_detail(session: Session, product_id: int) -> dict:
    row = session.exec(_detail_query().where(Product.id == product_id)).first()
    if not row:
        raise NotFoundError("Product", product_id)
    return _with_names(*row)


def create_product(session: Session, user: User, data: ProductCreate) -> Product:
    artisan = get_artisan_profile(session, user.id)
    if data.category_id is not None:
        get_category(session, data.category_id)

    product = Product(artisan_id=artisan.id, **data.model_dump())
    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} created by artisan {artisan.id}")
    return product


def update_product(session: Session, user: User, product_id: int, data: ProductUpdate) -> Product:
    product = get_product(session, product_id)
    artisan = get_artisan_profile(session, user.id)

    if product.artisan_id != artisan.id:
        raise PermissionDeniedError("Product does not belong to this artisan")

    if data.category_id is not None:
        get_category(session, data.category_id)

    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(product, key, value)
    product.updated_at = datetime.utcnow()

    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def increment_product_views(session: Session, product_id: int) -> int:
    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(views_count=Product.views_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        session.rollback()
        raise NotFoundError("Product", product_id)

    session.commit()
    return session.exec(
        select(Product.views_count).where(Product.id == product_id)
    ).one()
