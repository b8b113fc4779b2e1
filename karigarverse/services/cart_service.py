from datetime import datetime
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from karigarverse.errors import InvalidArgumentError, NotFoundError
from karigarverse.models.artisan import ArtisanProfile
from karigarverse.models.cart import CartItem
from karigarverse.models.product import Product
import logging

logger = logging.getLogger(__name__)

# dialects with a native INSERT ... ON CONFLICT DO UPDATE; others go
# through _increment_or_insert
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _get_cart_item(session: Session, user_id: int, product_id: int) -> Optional[CartItem]:
    return session.exec(
        select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        )
    ).first()


def _upsert(session: Session, insert, user_id: int, product_id: int, quantity: int, now: datetime) -> None:
    table = CartItem.__table__
    stmt = insert(table).values(
        user_id=user_id,
        product_id=product_id,
        quantity=quantity,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.user_id, table.c.product_id],
        set_={"quantity": table.c.quantity + quantity, "updated_at": now},
    )
    session.execute(stmt)


def _increment(session: Session, user_id: int, product_id: int, quantity: int, now: datetime) -> int:
    result = session.execute(
        update(CartItem)
        .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
        .values(quantity=CartItem.quantity + quantity, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def _increment_or_insert(session: Session, user_id: int, product_id: int, quantity: int, now: datetime) -> None:
    if _increment(session, user_id, product_id, quantity, now):
        return

    session.add(CartItem(
        user_id=user_id,
        product_id=product_id,
        quantity=quantity,
        created_at=now,
        updated_at=now,
    ))
    try:
        session.flush()
    except IntegrityError:
        # another request inserted the pair between our update and insert;
        # nothing else is pending in this transaction
        session.rollback()
        _increment(session, user_id, product_id, quantity, now)


def add_to_cart(session: Session, user_id: int, product_id: int, quantity: int) -> CartItem:
    """Add ``quantity`` units, incrementing the existing row for the pair if any."""
    if quantity is None or quantity <= 0:
        raise InvalidArgumentError("Quantity must be a positive integer")

    if session.get(Product, product_id) is None:
        raise NotFoundError("Product", product_id)

    insert = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
    now = datetime.utcnow()

    try:
        if insert is not None:
            _upsert(session, insert, user_id, product_id, quantity, now)
        else:
            _increment_or_insert(session, user_id, product_id, quantity, now)
        session.commit()
    except Exception:
        session.rollback()
        raise

    item = _get_cart_item(session, user_id, product_id)
    session.refresh(item)
    return item


def set_cart_quantity(session: Session, user_id: int, product_id: int, quantity: int) -> Optional[CartItem]:
    """
    Absolute set. A quantity of zero or less removes the row and returns None.
    """
    if quantity <= 0:
        remove_from_cart(session, user_id, product_id)
        return None

    result = session.execute(
        update(CartItem)
        .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
        .values(quantity=quantity, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        session.rollback()
        raise NotFoundError("Cart item")

    session.commit()

    item = _get_cart_item(session, user_id, product_id)
    session.refresh(item)
    return item


def remove_from_cart(session: Session, user_id: int, product_id: int) -> bool:
    """Idempotent; returns whether a row was actually deleted."""
    result = session.execute(
        delete(CartItem)
        .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount > 0


def clear_cart(session: Session, user_id: int, commit: bool = True) -> int:
    result = session.execute(
        delete(CartItem)
        .where(CartItem.user_id == user_id)
        .execution_options(synchronize_session=False)
    )

    if commit:
        session.commit()

    logger.info(f"Cleared {result.rowcount} cart items for user {user_id}")
    return result.rowcount


def list_cart(session: Session, user_id: int):
    """Cart rows newest first, with the live product and its shop name."""
    rows = session.exec(
        select(CartItem, Product, ArtisanProfile.shop_name)
        .join(Product, CartItem.product_id == Product.id)
        .join(ArtisanProfile, Product.artisan_id == ArtisanProfile.id)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
    ).all()

    items = []
    for cart_item, product, shop_name in rows:
        items.append({
            "id": cart_item.id,
            "user_id": cart_item.user_id,
            "product_id": cart_item.product_id,
            "quantity": cart_item.quantity,
            "created_at": cart_item.created_at,
            "updated_at": cart_item.updated_at,
            "products": {
                "id": product.id,
                "name": product.name,
                "price": product.price,
                "images": product.images or [],
                "stock_quantity": product.stock_quantity,
                "is_active": product.is_active,
                "artisan_id": product.artisan_id,
            },
            "shop_name": shop_name,
        })

    return items
