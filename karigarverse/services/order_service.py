from collections import defaultdict
from datetime import datetime
import math
from typing import Callable, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from karigarverse.config import settings
from karigarverse.constants.order_status import CANCELLED, PENDING, can_transition
from karigarverse.errors import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    KarigarVerseError,
    NotFoundError,
    PermissionDeniedError,
)
from karigarverse.models.artisan import ArtisanProfile
from karigarverse.models.order import Order
from karigarverse.models.order_item import OrderItem
from karigarverse.models.product import Product
from karigarverse.models.user import User
from karigarverse.schemas.order_schemas import OrderCreate
from karigarverse.services.cart_service import clear_cart
from karigarverse.services.inventory_service import decrement_stock, restock_order_items
from karigarverse.utils.order_number import generate_order_number
import logging

logger = logging.getLogger(__name__)

# money fields are floats; anything under half a paisa is rounding noise
MONEY_TOLERANCE = 0.005

MONEY_FIELDS = ("subtotal", "tax_amount", "shipping_cost", "discount_amount", "total_amount")


class _OrderNumberTaken(Exception):
    pass


def validate_order_request(request: OrderCreate) -> None:
    if not request.items:
        raise InvalidArgumentError("Order must contain at least one item")

    if not request.shipping_address:
        raise InvalidArgumentError("Shipping address is required")

    for field in MONEY_FIELDS:
        value = getattr(request, field)
        if value is None or not math.isfinite(value):
            raise InvalidArgumentError(f"{field} must be a finite number")
        if value < 0:
            raise InvalidArgumentError(f"{field} must not be negative")

    for item in request.items:
        if item.unit_price is None or not math.isfinite(item.unit_price):
            raise InvalidArgumentError(
                f"Unit price for product {item.product_id} must be a finite number"
            )
        if item.quantity <= 0:
            raise InvalidArgumentError(
                f"Quantity for product {item.product_id} must be a positive integer"
            )
        if item.unit_price <= 0:
            raise InvalidArgumentError(
                f"Unit price for product {item.product_id} must be positive"
            )

    lines_total = sum(item.quantity * item.unit_price for item in request.items)
    if abs(lines_total - request.subtotal) > MONEY_TOLERANCE:
        raise InvalidArgumentError(
            f"Subtotal {request.subtotal} does not match the item total {lines_total}"
        )

    expected_total = (
        request.subtotal
        + request.tax_amount
        + request.shipping_cost
        - request.discount_amount
    )
    if abs(expected_total - request.total_amount) > MONEY_TOLERANCE:
        raise InvalidArgumentError(
            f"Total {request.total_amount} does not match subtotal + tax + "
            f"shipping - discount ({expected_total})"
        )


def _order_number_exists(session: Session, order_number: str) -> bool:
    return session.exec(
        select(Order.id).where(Order.order_number == order_number)
    ).first() is not None


def _write_order(session: Session, user_id: int, request: OrderCreate, order_number: str) -> Order:
    if _order_number_exists(session, order_number):
        raise _OrderNumberTaken(order_number)

    order = Order(
        order_number=order_number,
        customer_id=user_id,
        status=PENDING,
        subtotal=request.subtotal,
        tax_amount=request.tax_amount,
        shipping_cost=request.shipping_cost,
        discount_amount=request.discount_amount,
        total_amount=request.total_amount,
        shipping_address=request.shipping_address,
        billing_address=request.billing_address,
        payment_method=request.payment_method,
        notes=request.notes,
    )
    session.add(order)

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        if _order_number_exists(session, order_number):
            # lost a race for the same number against another request
            raise _OrderNumberTaken(order_number)
        raise

    for line in request.items:
        product = session.get(Product, line.product_id)
        if product is None:
            raise NotFoundError("Product", line.product_id)

        if not product.is_active:
            raise InvalidArgumentError(f"Product {product.id} is not available")

        if line.artisan_id is not None and line.artisan_id != product.artisan_id:
            raise InvalidArgumentError(
                f"Product {product.id} is not sold by artisan {line.artisan_id}"
            )

        session.add(OrderItem(
            order_id=order.id,
            product_id=product.id,
            artisan_id=product.artisan_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.quantity * line.unit_price,
        ))

        decrement_stock(session, product.id, line.quantity)

    clear_cart(session, user_id, commit=False)
    session.flush()
    return order


def place_order(
    session: Session,
    user_id: int,
    request: OrderCreate,
    number_factory: Callable[[], str] = generate_order_number,
    max_attempts: Optional[int] = None,
) -> Order:
    """
    Create an order with its items, take the stock and empty the cart.

    Everything happens in one transaction: either the order, all of its
    items, every stock decrement and the cart clear are committed together,
    or nothing is. A taken order number rolls the attempt back and retries
    with a fresh number, up to ``max_attempts`` times.
    """
    validate_order_request(request)

    max_attempts = max_attempts or settings.order_number_max_attempts

    for attempt in range(1, max_attempts + 1):
        order_number = number_factory()
        try:
            order = _write_order(session, user_id, request, order_number)
            session.commit()
        except _OrderNumberTaken:
            session.rollback()
            logger.warning(
                f"Order number {order_number} already taken "
                f"(attempt {attempt}/{max_attempts})"
            )
            continue
        except KarigarVerseError as exc:
            session.rollback()
            logger.warning(f"Order for user {user_id} rejected: {exc}")
            raise
        except Exception:
            session.rollback()
            logger.exception(f"Failed to place order for user {user_id}")
            raise

        session.refresh(order)
        logger.info(
            f"Order {order.order_number} placed by user {user_id} "
            f"with {len(request.items)} items, total {order.total_amount}"
        )
        return order

    raise ConflictError(
        f"Could not generate a unique order number after {max_attempts} attempts"
    )


def cancel_order(session: Session, user_id: int, order_id: int, restock: Optional[bool] = None) -> Order:
    """
    Cancel a pending or processing order owned by ``user_id``.

    The order row stays locked from the read until the commit. Any rejection
    rolls back first so the lock is released before the error propagates.
    """
    if restock is None:
        restock = settings.restock_on_cancel

    try:
        order = session.exec(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

        if not order:
            raise NotFoundError("Order", order_id)

        if order.customer_id != user_id:
            raise PermissionDeniedError("Unauthorized: Order does not belong to user")

        if not can_transition(order.status, CANCELLED):
            raise InvalidStateError(
                "Order cannot be cancelled. Only pending or processing orders can be cancelled."
            )

        order.status = CANCELLED
        order.updated_at = datetime.utcnow()

        if restock:
            restock_order_items(session, order.id)
        session.add(order)
        session.commit()
    except KarigarVerseError as exc:
        session.rollback()
        logger.warning(f"Cancel of order {order_id} by user {user_id} rejected: {exc}")
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Failed to cancel order {order_id}")
        raise

    session.refresh(order)
    logger.info(f"Order {order.order_number} cancelled by user {user_id}")
    return order


def _product_names(session: Session, order_ids: List[int], artisan_id: Optional[int] = None) -> Dict[int, List[str]]:
    if not order_ids:
        return {}

    query = (
        select(OrderItem.order_id, Product.name)
        .join(Product, OrderItem.product_id == Product.id)
        .where(OrderItem.order_id.in_(order_ids))
        .order_by(OrderItem.id)
    )
    if artisan_id is not None:
        query = query.where(OrderItem.artisan_id == artisan_id)

    names = defaultdict(list)
    for order_id, name in session.exec(query).all():
        if name not in names[order_id]:
            names[order_id].append(name)
    return names


def list_orders(session: Session, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None):
    """A customer's orders, newest first, with item counts."""
    query = (
        select(Order, func.count(OrderItem.id))
        .outerjoin(OrderItem, OrderItem.order_id == Order.id)
        .where(Order.customer_id == user_id)
        .group_by(Order.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    if limit:
        query = query.limit(limit)
    if offset:
        query = query.offset(offset)

    rows = session.exec(query).all()
    names = _product_names(session, [order.id for order, _ in rows])

    return [
        {
            **order.model_dump(),
            "item_count": item_count,
            "product_names": names.get(order.id, []),
        }
        for order, item_count in rows
    ]


def get_order_detail(session: Session, order_id: int):
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order", order_id)

    rows = session.exec(
        select(OrderItem, Product.name, Product.images, ArtisanProfile.shop_name)
        .join(Product, OrderItem.product_id == Product.id)
        .join(ArtisanProfile, OrderItem.artisan_id == ArtisanProfile.id)
        .where(OrderItem.order_id == order_id)
        .order_by(OrderItem.id)
    ).all()

    items = [
        {
            **item.model_dump(),
            "product_name": name,
            "product_images": images or [],
            "artisan_shop_name": shop_name,
        }
        for item, name, images, shop_name in rows
    ]

    return {**order.model_dump(), "items": items}


def list_artisan_orders(session: Session, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None):
    """Orders that contain at least one item sold by the caller's shop."""
    artisan = session.exec(
        select(ArtisanProfile).where(ArtisanProfile.user_id == user_id)
    ).first()
    if not artisan:
        raise NotFoundError("Artisan profile")

    query = (
        select(Order, User.first_name, User.last_name, func.count(OrderItem.id))
        .join(OrderItem, OrderItem.order_id == Order.id)
        .join(User, Order.customer_id == User.id)
        .where(OrderItem.artisan_id == artisan.id)
        .group_by(Order.id, User.first_name, User.last_name)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    if limit:
        query = query.limit(limit)
    if offset:
        query = query.offset(offset)

    rows = session.exec(query).all()
    names = _product_names(session, [row[0].id for row in rows], artisan_id=artisan.id)

    return [
        {
            **order.model_dump(),
            "customer_name": f"{first_name} {last_name}".strip(),
            "item_count": item_count,
            "product_names": names.get(order.id, []),
        }
        for order, first_name, last_name, item_count in rows
    ]
