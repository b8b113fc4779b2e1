from sqlalchemy import update
from sqlmodel import Session, select
from karigarverse.errors import InsufficientStockError, NotFoundError
from karigarverse.models.order_item import OrderItem
from karigarverse.models.product import Product
import logging

logger = logging.getLogger(__name__)


def decrement_stock(session: Session, product_id: int, quantity: int) -> None:
    """
    Take ``quantity`` units off a product's stock.

    The update only matches while enough stock is left, so two concurrent
    checkouts can never drive stock_quantity below zero. Runs inside the
    caller's transaction; nothing is committed here.
    """
    result = session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_quantity >= quantity)
        .values(stock_quantity=Product.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        available = session.exec(
            select(Product.stock_quantity).where(Product.id == product_id)
        ).first()
        if available is None:
            raise NotFoundError("Product", product_id)

        logger.warning(
            f"Insufficient stock for product {product_id}: "
            f"requested {quantity}, available {available}"
        )
        raise InsufficientStockError(product_id, quantity, available)


def restock_order_items(session: Session, order_id: int) -> int:
    """Put the quantities of an order's items back on their products."""
    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id)
    ).all()

    for item in items:
        session.execute(
            update(Product)
            .where(Product.id == item.product_id)
            .values(stock_quantity=Product.stock_quantity + item.quantity)
            .execution_options(synchronize_session=False)
        )

    logger.info(f"Restocked {len(items)} items for order {order_id}")
    return len(items)
