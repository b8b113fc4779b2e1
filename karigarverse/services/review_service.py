from typing import Optional

from sqlmodel import Session, select

from karigarverse.errors import InvalidArgumentError, NotFoundError
from karigarverse.models.order import Order
from karigarverse.models.order_item import OrderItem
from karigarverse.models.product import Product
from karigarverse.models.review import Review
from karigarverse.models.user import User
from karigarverse.schemas.review_schemas import ReviewCreate
import logging

logger = logging.getLogger(__name__)


def list_product_reviews(session: Session, product_id: int, limit: Optional[int] = None, offset: Optional[int] = None):
    """Reviews of a product, newest first, with the reviewer's name and avatar."""
    query = (
        select(Review, User.first_name, User.last_name, User.avatar_url)
        .join(User, Review.customer_id == User.id)
        .where(Review.product_id == product_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    if limit:
        query = query.limit(limit)
    if offset:
        query = query.offset(offset)

    return [
        {
            **review.model_dump(),
            "customer_name": f"{first_name} {last_name}".strip(),
            "customer_avatar": avatar_url,
        }
        for review, first_name, last_name, avatar_url in session.exec(query).all()
    ]


def _check_order_item(session: Session, user_id: int, product_id: int, order_item_id: int) -> None:
    row = session.exec(
        select(OrderItem.product_id, Order.customer_id)
        .join(Order, OrderItem.order_id == Order.id)
        .where(OrderItem.id == order_item_id)
    ).first()

    if row is None:
        raise NotFoundError("Order item", order_item_id)

    item_product_id, customer_id = row
    if customer_id != user_id or item_product_id != product_id:
        raise InvalidArgumentError(
            f"Order item {order_item_id} is not a purchase of product {product_id} by this customer"
        )


def create_review(session: Session, user_id: int, data: ReviewCreate) -> Review:
    """
    Store a review. Linking it to one of the caller's own order items for the
    same product marks it as a verified purchase.
    """
    if session.get(Product, data.product_id) is None:
        raise NotFoundError("Product", data.product_id)

    if data.order_item_id is not None:
        _check_order_item(session, user_id, data.product_id, data.order_item_id)

    review = Review(
        product_id=data.product_id,
        customer_id=user_id,
        order_item_id=data.order_item_id,
        rating=data.rating,
        title=data.title,
        comment=data.comment,
        images=data.images,
        is_verified_purchase=data.order_item_id is not None,
    )
    session.add(review)
    session.commit()
    session.refresh(review)

    logger.info(f"Review {review.id} for product {review.product_id} by user {user_id}")
    return review
