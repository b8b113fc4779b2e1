from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Column, JSON
from typing import List, Optional
from datetime import datetime


class Review(SQLModel, table=True):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    customer_id: int = Field(foreign_key="users.id", index=True)
    order_item_id: Optional[int] = Field(default=None, foreign_key="order_items.id")

    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # set only when the review is tied to one of the customer's order items
    is_verified_purchase: bool = False
    helpful_count: int = 0

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
