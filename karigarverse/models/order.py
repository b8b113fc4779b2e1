from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime

from karigarverse.constants.order_status import PENDING
from karigarverse.models.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(unique=True, index=True)
    customer_id: int = Field(foreign_key="users.id", index=True)

    status: str = Field(default=PENDING)
    payment_status: str = Field(default="pending")
    payment_method: Optional[str] = None

    subtotal: float
    tax_amount: float = 0
    shipping_cost: float = 0
    discount_amount: float = 0
    total_amount: float
    currency: str = "INR"

    shipping_address: dict = Field(sa_column=Column(JSON, nullable=False))
    billing_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")
