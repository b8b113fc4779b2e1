from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Column, JSON
from typing import List, Optional
from datetime import datetime


class Product(SQLModel, table=True):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    artisan_id: int = Field(foreign_key="artisan_profiles.id", index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id", index=True)

    name: str
    description: str = ""

    price: float
    original_price: Optional[float] = None
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True
    is_featured: bool = False
    views_count: int = 0

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0
