from pydantic import BaseModel, Field
from typing import List, Optional


class OrderItemCreate(BaseModel):
    product_id: int
    artisan_id: Optional[int] = None
    quantity: int
    unit_price: float = Field(..., allow_inf_nan=False)


class OrderCreate(BaseModel):
    subtotal: float = Field(..., allow_inf_nan=False)
    tax_amount: float = Field(0, allow_inf_nan=False)
    shipping_cost: float = Field(0, allow_inf_nan=False)
    discount_amount: float = Field(0, allow_inf_nan=False)
    total_amount: float = Field(..., allow_inf_nan=False)

    shipping_address: dict
    billing_address: Optional[dict] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    items: List[OrderItemCreate]
