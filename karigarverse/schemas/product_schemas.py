from pydantic import BaseModel, Field
from typing import Optional, List


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category_id: Optional[int] = None

    price: float = Field(..., gt=0, allow_inf_nan=False)
    original_price: Optional[float] = Field(None, allow_inf_nan=False)
    images: List[str] = []

    stock_quantity: int = Field(default=0, ge=0)
    is_featured: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None

    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    original_price: Optional[float] = Field(None, allow_inf_nan=False)
    images: Optional[List[str]] = None

    stock_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
