from pydantic import BaseModel, Field
from typing import List, Optional


class ReviewCreate(BaseModel):
    product_id: int
    order_item_id: Optional[int] = None
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    comment: Optional[str] = None
    images: List[str] = []
