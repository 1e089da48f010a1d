from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ── Product ──
class ProductBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    image: str = Field(..., min_length=1, max_length=500)
    category: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)

class ProductCreate(ProductBase):
    stock: Optional[int] = Field(None, ge=0)

class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)

class ProductResponse(ProductBase):
    id: UUID
    stock: int
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


# ── Stock ──
class StockLine(BaseModel):
    id: UUID
    quantity: int = Field(..., gt=0)
    title: Optional[str] = None

class ReduceStockRequest(BaseModel):
    """``orderId`` names an order whose checkout already reserved this cart."""

    cart: list[StockLine] = Field(..., min_length=1)
    order_id: Optional[UUID] = Field(None, alias="orderId")
    model_config = {"populate_by_name": True}
