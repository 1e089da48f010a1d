"""Order schemas for API request/response."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CartLine(BaseModel):
    """A cart line as the client sends it.

    ``title`` and ``price`` are accepted for compatibility with the storefront
    cart but the stored snapshot uses the catalog's values.
    """

    id: UUID
    quantity: int = Field(..., gt=0)
    title: str | None = None
    price: float | None = Field(None, ge=0)


class OrderLine(BaseModel):
    id: UUID
    title: str
    price: float
    quantity: int


class ShippingInfo(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    postal: str = Field(..., min_length=1, max_length=20)


class OrderCreate(BaseModel):
    cart: list[CartLine] = Field(..., min_length=1)
    total: float = Field(..., gt=0)
    shipping: ShippingInfo


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_email: str = Field(serialization_alias="user")
    cart: list[OrderLine]
    total: float
    shipping: ShippingInfo
    created_at: datetime = Field(serialization_alias="date")


class OrderCreatedResponse(BaseModel):
    message: str
    order: OrderResponse
