"""SQLAlchemy models for the grocery storefront."""

from app.models.user import User, RefreshToken
from app.models.product import Product
from app.models.order import Order

__all__ = [
    "User",
    "RefreshToken",
    "Product",
    "Order",
]
