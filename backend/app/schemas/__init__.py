from app.schemas.auth import (
    RegisterRequest, LoginRequest, AuthResponse, UserResponse, ProfileUpdate,
)
from app.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ReduceStockRequest,
)
from app.schemas.order import (
    OrderCreate, OrderResponse, OrderCreatedResponse,
)
from app.schemas.user import UserRoleUpdate

__all__ = [
    "RegisterRequest", "LoginRequest", "AuthResponse", "UserResponse", "ProfileUpdate",
    "ProductCreate", "ProductUpdate", "ProductResponse", "ReduceStockRequest",
    "OrderCreate", "OrderResponse", "OrderCreatedResponse",
    "UserRoleUpdate",
]
