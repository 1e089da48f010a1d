"""Order endpoints: checkout, history, admin removal."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_user, require_permission
from app.core.rbac import PermissionAction, has_permission
from app.db.base import get_db
from app.models.order import Order
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.order import OrderCreate, OrderCreatedResponse, OrderResponse
from app.services.checkout import (
    InsufficientStock,
    ProductNotFound,
    list_orders as query_orders,
    place_order,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Every order for admins; only the caller's own for everyone else."""
    if has_permission(current_user.role, PermissionAction.ORDER_READ_ALL):
        orders = await query_orders(db)
    else:
        orders = await query_orders(db, user_email=current_user.email)
    return [OrderResponse.model_validate(o) for o in orders]


@router.get("/my-orders", response_model=list[OrderResponse])
async def my_orders(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    orders = await query_orders(db, user_email=current_user.email)
    return [OrderResponse.model_validate(o) for o in orders]


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Check out the cart: stock is reserved and the order saved together, or not at all."""
    try:
        order = await place_order(db, current_user, body)
    except ProductNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except InsufficientStock as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    await db.commit()
    return OrderCreatedResponse(
        message="Order saved",
        order=OrderResponse.model_validate(order),
    )


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: UUID,
    current_user: User = Depends(require_permission(PermissionAction.ORDER_DELETE)),
    db: AsyncSession = Depends(get_db),
):
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    await db.delete(order)
    await db.commit()
    return MessageResponse(message="Order deleted")
