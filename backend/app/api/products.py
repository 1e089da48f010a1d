"""Catalog endpoints: public browsing, staff CRUD, stock reduction."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_current_user, require_staff
from app.db.base import get_db
from app.models.order import Order
from app.models.product import Product
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ReduceStockRequest,
)
from app.services.checkout import InsufficientStock, ProductNotFound, reduce_stock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


async def _get_product_or_404(db: AsyncSession, product_id: UUID) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Product not found")
    return product


@router.get("", response_model=list[ProductResponse])
async def list_products(category: str | None = None, db: AsyncSession = Depends(get_db)):
    query = select(Product)
    if category:
        query = query.where(Product.category == category)
    result = await db.execute(query.order_by(Product.created_at.desc()))
    return result.scalars().all()


@router.get("/categories", response_model=list[str])
async def list_categories(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Product.category).distinct().order_by(Product.category))
    return result.scalars().all()


@router.post("/reduce-stock", response_model=MessageResponse)
async def reduce_stock_endpoint(
    body: ReduceStockRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Take the cart's quantities out of stock, all lines or none.

    Orders reserve their own stock at checkout, so a follow-up call that
    names the caller's order is acknowledged without a second decrement.
    """
    if body.order_id is not None:
        order = await db.get(Order, body.order_id)
        if order is None or order.user_email != current_user.email:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Order not found")
        return MessageResponse(message="Stock already reserved by order")

    try:
        await reduce_stock(db, body.cart)
    except ProductNotFound as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc))
    except InsufficientStock as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc))
    await db.commit()
    return MessageResponse(message="Stock updated")


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, db: AsyncSession = Depends(get_db)):
    return await _get_product_or_404(db, product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    values = data.model_dump()
    if values["stock"] is None:
        values["stock"] = settings.DEFAULT_PRODUCT_STOCK

    product = Product(**values)
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Product created: product=%s by=%s", product.id, current_user.email)
    return product


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    product = await _get_product_or_404(db, product_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(product, key, value)

    await db.commit()
    await db.refresh(product)
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: UUID,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    product = await _get_product_or_404(db, product_id)
    await db.delete(product)
    await db.commit()
    logger.info("Product deleted: product=%s by=%s", product_id, current_user.email)
    return MessageResponse(message="Product deleted")
