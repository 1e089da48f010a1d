"""Checkout: atomic stock reservation and order placement.

Stock is never read, compared and written back. Each decrement is a single
conditional UPDATE that only matches while enough units remain, so two
requests racing for the last unit cannot both win. Placing an order reserves
every line and inserts the order inside the caller's transaction; any failure
propagates and the request session rolls the whole checkout back.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order
from app.models.product import Product
from app.models.user import User
from app.schemas.order import OrderCreate
from app.schemas.product import StockLine

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CheckoutError(Exception):
    pass


class ProductNotFound(CheckoutError):
    def __init__(self, product_id: UUID, title: str | None = None):
        self.product_id = product_id
        self.title = title
        super().__init__(f"Product not found: {title or product_id}")


class InsufficientStock(CheckoutError):
    def __init__(self, product_id: UUID, title: str, requested: int):
        self.product_id = product_id
        self.title = title
        self.requested = requested
        super().__init__(f"Insufficient stock for {title}")


async def reserve_stock(
    db: AsyncSession, product_id: UUID, quantity: int, title: str | None = None
) -> Product:
    """Take ``quantity`` units of a product, or raise without touching it."""
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        product = await db.get(Product, product_id, populate_existing=True)
        return product

    product = await db.get(Product, product_id)
    if product is None:
        raise ProductNotFound(product_id, title)
    raise InsufficientStock(product_id, product.title, quantity)


async def reduce_stock(db: AsyncSession, lines: Iterable[StockLine]) -> list[Product]:
    """Reserve every line in order; the first failure aborts the rest."""
    return [await reserve_stock(db, line.id, line.quantity, line.title) for line in lines]


async def place_order(db: AsyncSession, user: User, body: OrderCreate) -> Order:
    """Reserve stock for the cart and persist the order as one unit of work."""
    snapshot = []
    total = Decimal("0.00")
    for line in body.cart:
        product = await reserve_stock(db, line.id, line.quantity, line.title)
        price = Decimal(product.price).quantize(CENT)
        total += price * line.quantity
        snapshot.append(
            {
                "id": str(product.id),
                "title": product.title,
                "price": float(price),
                "quantity": line.quantity,
            }
        )

    client_total = Decimal(str(body.total)).quantize(CENT)
    if client_total != total:
        logger.warning(
            "Checkout total mismatch for %s: client=%s catalog=%s, storing catalog total",
            user.email, client_total, total,
        )

    order = Order(
        user_email=user.email,
        cart=snapshot,
        total=total,
        shipping=body.shipping.model_dump(),
    )
    db.add(order)
    await db.flush()
    await db.refresh(order)

    logger.info("Order placed: order=%s user=%s lines=%d total=%s", order.id, user.email, len(snapshot), total)
    return order


async def list_orders(db: AsyncSession, user_email: str | None = None) -> list[Order]:
    """Newest first; restricted to one owner when ``user_email`` is given."""
    query = select(Order)
    if user_email is not None:
        query = query.where(Order.user_email == user_email)
    result = await db.execute(query.order_by(Order.created_at.desc()))
    return list(result.scalars().all())
