"""Unit tests for the checkout service."""

import uuid

import pytest

from app.models.product import Product
from app.services.checkout import InsufficientStock, ProductNotFound, reserve_stock
from conftest import create_product, fetch


@pytest.mark.asyncio
async def test_reserve_stock(session_maker, milk):
    async with session_maker() as session:
        product = await reserve_stock(session, milk.id, 2)
        assert product.stock == 3
        await session.commit()

    assert (await fetch(session_maker, Product, milk.id)).stock == 3


@pytest.mark.asyncio
async def test_last_unit_goes_to_one_buyer(session_maker):
    """Two shoppers who both saw one unit left: only the first reservation wins."""
    product = await create_product(session_maker, title="Panetón", stock=1)

    async with session_maker() as first, session_maker() as second:
        seen_first = await first.get(Product, product.id)
        seen_second = await second.get(Product, product.id)
        assert seen_first.stock == seen_second.stock == 1

        await reserve_stock(first, product.id, 1)
        await first.commit()

        with pytest.raises(InsufficientStock) as exc_info:
            await reserve_stock(second, product.id, 1)
        assert exc_info.value.title == "Panetón"
        assert exc_info.value.requested == 1

    assert (await fetch(session_maker, Product, product.id)).stock == 0


@pytest.mark.asyncio
async def test_reserve_more_than_available_leaves_stock(session_maker, milk):
    async with session_maker() as session:
        with pytest.raises(InsufficientStock):
            await reserve_stock(session, milk.id, 6)

    assert (await fetch(session_maker, Product, milk.id)).stock == 5


@pytest.mark.asyncio
async def test_reserve_unknown_product(session_maker):
    missing = uuid.uuid4()
    async with session_maker() as session:
        with pytest.raises(ProductNotFound) as exc_info:
            await reserve_stock(session, missing, 1, title="Fantasma")

    assert exc_info.value.product_id == missing
    assert str(exc_info.value) == "Product not found: Fantasma"
