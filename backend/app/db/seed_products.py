"""Seed the catalog with generated grocery products.

Usage:
    python -m app.db.seed_products --count 1000 --reset
"""

import argparse
import asyncio
import logging
import random
from decimal import Decimal

from sqlalchemy import delete

from app.db.base import Base, async_session_maker, engine
from app.models import Product

logger = logging.getLogger(__name__)

CATEGORIES: dict[str, list[str]] = {
    "Frutas": ["Manzana", "Plátano", "Naranja", "Mandarina", "Uva", "Mango", "Fresa", "Kiwi", "Melón"],
    "Verduras": ["Tomate", "Lechuga", "Zanahoria", "Cebolla", "Pimiento", "Ajo", "Brócoli", "Coliflor"],
    "Carnes": ["Pechuga de Pollo", "Carne Molida", "Chuleta de Cerdo", "Carne de Res", "Pollo Entero"],
    "Pescados": ["Atún", "Salmón", "Tilapia", "Trucha"],
    "Proteínas": ["Huevos", "Tofu", "Jamón", "Pavo"],
    "Lácteos": ["Leche", "Queso Fresco", "Yogurt", "Mantequilla"],
    "Bebidas": ["Agua Mineral", "Jugo de Naranja", "Gaseosa", "Bebida Energética", "Cerveza"],
    "Panadería": ["Pan Francés", "Pan de Molde", "Croissant", "Kekito", "Empanada"],
    "Limpieza": ["Detergente", "Lavavajillas", "Limpiador Multiusos", "Cloro"],
    "Higiene": ["Shampoo", "Jabón", "Pasta Dental", "Desodorante"],
    "Snacks": ["Galletas", "Chifles", "Papas Fritas", "Chocolate", "Maní"],
    "Desayuno": ["Avena", "Cereal", "Café", "Té Verde"],
}

SIZES = [
    "250g", "500g", "1kg", "2kg",
    "250ml", "500ml", "1L", "1.5L", "2L", "3L",
    "Unidad", "Pack x6", "Pack x12", "Caja x24",
]


def generate_product(index: int, rng: random.Random) -> dict:
    category = rng.choice(list(CATEGORIES))
    name = rng.choice(CATEGORIES[category])
    size = rng.choice(SIZES)
    return {
        "title": f"{name} {size}",
        "description": f"{name} ({size}) in {category}.",
        "image": f"https://picsum.photos/seed/{index}/500/300",
        "category": category,
        "price": Decimal(str(round(rng.uniform(1, 21), 2))),
        "stock": rng.randint(10, 160),
    }


async def seed(count: int, reset: bool = False, seed_value: int | None = None) -> int:
    rng = random.Random(seed_value)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        if reset:
            await session.execute(delete(Product))
        session.add_all(Product(**generate_product(i + 1, rng)) for i in range(count))
        await session.commit()

    logger.info("Inserted %d products (reset=%s)", count, reset)
    return count


def main() -> None:
    parser = argparse.ArgumentParser(description="Fill the catalog with generated grocery products")
    parser.add_argument("--count", type=int, default=1000, help="Number of products to insert")
    parser.add_argument("--reset", action="store_true", help="Delete existing products first")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(seed(args.count, reset=args.reset, seed_value=args.seed))


if __name__ == "__main__":
    main()
