"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-access-secret")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret")

from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.rbac import RoleType
from app.db.base import Base, get_db
from app.main import app
# Import all models to ensure they're registered with Base.metadata
import app.models as _models  # noqa: F401
from app.models.product import Product
from app.models.user import User
from app.services.sessions import issue_access_token

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secreto123"


@pytest_asyncio.fixture
async def db_engine():
    """In-memory database shared by every session of one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    """HTTP client against the app with the database swapped for the test engine."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    # Don't raise server exceptions so we can test error status codes
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ── Data helpers ───────────────────────────────────

async def create_user(
    session_maker,
    email: str,
    role: RoleType = RoleType.USER,
    name: str = "Test User",
    password: str | None = TEST_PASSWORD,
    google_id: str | None = None,
) -> User:
    async with session_maker() as session:
        user = User(name=name, email=email, role=role, google_id=google_id)
        if password is not None:
            user.set_password(password)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def create_product(
    session_maker,
    title: str = "Leche 1L",
    price: str = "2.50",
    stock: int = 5,
    category: str = "Lácteos",
) -> Product:
    async with session_maker() as session:
        product = Product(
            title=title,
            description=f"{title} fresca",
            image="https://picsum.photos/seed/1/500/300",
            category=category,
            price=Decimal(price),
            stock=stock,
        )
        session.add(product)
        await session.commit()
        await session.refresh(product)
        return product


async def fetch(session_maker, model, pk):
    """Read a row back through a fresh session, bypassing any identity map."""
    async with session_maker() as session:
        return await session.get(model, pk)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_access_token(user)}"}


@pytest_asyncio.fixture
async def customer(session_maker) -> User:
    return await create_user(session_maker, "cliente@gmail.com", name="Ana Cliente")


@pytest_asyncio.fixture
async def assistant(session_maker) -> User:
    return await create_user(
        session_maker, "asistente@gmail.com", role=RoleType.ASSISTANT, name="Luis Asistente"
    )


@pytest_asyncio.fixture
async def admin(session_maker) -> User:
    return await create_user(session_maker, "admin@gmail.com", role=RoleType.ADMIN, name="Rosa Admin")


@pytest_asyncio.fixture
async def milk(session_maker) -> Product:
    return await create_product(session_maker)
