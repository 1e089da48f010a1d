"""Unit tests for auth: security utils + dependency logic."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from app.core.config import settings
from app.core.rbac import ROLE_PERMISSIONS, PermissionAction, RoleType, has_permission
from app.core.security import (
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)


# ── Password hashing ──────────────────────────────

def test_hash_and_verify():
    plain = "SecurePass123!"
    hashed = hash_password(plain)
    assert hashed != plain
    assert verify_password(plain, hashed)
    assert not verify_password("wrong", hashed)


def test_hash_is_salted():
    assert hash_password("secreto123") != hash_password("secreto123")


def test_verify_without_stored_hash():
    """OAuth-only accounts have no hash; nothing verifies against them."""
    assert not verify_password("secreto123", None)
    assert not verify_password("secreto123", "")
    assert not verify_password("secreto123", "not-a-bcrypt-hash")


# ── JWT ────────────────────────────────────────────

def test_create_and_decode_token():
    uid = uuid.uuid4()
    token = create_access_token(
        user_id=uid,
        email="ana@gmail.com",
        role="admin",
        name="Ana",
    )
    payload = decode_access_token(token)
    assert payload["sub"] == uid
    assert payload["email"] == "ana@gmail.com"
    assert payload["role"] == "admin"
    assert payload["name"] == "Ana"
    assert payload["type"] == "access"


def test_access_token_lifetime():
    before = datetime.now(timezone.utc)
    token = create_access_token(user_id=uuid.uuid4(), email="a@gmail.com", role="user", name="A")
    exp = datetime.fromtimestamp(jwt.get_unverified_claims(token)["exp"], tz=timezone.utc)
    expected = before + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    assert abs((exp - expected).total_seconds()) < 60


def test_expired_token():
    token = create_access_token(
        user_id=uuid.uuid4(),
        email="a@gmail.com",
        role="user",
        name="A",
        expires_delta=timedelta(seconds=-1),
    )
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_refresh_token_roundtrip():
    uid = uuid.uuid4()
    token, jti, expires_at = create_refresh_token(user_id=uid, email="a@gmail.com")
    payload = decode_refresh_token(token)
    assert payload["sub"] == uid
    assert payload["jti"] == jti
    assert payload["type"] == "refresh"
    assert expires_at is not None


def test_refresh_tokens_have_unique_ids():
    uid = uuid.uuid4()
    _, jti_a, _ = create_refresh_token(user_id=uid, email="a@gmail.com")
    _, jti_b, _ = create_refresh_token(user_id=uid, email="a@gmail.com")
    assert jti_a != jti_b


def test_token_types_are_not_interchangeable():
    uid = uuid.uuid4()
    access = create_access_token(user_id=uid, email="a@gmail.com", role="user", name="A")
    refresh, _, _ = create_refresh_token(user_id=uid, email="a@gmail.com")
    with pytest.raises(InvalidTokenError):
        decode_refresh_token(access)
    with pytest.raises(InvalidTokenError):
        decode_access_token(refresh)


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode(
        {"sub": str(uuid.uuid4()), "type": "access", "role": "admin"},
        "someone-elses-secret",
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(InvalidTokenError):
        decode_access_token(forged)


def test_garbage_token_is_rejected():
    with pytest.raises(InvalidTokenError):
        decode_access_token("not.a.jwt")


# ── Permission matrix sanity ──────────────────────

def test_rbac_matrix():
    # Admin has ALL permissions
    assert set(ROLE_PERMISSIONS[RoleType.ADMIN]) == set(PermissionAction)

    user = set(ROLE_PERMISSIONS[RoleType.USER])
    assistant = set(ROLE_PERMISSIONS[RoleType.ASSISTANT])
    admin = set(ROLE_PERMISSIONS[RoleType.ADMIN])
    assert user <= assistant <= admin
    assert user == set()


def test_assistant_manages_catalog_only():
    assert has_permission(RoleType.ASSISTANT, PermissionAction.PRODUCT_CREATE)
    assert has_permission(RoleType.ASSISTANT, PermissionAction.PRODUCT_DELETE)
    assert not has_permission(RoleType.ASSISTANT, PermissionAction.ORDER_READ_ALL)
    assert not has_permission(RoleType.ASSISTANT, PermissionAction.USER_DELETE)


def test_unknown_role_has_no_permissions():
    assert not has_permission("superuser", PermissionAction.PRODUCT_CREATE)


# ── Dependencies ──────────────────────────────────

def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
async def test_get_current_user_without_token():
    from app.core.deps import get_current_user

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(None, AsyncMock())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "No token"


@pytest.mark.asyncio
async def test_get_current_user_with_invalid_token():
    from app.core.deps import get_current_user

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(_credentials("garbage"), AsyncMock())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid or expired token"


@pytest.mark.asyncio
async def test_get_current_user_for_deleted_account():
    from app.core.deps import get_current_user

    token = create_access_token(user_id=uuid.uuid4(), email="a@gmail.com", role="user", name="A")
    mock_db = AsyncMock()
    mock_db.get.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(_credentials(token), mock_db)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "User not found"


@pytest.mark.asyncio
async def test_get_current_user_loads_fresh_user():
    from app.core.deps import get_current_user

    uid = uuid.uuid4()
    token = create_access_token(user_id=uid, email="a@gmail.com", role="user", name="A")
    stored = MagicMock()
    stored.role = RoleType.ADMIN
    mock_db = AsyncMock()
    mock_db.get.return_value = stored

    user = await get_current_user(_credentials(token), mock_db)

    assert user is stored
    assert mock_db.get.await_args.args[1] == uid


@pytest.mark.asyncio
async def test_require_role():
    from app.core.deps import require_admin, require_staff

    assistant = MagicMock()
    assistant.role = RoleType.ASSISTANT

    assert await require_staff(assistant) is assistant
    with pytest.raises(HTTPException) as exc_info:
        await require_admin(assistant)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Access denied"


@pytest.mark.asyncio
async def test_require_permission_lists_missing():
    from app.core.deps import require_permission

    checker = require_permission(PermissionAction.ORDER_DELETE)
    user = MagicMock()
    user.role = RoleType.USER

    with pytest.raises(HTTPException) as exc_info:
        await checker(user)
    assert exc_info.value.status_code == 403
    assert "order:delete" in exc_info.value.detail
