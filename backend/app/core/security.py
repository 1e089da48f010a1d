"""JWT token management and password hashing."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class InvalidTokenError(Exception):
    """Signature, expiry, type or claim failure while decoding a token."""


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """Check ``plain`` against ``hashed``. An absent or unreadable hash is a mismatch."""
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError) as exc:
        logger.warning("Password verification error: %s", exc)
        return False


def create_access_token(
    user_id: UUID,
    email: str,
    role: str,
    name: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "name": name,
        "type": ACCESS_TOKEN_TYPE,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(
    user_id: UUID,
    email: str,
    expires_delta: timedelta | None = None,
) -> tuple[str, str, datetime]:
    """Mint a refresh token. Returns ``(token, jti, expires_at)``.

    Only the ``jti`` is meant to be persisted; the token string itself stays
    with the client.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )
    jti = secrets.token_urlsafe(24)
    payload = {
        "sub": str(user_id),
        "email": email,
        "jti": jti,
        "type": REFRESH_TOKEN_TYPE,
        "exp": expire,
    }
    token = jwt.encode(payload, settings.REFRESH_SECRET_KEY, algorithm=settings.ALGORITHM)
    return token, jti, expire


def _decode(token: str, secret: str, token_type: str) -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    if payload.get("type") != token_type:
        raise InvalidTokenError(f"Expected a {token_type} token")
    try:
        payload["sub"] = UUID(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("Malformed subject claim") from exc
    return payload


def decode_access_token(token: str) -> dict:
    """Decode and validate an access token. Raises InvalidTokenError on failure."""
    return _decode(token, settings.SECRET_KEY, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict:
    """Decode and validate a refresh token. Raises InvalidTokenError on failure."""
    payload = _decode(token, settings.REFRESH_SECRET_KEY, REFRESH_TOKEN_TYPE)
    if not payload.get("jti"):
        raise InvalidTokenError("Missing token id")
    return payload
