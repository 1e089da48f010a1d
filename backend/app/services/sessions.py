"""Login sessions: access/refresh token pairs and the refresh revocation list.

A refresh token is honoured only while its ``jti`` has a row in
``refresh_tokens``. Rotation deletes the presented row before minting the
next pair, and logout deletes it outright, so a stolen or logged-out refresh
token stops working server-side and not just in the browser.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import (
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)
from app.models.user import RefreshToken, User

logger = logging.getLogger(__name__)


def issue_access_token(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        email=user.email,
        role=user.role.value,
        name=user.name,
    )


async def start_session(db: AsyncSession, user: User) -> tuple[str, str]:
    """Mint an access + refresh pair and record the refresh token id.

    The user's expired entries are purged first, so the list only holds
    sessions that could still be refreshed.
    """
    await db.execute(
        delete(RefreshToken).where(
            RefreshToken.user_id == user.id,
            RefreshToken.expires_at < datetime.now(timezone.utc),
        ).execution_options(synchronize_session=False)
    )
    access_token = issue_access_token(user)
    refresh_token, jti, expires_at = create_refresh_token(user_id=user.id, email=user.email)
    db.add(RefreshToken(jti=jti, user_id=user.id, expires_at=expires_at))
    await db.flush()
    return access_token, refresh_token


async def rotate_session(db: AsyncSession, refresh_token: str) -> tuple[User, str, str]:
    """Exchange a live refresh token for a fresh pair. Raises InvalidTokenError."""
    payload = decode_refresh_token(refresh_token)

    result = await db.execute(
        select(RefreshToken).where(
            RefreshToken.jti == payload["jti"],
            RefreshToken.user_id == payload["sub"],
        )
    )
    stored = result.scalar_one_or_none()
    if stored is None:
        logger.warning("Refresh token reuse or revoked token for user=%s", payload["sub"])
        raise InvalidTokenError("Refresh token has been revoked")

    user = await db.get(User, payload["sub"])
    if user is None:
        raise InvalidTokenError("User no longer exists")

    await db.delete(stored)
    access_token, new_refresh_token = await start_session(db, user)
    return user, access_token, new_refresh_token


async def end_session(db: AsyncSession, refresh_token: str | None) -> bool:
    """Revoke ``refresh_token``. Returns False when there was nothing to revoke."""
    if not refresh_token:
        return False
    try:
        payload = decode_refresh_token(refresh_token)
    except InvalidTokenError:
        return False

    result = await db.execute(delete(RefreshToken).where(RefreshToken.jti == payload["jti"]))
    return result.rowcount > 0
