"""Account removal."""

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order
from app.models.user import RefreshToken, User

logger = logging.getLogger(__name__)


async def delete_user_account(db: AsyncSession, user: User) -> int:
    """Delete ``user``, its refresh tokens and every order under its email.

    Orders reference their owner by email string, so they are matched on that
    rather than through a foreign key. Returns the number of orders removed.
    """
    result = await db.execute(delete(Order).where(Order.user_email == user.email))
    await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user.id))
    await db.delete(user)
    await db.flush()
    logger.info("Account deleted: user=%s orders_removed=%d", user.id, result.rowcount)
    return result.rowcount
