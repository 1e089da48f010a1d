"""Admin user management."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import require_admin
from app.db.base import get_db
from app.models.user import User
from app.schemas.auth import MessageResponse, UserResponse
from app.schemas.user import UserRoleUpdate
from app.services.accounts import delete_user_account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


@router.patch("/{user_id}", response_model=UserResponse)
async def change_role(
    user_id: UUID,
    body: UserRoleUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)
    user.role = body.role
    await db.commit()
    await db.refresh(user)
    logger.info("Role changed: user=%s role=%s by=%s", user.id, user.role.value, current_user.email)
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)
    await delete_user_account(db, user)
    await db.commit()
    logger.info("User deleted: user=%s by=%s", user_id, current_user.email)
    return MessageResponse(message="User deleted")
