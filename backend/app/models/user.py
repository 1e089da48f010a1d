"""User & RefreshToken models."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.rbac import RoleType
from app.core.security import hash_password, verify_password
from app.db.base import Base
from app.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # NULL for accounts that only ever signed in through Google
    hashed_password: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[RoleType] = mapped_column(
        Enum(
            RoleType,
            name="role_type",
            native_enum=False,
            length=20,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=RoleType.USER,
        nullable=False,
    )
    google_id: Mapped[str | None] = mapped_column(String(255), index=True)
    country: Mapped[str] = mapped_column(String(100), default="Perú", nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20))
    addresses: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def set_password(self, plain: str) -> None:
        self.hashed_password = hash_password(plain)

    def check_password(self, plain: str) -> bool:
        return verify_password(plain, self.hashed_password)

    def validate_credentials(self) -> None:
        """A password is required unless the account is linked to Google."""
        if not self.hashed_password and not self.google_id:
            raise ValueError(f"User {self.email} needs a password or a Google identity")

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role}>"


class RefreshToken(UUIDPrimaryKeyMixin, Base):
    """Revocation list entry: one row per refresh token still honoured."""

    __tablename__ = "refresh_tokens"

    jti: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self) -> str:
        return f"<RefreshToken user={self.user_id} jti={self.jti[:8]}...>"
