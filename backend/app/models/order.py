"""Order model.

Orders are snapshots: the owner is stored as an email string and the cart as
a JSON copy of the purchased lines, so neither follows later edits to the
user or the catalog.
"""

from decimal import Decimal

from sqlalchemy import Index, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Order(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_user_email_created", "user_email", "created_at"),
    )

    user_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cart: Mapped[list[dict]] = mapped_column(JSON, nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping: Mapped[dict] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<Order {self.id} user={self.user_email} total={self.total}>"
