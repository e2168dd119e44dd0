from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class _PrincipalMixin:
    """
    Columns shared by both login tables.
    Admins and users are kept in separate tables; login checks `admins` first.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    role = "user"

    def to_public(self, *, with_role: bool = False) -> dict[str, Any]:
        """Projection safe to return to clients (never includes the password hash)."""
        d: dict[str, Any] = {"id": self.id, "name": self.name, "email": self.email}
        if with_role:
            d["role"] = self.role
        return d


class Admin(_PrincipalMixin, Base):
    __tablename__ = "admins"

    role = "admin"


class User(_PrincipalMixin, Base):
    __tablename__ = "users"

    role = "user"


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.shop.modules.catalog.models import Category, Product, SubCategory  # noqa: E402,F401
