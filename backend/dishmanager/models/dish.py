"""
DishManager Backend — Dish SQLAlchemy Model
============================================

What:  ORM model representing the `dishes` table.
Why:   Maps Python objects to rows for type-safe store operations.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Used by DishService for CRUD operations and by the seed script.

Table Design:
    - id: Storage-internal surrogate key, never exposed over the API
    - dish_id: Human-assigned identifier, unique, immutable after creation
    - dish_name / image_url: Required, non-empty (enforced in DishService)
    - is_published: Defaults to false
    - created_at / updated_at: Store-managed UTC timestamps

Unique index on dish_id:
    Backs the uniqueness invariant even when two creates for the same dishId
    race past the service's pre-insert lookup.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from dishmanager.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Dish(Base):
    """
    A single dish record.

    Lifecycle:
        1. Created by POST /api/dishes
        2. Mutated by PUT /api/dishes/{dishId} and PUT .../toggle
        3. Destroyed by DELETE /api/dishes/{dishId} (no cascades)
    """

    __tablename__ = "dishes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    dish_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
        comment="Externally assigned identifier, unique across live records",
    )

    dish_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name; the list endpoint orders by this",
    )

    image_url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        comment="Image URL (validity is not enforced beyond non-empty)",
    )

    is_published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # Python-side defaults so the values are known right after flush
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return (
            f"<Dish(dish_id='{self.dish_id}', dish_name='{self.dish_name}', "
            f"is_published={self.is_published})>"
        )
