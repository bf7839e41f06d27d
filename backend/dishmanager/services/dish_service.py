"""
DishManager Backend — Dish Service (Mutations + Broadcast)
===========================================================

What:  Business logic for listing and mutating dishes, and the one place that
       decides when a broadcast event is published.
Why:   Keeps store access, validation and event publication out of routes.
How:   Each mutation runs: validate → write → commit → publish one event.
Who:   Called by route handlers with a session and a BroadcastPublisher.

Mutation Flow:
    ┌──────────┐    ┌────────────┐    ┌──────────┐    ┌──────────────┐
    │ Validate │───▶│ Store write│───▶│  Commit  │───▶│ Publish event│
    └──────────┘    └────────────┘    └──────────┘    └──────────────┘

    Validation or store failure → exception, nothing published.
    Commit succeeded → exactly one event, carrying the post-write snapshot.

Concurrency:
    Update and toggle are read-modify-write without compare-and-swap. Two
    concurrent toggles on the same dish race; the last committed write wins
    and both publish an event.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dishmanager.exceptions import NotFoundError, StoreError, ValidationError
from dishmanager.models.dish import Dish
from dishmanager.ordering import sort_by_name
from dishmanager.schemas.dish import DishCreate, DishSchema, DishUpdate
from dishmanager.schemas.events import (
    DishCreatedEvent,
    DishDeletedEvent,
    DishUpdatedEvent,
    PublishStatusUpdatedEvent,
)
from dishmanager.services.broadcast_base import BroadcastPublisher

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please provide dishId, dishName, and imageUrl"


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


class DishService:
    """
    Business logic layer for dish operations.

    Responsibilities:
        - list_dishes(): Snapshot ordered by name
        - create_dish(): Insert, enforce dishId uniqueness
        - update_dish(): Apply only supplied fields
        - delete_dish(): Remove permanently
        - toggle_publish(): Flip isPublished

    Stateless: the session and the publisher are passed to every call.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_dishes(self, db: AsyncSession) -> List[DishSchema]:
        """
        Return every dish ordered by name (locale-aware comparison).

        The SQL ORDER BY gives a cheap pre-order; the final order uses the
        shared collation key so server and client sort identically.
        """
        try:
            result = await db.execute(select(Dish).order_by(Dish.dish_name))
            dishes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Error fetching dishes: %s", str(e), exc_info=True)
            raise StoreError(message="Error fetching dishes", error=str(e))

        return [
            DishSchema.model_validate(dish)
            for dish in sort_by_name(dishes, lambda d: d.dish_name)
        ]

    async def _find(self, db: AsyncSession, dish_id: str) -> Optional[Dish]:
        result = await db.execute(select(Dish).where(Dish.dish_id == dish_id))
        return result.scalar_one_or_none()

    async def _get_or_404(self, db: AsyncSession, dish_id: str, error_message: str) -> Dish:
        try:
            dish = await self._find(db, dish_id)
        except SQLAlchemyError as e:
            logger.error("%s %s: %s", error_message, dish_id, str(e))
            raise StoreError(message=error_message, error=str(e))
        if dish is None:
            raise NotFoundError(resource="Dish", resource_id=dish_id)
        return dish

    async def _commit(self, db: AsyncSession, error_message: str, dish: Optional[Dish] = None) -> None:
        """Commit the pending write; on failure roll back and raise StoreError."""
        try:
            await db.commit()
            if dish is not None:
                await db.refresh(dish)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("%s: %s", error_message, str(e), exc_info=True)
            raise StoreError(message=error_message, error=str(e))

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_dish(
        self,
        db: AsyncSession,
        payload: DishCreate,
        publisher: BroadcastPublisher,
    ) -> DishSchema:
        """
        Insert a new dish and publish `dish-created`.

        Raises:
            ValidationError: A required field is missing/blank, or dishId exists
            StoreError: The insert or commit failed
        """
        dish_id = _clean(payload.dish_id)
        dish_name = _clean(payload.dish_name)
        image_url = _clean(payload.image_url)
        if not dish_id or not dish_name or not image_url:
            raise ValidationError(message=REQUIRED_FIELDS_MESSAGE)

        duplicate = ValidationError(
            message=f"Dish with ID {dish_id} already exists",
            field="dishId",
        )
        try:
            if await self._find(db, dish_id) is not None:
                raise duplicate
        except SQLAlchemyError as e:
            raise StoreError(message="Error creating dish", error=str(e))

        dish = Dish(
            dish_id=dish_id,
            dish_name=dish_name,
            image_url=image_url,
            is_published=bool(payload.is_published),
        )
        db.add(dish)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent create of the same dishId
            await db.rollback()
            raise duplicate
        except SQLAlchemyError as e:
            await db.rollback()
            raise StoreError(message="Error creating dish", error=str(e))
        await self._commit(db, "Error creating dish", dish)

        snapshot = DishSchema.model_validate(dish)
        logger.info("Dish created: %s (%s)", dish_id, dish_name)
        await publisher.publish(DishCreatedEvent(dish=snapshot))
        return snapshot

    async def update_dish(
        self,
        db: AsyncSession,
        dish_id: str,
        payload: DishUpdate,
        publisher: BroadcastPublisher,
    ) -> DishSchema:
        """
        Apply the supplied fields and publish `dish-updated`.

        Fields absent from the body are left untouched. A supplied name or
        URL must be non-blank; a supplied null publish flag is ignored.

        Raises:
            NotFoundError: No dish with this dishId
            ValidationError: Supplied dishName/imageUrl is blank
            StoreError: The write or commit failed
        """
        dish = await self._get_or_404(db, dish_id, "Error updating dish")

        changes: Dict[str, Any] = payload.supplied_fields()
        for field, label in (("dish_name", "dishName"), ("image_url", "imageUrl")):
            if field in changes:
                value = _clean(changes[field])
                if not value:
                    raise ValidationError(message=f"{label} cannot be empty", field=label)
                changes[field] = value
        if changes.get("is_published", False) is None:
            del changes["is_published"]

        for field, value in changes.items():
            setattr(dish, field, value)
        await self._commit(db, "Error updating dish", dish)

        snapshot = DishSchema.model_validate(dish)
        logger.info("Dish updated: %s (fields: %s)", dish_id, ", ".join(sorted(changes)) or "none")
        await publisher.publish(DishUpdatedEvent(dish_id=dish.dish_id, dish=snapshot))
        return snapshot

    async def delete_dish(
        self,
        db: AsyncSession,
        dish_id: str,
        publisher: BroadcastPublisher,
    ) -> None:
        """
        Remove a dish permanently and publish `dish-deleted`.

        Raises:
            NotFoundError: No dish with this dishId
            StoreError: The delete or commit failed
        """
        dish = await self._get_or_404(db, dish_id, "Error deleting dish")
        try:
            await db.delete(dish)
        except SQLAlchemyError as e:
            await db.rollback()
            raise StoreError(message="Error deleting dish", error=str(e))
        await self._commit(db, "Error deleting dish")

        logger.info("Dish deleted: %s", dish_id)
        await publisher.publish(DishDeletedEvent(dish_id=dish_id))

    async def toggle_publish(
        self,
        db: AsyncSession,
        dish_id: str,
        publisher: BroadcastPublisher,
    ) -> DishSchema:
        """
        Flip isPublished and publish `publish-status-updated`.

        Two toggles with no write in between restore the original value.

        Raises:
            NotFoundError: No dish with this dishId
            StoreError: The write or commit failed
        """
        dish = await self._get_or_404(db, dish_id, "Error toggling publish status")
        dish.is_published = not dish.is_published
        await self._commit(db, "Error toggling publish status", dish)

        snapshot = DishSchema.model_validate(dish)
        logger.info("Dish %s is_published=%s", dish_id, snapshot.is_published)
        await publisher.publish(
            PublishStatusUpdatedEvent(
                dish_id=dish.dish_id,
                is_published=snapshot.is_published,
                dish=snapshot,
            )
        )
        return snapshot


# ── Singleton Instance ────────────────────────────────────────────────────
dish_service = DishService()
