"""
DishManager Client — Sync Layer
===============================

What:  Keeps a local, name-ordered copy of the dish list in step with the
       server: one REST snapshot, then broadcast events folded in.
Who:   Dashboards and scripts that display or edit dishes.

State Machine:
    LOADING ──snapshot ok──→ READY
       │
       └──snapshot failed──→ ERROR ──retry()──→ LOADING

Local Mutations:
    toggle()                  applies isPublished from the REST response at
                              once; the broadcast echo is then a no-op
    create/update/delete()    leave local state alone and re-fetch the whole
                              snapshot after a successful response

Failures never touch local state. They are reported through the `notify`
hook, as are the broadcast events applied while READY.
"""

import logging
from typing import Any, Callable, List, Optional

from dishmanager.client.api import ApiError, DishApiClient
from dishmanager.client.config import ClientSettings
from dishmanager.client.connection import BroadcastConnection
from dishmanager.client.state import (
    DishStats,
    SyncStatus,
    apply_event,
    compute_stats,
    set_published,
    sort_dishes,
)
from dishmanager.schemas.dish import DishSchema
from dishmanager.schemas.events import (
    DishCreatedEvent,
    DishDeletedEvent,
    DishEvent,
    DishUpdatedEvent,
    PublishStatusUpdatedEvent,
)

logger = logging.getLogger(__name__)

# notify(level, message); level is "success" or "error"
Notifier = Callable[[str, str], None]


def log_notifier(level: str, message: str) -> None:
    if level == "error":
        logger.error(message)
    else:
        logger.info(message)


def describe_event(event: DishEvent) -> str:
    """Human-readable notification text for an applied broadcast event."""
    if isinstance(event, DishCreatedEvent):
        return f'Dish "{event.dish.dish_name}" created!'
    if isinstance(event, DishUpdatedEvent):
        return f'Dish "{event.dish.dish_name}" updated!'
    if isinstance(event, DishDeletedEvent):
        return "Dish deleted!"
    if isinstance(event, PublishStatusUpdatedEvent):
        state = "published" if event.is_published else "unpublished"
        return f'Dish "{event.dish.dish_name}" {state}'
    return event.event_name


class DishSync:
    def __init__(
        self,
        api: DishApiClient,
        connection: Optional[BroadcastConnection] = None,
        notify: Optional[Notifier] = None,
    ):
        self.api = api
        self.connection = connection
        self.notify: Notifier = notify or log_notifier
        self.status = SyncStatus.LOADING
        self.error: Optional[str] = None
        self.dishes: List[DishSchema] = []

        if connection is not None:
            connection.on_event(self.apply_event)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        notify: Optional[Notifier] = None,
    ) -> "DishSync":
        settings = settings or ClientSettings()
        api = DishApiClient(settings.api_url, timeout=settings.request_timeout)
        connection = BroadcastConnection(
            settings.socket_url,
            attempts=settings.reconnect_attempts,
            delay=settings.reconnect_delay,
        )
        return cls(api, connection, notify)

    # ── Snapshot ──────────────────────────────────────────────────────────

    async def mount(self) -> SyncStatus:
        """Fetch the snapshot: READY on success, ERROR (with message) otherwise."""
        self.status = SyncStatus.LOADING
        self.error = None
        try:
            dishes = await self.api.list_dishes()
        except ApiError as e:
            logger.error("Error fetching dishes: %s", str(e))
            self.error = e.message or "Failed to fetch dishes"
            self.status = SyncStatus.ERROR
            return self.status
        self.dishes = sort_dishes(dishes)
        self.status = SyncStatus.READY
        logger.debug("Loaded %d dishes", len(self.dishes))
        return self.status

    async def retry(self) -> SyncStatus:
        return await self.mount()

    async def refresh(self) -> SyncStatus:
        return await self.mount()

    async def start(self) -> SyncStatus:
        """Load the snapshot and, when a connection is attached, open it."""
        status = await self.mount()
        if self.connection is not None:
            await self.connection.connect()
        return status

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.disconnect()
        await self.api.aclose()

    # ── Broadcast Events ──────────────────────────────────────────────────

    def apply_event(self, event: DishEvent) -> None:
        # A snapshot in flight (or a failed one) will be replaced wholesale
        if self.status is not SyncStatus.READY:
            logger.debug("Ignoring %s while %s", event.event_name, self.status.value)
            return
        self.dishes = apply_event(self.dishes, event)
        self.notify("success", describe_event(event))

    @property
    def stats(self) -> DishStats:
        return compute_stats(self.dishes)

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and self.connection.is_connected

    # ── Local Mutations ───────────────────────────────────────────────────

    async def toggle(self, dish_id: str) -> Optional[DishSchema]:
        try:
            dish = await self.api.toggle_publish(dish_id)
        except ApiError as e:
            self.notify("error", e.message or "Failed to toggle publish status")
            return None
        self.dishes = set_published(self.dishes, dish.dish_id, dish.is_published)
        state = "published" if dish.is_published else "unpublished"
        self.notify("success", f"Dish {state} successfully!")
        return dish

    async def create(
        self,
        dish_id: str,
        dish_name: str,
        image_url: str,
        is_published: bool = False,
    ) -> Optional[DishSchema]:
        if not (dish_id and dish_name and image_url):
            self.notify("error", "Please fill in all required fields")
            return None
        try:
            dish = await self.api.create_dish(dish_id, dish_name, image_url, is_published)
        except ApiError as e:
            self.notify("error", e.message or "Failed to save dish")
            return None
        self.notify("success", "Dish created successfully!")
        await self.refresh()
        return dish

    async def update(self, dish_id: str, **fields: Any) -> Optional[DishSchema]:
        try:
            dish = await self.api.update_dish(dish_id, **fields)
        except ApiError as e:
            self.notify("error", e.message or "Failed to save dish")
            return None
        self.notify("success", "Dish updated successfully!")
        await self.refresh()
        return dish

    async def delete(self, dish_id: str) -> bool:
        try:
            await self.api.delete_dish(dish_id)
        except ApiError as e:
            self.notify("error", e.message or "Failed to delete dish")
            return False
        self.notify("success", "Dish deleted successfully!")
        await self.refresh()
        return True
