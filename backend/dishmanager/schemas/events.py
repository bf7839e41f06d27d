"""
DishManager Backend — Broadcast Event Payloads
===============================================

What:  Names and payload shapes of the events published after each mutation.
Who:   Built by DishService, emitted by the broadcaster, parsed by the client
       sync layer.

Event Inventory:
    dish-created            {dish}
    dish-updated            {dishId, dish}
    dish-deleted            {dishId}
    publish-status-updated  {dishId, isPublished, dish}

Every payload carries the post-mutation snapshot (except delete, which has
nothing left to snapshot).
"""

from typing import Any, ClassVar, Dict, Type

from dishmanager.schemas.dish import CamelModel, DishSchema

DISH_CREATED = "dish-created"
DISH_UPDATED = "dish-updated"
DISH_DELETED = "dish-deleted"
PUBLISH_STATUS_UPDATED = "publish-status-updated"


class DishEvent(CamelModel):
    """Base class for broadcast payloads."""

    event_name: ClassVar[str] = ""

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class DishCreatedEvent(DishEvent):
    event_name: ClassVar[str] = DISH_CREATED
    dish: DishSchema


class DishUpdatedEvent(DishEvent):
    event_name: ClassVar[str] = DISH_UPDATED
    dish_id: str
    dish: DishSchema


class DishDeletedEvent(DishEvent):
    event_name: ClassVar[str] = DISH_DELETED
    dish_id: str


class PublishStatusUpdatedEvent(DishEvent):
    event_name: ClassVar[str] = PUBLISH_STATUS_UPDATED
    dish_id: str
    is_published: bool
    dish: DishSchema


EVENT_TYPES: Dict[str, Type[DishEvent]] = {
    DISH_CREATED: DishCreatedEvent,
    DISH_UPDATED: DishUpdatedEvent,
    DISH_DELETED: DishDeletedEvent,
    PUBLISH_STATUS_UPDATED: PublishStatusUpdatedEvent,
}


def parse_event(name: str, payload: Dict[str, Any]) -> DishEvent:
    """
    Build the typed event for a received (name, payload) pair.

    Raises:
        KeyError: Unknown event name
        pydantic.ValidationError: Payload does not match the event shape
    """
    return EVENT_TYPES[name].model_validate(payload)
