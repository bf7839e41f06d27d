"""
DishManager Client — Local State Transformations
================================================

What:  The client's read-through cache of dishes and the pure functions that
       fold broadcast events into it.
Who:   DishSync applies every received event through `apply_event`.

Event Rules:
    dish-created            append if dishId absent, then re-sort by name
    dish-updated            replace the matching record wholesale
    dish-deleted            remove the matching record
    publish-status-updated  set isPublished on the matching record

Every rule returns a new list and leaves its input untouched. Applying the
same event twice gives the same result as applying it once, so a local toggle
followed by its broadcast echo is harmless.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from dishmanager.ordering import sort_by_name
from dishmanager.schemas.dish import DishSchema
from dishmanager.schemas.events import (
    DishCreatedEvent,
    DishDeletedEvent,
    DishEvent,
    DishUpdatedEvent,
    PublishStatusUpdatedEvent,
)


class SyncStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class DishStats:
    total: int
    published: int
    unpublished: int


def sort_dishes(dishes: Sequence[DishSchema]) -> List[DishSchema]:
    return sort_by_name(dishes, lambda dish: dish.dish_name)


def compute_stats(dishes: Sequence[DishSchema]) -> DishStats:
    published = sum(1 for dish in dishes if dish.is_published)
    return DishStats(total=len(dishes), published=published, unpublished=len(dishes) - published)


def set_published(dishes: Sequence[DishSchema], dish_id: str, is_published: bool) -> List[DishSchema]:
    return [
        dish.model_copy(update={"is_published": is_published}) if dish.dish_id == dish_id else dish
        for dish in dishes
    ]


def apply_event(dishes: Sequence[DishSchema], event: DishEvent) -> List[DishSchema]:
    """Return the collection after `event`; unknown dish ids are a no-op."""
    if isinstance(event, DishCreatedEvent):
        if any(dish.dish_id == event.dish.dish_id for dish in dishes):
            return list(dishes)
        return sort_dishes([*dishes, event.dish])

    if isinstance(event, DishUpdatedEvent):
        return [event.dish if dish.dish_id == event.dish_id else dish for dish in dishes]

    if isinstance(event, DishDeletedEvent):
        return [dish for dish in dishes if dish.dish_id != event.dish_id]

    if isinstance(event, PublishStatusUpdatedEvent):
        return set_published(dishes, event.dish_id, event.is_published)

    raise TypeError(f"Unsupported event type: {type(event).__name__}")
