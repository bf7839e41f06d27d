"""
DishManager Client — Sync Layer Tests
======================================

What:  DishSync against the real API (httpx ASGITransport) and against a
       mocked DishApiClient for failure paths.

What we test:
    ✅ LOADING → READY / LOADING → ERROR → retry() → READY
    ✅ Events applied only while READY, with notifications
    ✅ Toggle applies the REST response at once; the echo is a no-op
    ✅ Create / update / delete re-fetch the snapshot
    ✅ Failed mutations notify and leave state unchanged
    ✅ Two clients converge on the same list from the broadcast stream
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dishmanager.client.api import ApiError, DishApiClient
from dishmanager.client.state import SyncStatus
from dishmanager.client.sync import DishSync, describe_event
from dishmanager.schemas.dish import DishSchema
from dishmanager.schemas.events import DishCreatedEvent, DishDeletedEvent, PublishStatusUpdatedEvent


class Notifications:
    def __init__(self):
        self.items = []

    def __call__(self, level, message):
        self.items.append((level, message))

    @property
    def errors(self):
        return [message for level, message in self.items if level == "error"]


@pytest_asyncio.fixture
async def api(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test/api") as http:
        yield DishApiClient(client=http)


@pytest.fixture
def notes():
    return Notifications()


def dish(dish_id, name, published=False):
    return DishSchema(dish_id=dish_id, dish_name=name, image_url=f"http://x/{dish_id}.jpg", is_published=published)


class TestMount:

    @pytest.mark.asyncio
    async def test_mount_loads_ordered_snapshot(self, api, notes):
        await api.create_dish("d1", "Pho", "http://x/1.jpg")
        await api.create_dish("d2", "apple pie", "http://x/2.jpg")
        sync = DishSync(api, notify=notes)

        assert sync.status is SyncStatus.LOADING
        assert await sync.mount() is SyncStatus.READY
        assert [d.dish_id for d in sync.dishes] == ["d2", "d1"]

    @pytest.mark.asyncio
    async def test_failed_snapshot_enters_error_then_retry_recovers(self, notes):
        api = MagicMock(spec=DishApiClient)
        api.list_dishes = AsyncMock(side_effect=[ApiError(500, "Error fetching dishes"), [dish("d1", "Pho")]])
        sync = DishSync(api, notify=notes)

        assert await sync.mount() is SyncStatus.ERROR
        assert sync.error == "Error fetching dishes"

        assert await sync.retry() is SyncStatus.READY
        assert sync.error is None
        assert len(sync.dishes) == 1


class TestEvents:

    @pytest.mark.asyncio
    async def test_events_ignored_until_ready(self, notes):
        api = MagicMock(spec=DishApiClient)
        sync = DishSync(api, notify=notes)

        sync.apply_event(DishCreatedEvent(dish=dish("d1", "Pho")))

        assert sync.dishes == []
        assert notes.items == []

    @pytest.mark.asyncio
    async def test_applied_events_notify(self, notes):
        api = MagicMock(spec=DishApiClient)
        api.list_dishes = AsyncMock(return_value=[])
        sync = DishSync(api, notify=notes)
        await sync.mount()

        sync.apply_event(DishCreatedEvent(dish=dish("d1", "Pho")))
        sync.apply_event(PublishStatusUpdatedEvent(dish_id="d1", is_published=True, dish=dish("d1", "Pho", True)))
        sync.apply_event(DishDeletedEvent(dish_id="d1"))

        assert [message for _, message in notes.items] == [
            'Dish "Pho" created!',
            'Dish "Pho" published',
            "Dish deleted!",
        ]
        assert sync.dishes == []

    def test_describe_unpublished(self):
        event = PublishStatusUpdatedEvent(dish_id="d1", is_published=False, dish=dish("d1", "Pho"))
        assert describe_event(event) == 'Dish "Pho" unpublished'

    @pytest.mark.asyncio
    async def test_registers_with_connection(self):
        connection = MagicMock()
        sync = DishSync(MagicMock(spec=DishApiClient), connection=connection)
        connection.on_event.assert_called_once_with(sync.apply_event)


class TestLocalMutations:

    @pytest.mark.asyncio
    async def test_toggle_applies_response_and_echo_is_noop(self, api, broadcaster, notes):
        await api.create_dish("d1", "Pho", "http://x/1.jpg")
        sync = DishSync(api, notify=notes)
        await sync.mount()

        result = await sync.toggle("d1")

        assert result.is_published is True
        assert sync.dishes[0].is_published is True
        snapshot = list(sync.dishes)
        sync.apply_event(broadcaster.events[-1])
        assert sync.dishes == snapshot

    @pytest.mark.asyncio
    async def test_create_refetches_snapshot(self, api, notes):
        sync = DishSync(api, notify=notes)
        await sync.mount()

        created = await sync.create("d1", "Pho", "http://x/1.jpg")

        assert created.dish_id == "d1"
        assert [d.dish_id for d in sync.dishes] == ["d1"]
        assert ("success", "Dish created successfully!") in notes.items

    @pytest.mark.asyncio
    async def test_update_and_delete_refetch(self, api, notes):
        await api.create_dish("d1", "Pho", "http://x/1.jpg")
        sync = DishSync(api, notify=notes)
        await sync.mount()

        await sync.update("d1", dish_name="Pho Bo")
        assert sync.dishes[0].dish_name == "Pho Bo"

        assert await sync.delete("d1") is True
        assert sync.dishes == []

    @pytest.mark.asyncio
    async def test_create_with_missing_field_sends_nothing(self, notes):
        api = MagicMock(spec=DishApiClient)
        api.create_dish = AsyncMock()
        sync = DishSync(api, notify=notes)

        assert await sync.create("d1", "", "http://x/1.jpg") is None

        api.create_dish.assert_not_awaited()
        assert notes.errors == ["Please fill in all required fields"]

    @pytest.mark.asyncio
    async def test_failed_mutations_leave_state_unchanged(self, api, notes):
        await api.create_dish("d1", "Pho", "http://x/1.jpg")
        sync = DishSync(api, notify=notes)
        await sync.mount()
        before = list(sync.dishes)

        assert await sync.create("d1", "Dup", "http://x/dup.jpg") is None
        assert await sync.toggle("ghost") is None
        assert await sync.update("ghost", dish_name="X") is None
        assert await sync.delete("ghost") is False

        assert sync.dishes == before
        assert sync.status is SyncStatus.READY
        assert notes.errors == [
            "Dish with ID d1 already exists",
            "Dish with ID ghost not found",
            "Dish with ID ghost not found",
            "Dish with ID ghost not found",
        ]


class TestConvergence:

    @pytest.mark.asyncio
    async def test_two_clients_follow_the_broadcast_stream(self, api, broadcaster):
        watcher = DishSync(api, notify=Notifications())
        actor = DishSync(api, notify=Notifications())
        await watcher.mount()
        await actor.mount()

        await actor.create("dish-010", "Tiramisu", "http://x/t.jpg")
        await actor.toggle("dish-010")
        for event in broadcaster.events:
            watcher.apply_event(event)

        assert [(d.dish_id, d.is_published) for d in watcher.dishes] == [("dish-010", True)]
        assert [(d.dish_id, d.is_published) for d in actor.dishes] == [("dish-010", True)]
        assert watcher.stats.published == 1

        await actor.delete("dish-010")
        watcher.apply_event(broadcaster.events[-1])

        assert watcher.dishes == []
        assert actor.dishes == []
