"""
DishManager Client — Broadcast Connection Tests
================================================

What:  BroadcastConnection with a mocked python-socketio AsyncClient.

What we test:
    ✅ Handlers registered for connect/disconnect and every dish event
    ✅ Bounded retries with a fixed delay, then ChannelUnavailableError
    ✅ Observable is_connected flag and listeners
    ✅ Unexpected disconnects reconnect (after engine.io teardown); disconnect() does not
    ✅ Received payloads are parsed into typed events
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from socketio.exceptions import ConnectionError as SocketConnectionError

from dishmanager.client.connection import BroadcastConnection, ChannelUnavailableError
from dishmanager.schemas.events import DishDeletedEvent


def make_client():
    client = MagicMock()
    client.connect = AsyncMock()
    client.disconnect = AsyncMock()
    client.eio.state = "disconnected"
    return client


def registered_handler(client, name):
    for call in client.on.call_args_list:
        if call.args[0] == name:
            return call.args[1]
    raise AssertionError(f"No handler registered for {name}")


class TestSetup:

    def test_registers_all_handlers(self):
        client = make_client()
        BroadcastConnection(client=client)
        names = {call.args[0] for call in client.on.call_args_list}
        assert names == {
            "connect",
            "disconnect",
            "dish-created",
            "dish-updated",
            "dish-deleted",
            "publish-status-updated",
        }

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            BroadcastConnection(attempts=0, client=make_client())


class TestConnect:

    @pytest.mark.asyncio
    async def test_connect_sets_flag_and_notifies(self):
        client = make_client()
        connection = BroadcastConnection("http://test", client=client)
        changes = []
        connection.add_listener(changes.append)

        await connection.connect()

        assert connection.is_connected is True
        assert changes == [True]
        client.connect.assert_awaited_once_with("http://test", transports=["websocket", "polling"])

    @pytest.mark.asyncio
    async def test_connect_retries_then_succeeds(self):
        client = make_client()
        client.connect.side_effect = [SocketConnectionError("refused"), None]
        connection = BroadcastConnection(attempts=3, delay=0, client=client)

        await connection.connect()

        assert client.connect.await_count == 2
        assert connection.is_connected is True

    @pytest.mark.asyncio
    async def test_gives_up_after_bounded_attempts(self):
        client = make_client()
        client.connect.side_effect = SocketConnectionError("refused")
        connection = BroadcastConnection(attempts=3, delay=0, client=client)

        with pytest.raises(ChannelUnavailableError) as exc_info:
            await connection.connect()

        assert client.connect.await_count == 3
        assert exc_info.value.attempts == 3
        assert connection.is_connected is False

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        client = make_client()
        client.connect.side_effect = RuntimeError("bad url")
        connection = BroadcastConnection(attempts=3, delay=0, client=client)

        with pytest.raises(RuntimeError):
            await connection.connect()

        assert client.connect.await_count == 1


class TestReconnect:

    @pytest.mark.asyncio
    async def test_unexpected_disconnect_reconnects(self):
        client = make_client()
        connection = BroadcastConnection(attempts=2, delay=0, client=client)
        changes = []
        connection.add_listener(changes.append)
        await connection.connect()

        await connection._on_disconnect("transport close")
        await connection._reconnect_task

        assert changes == [True, False, True]
        assert client.connect.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_reconnect_stays_down(self):
        client = make_client()
        connection = BroadcastConnection(attempts=2, delay=0, client=client)
        await connection.connect()
        client.connect.side_effect = SocketConnectionError("refused")

        await connection._on_disconnect("transport close")
        await connection._reconnect_task

        assert connection.is_connected is False
        assert client.connect.await_count == 3

    @pytest.mark.asyncio
    async def test_reconnect_retries_while_previous_transport_closes(self):
        client = make_client()
        connection = BroadcastConnection(attempts=3, delay=0, client=client)
        changes = []
        connection.add_listener(changes.append)
        await connection.connect()
        client.connect.side_effect = [ValueError("Client is not in a disconnected state"), None]

        await connection._on_disconnect("io server disconnect")
        await connection._reconnect_task

        assert connection.is_connected is True
        assert changes == [True, False, True]
        assert client.connect.await_count == 3

    @pytest.mark.asyncio
    async def test_reconnect_waits_for_engineio_teardown(self):
        client = make_client()
        connection = BroadcastConnection(attempts=1, delay=0, client=client)
        await connection.connect()
        client.eio.state = "connected"
        states_at_connect = []

        async def connect(*args, **kwargs):
            states_at_connect.append(client.eio.state)

        client.connect.side_effect = connect

        await connection._on_disconnect("io server disconnect")
        await asyncio.sleep(0.1)
        client.eio.state = "disconnected"
        await connection._reconnect_task

        assert states_at_connect == ["disconnected"]
        assert connection.is_connected is True

    @pytest.mark.asyncio
    async def test_unexpected_reconnect_error_is_logged(self, caplog):
        client = make_client()
        connection = BroadcastConnection(attempts=2, delay=0, client=client)
        await connection.connect()
        client.connect.side_effect = RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="dishmanager.client.connection"):
            await connection._on_disconnect("transport close")
            await connection._reconnect_task

        assert connection._reconnect_task.exception() is None
        assert connection.is_connected is False
        assert "Reconnect to" in caplog.text

    @pytest.mark.asyncio
    async def test_explicit_disconnect_does_not_reconnect(self):
        client = make_client()
        connection = BroadcastConnection(client=client)
        await connection.connect()

        await connection.disconnect()
        await connection._on_disconnect("io client disconnect")

        assert connection.is_connected is False
        assert connection._reconnect_task is None
        client.connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_removed_listener_is_not_called(self):
        connection = BroadcastConnection(client=make_client())
        changes = []
        connection.add_listener(changes.append)
        connection.remove_listener(changes.append)

        await connection.connect()

        assert changes == []


class TestDispatch:

    @pytest.mark.asyncio
    async def test_payload_is_parsed_and_dispatched(self):
        client = make_client()
        connection = BroadcastConnection(client=client)
        received = []
        async_received = []

        async def async_handler(event):
            async_received.append(event)

        connection.on_event(received.append)
        connection.on_event(async_handler)

        await registered_handler(client, "dish-deleted")({"dishId": "d1"})

        assert received == [DishDeletedEvent(dish_id="d1")]
        assert async_received == received

    @pytest.mark.asyncio
    async def test_malformed_payload_is_ignored(self):
        client = make_client()
        connection = BroadcastConnection(client=client)
        received = []
        connection.on_event(received.append)

        await registered_handler(client, "dish-created")({"dish": {"dishId": "d1"}})
        await registered_handler(client, "dish-deleted")(None)

        assert received == []
