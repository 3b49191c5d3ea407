"""Unit tests for SimulationLink (src/viewer/link.py).

The WebSocket is replaced by an in-memory fake passed through the
``connect`` hook, so no server is needed.
"""

from __future__ import annotations

import asyncio
import json

import pytest
from websockets.protocol import State

from viewer.link import LinkNotReady, SimulationLink, validate_customer_count

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeWebSocket:
    """Async-iterable connection yielding canned messages, then closing."""

    def __init__(self, messages=()) -> None:
        self._messages = list(messages)
        self.state = State.OPEN
        self.sent: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.state = State.CLOSED
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            raise StopAsyncIteration
        return self._messages.pop(0)

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        self.state = State.CLOSED


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _connected_link(ws: FakeWebSocket | None = None) -> tuple[SimulationLink, FakeWebSocket]:
    ws = ws or FakeWebSocket()
    link = SimulationLink("ws://test/ws", on_message=lambda m: None)
    link._ws = ws
    return link, ws


# ---------------------------------------------------------------------------
# validate_customer_count
# ---------------------------------------------------------------------------

class TestValidateCustomerCount:

    @pytest.mark.parametrize("value,expected", [
        (1, 1),
        (25, 25),
        ("10", 10),
        (" 7 ", 7),
    ])
    def test_valid(self, value, expected):
        assert validate_customer_count(value) == expected

    @pytest.mark.parametrize("value", [0, -3, "0", "abc", "", "2.5", None, True, False])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            validate_customer_count(value)


# ---------------------------------------------------------------------------
# send_start
# ---------------------------------------------------------------------------

class TestSendStart:

    def test_sends_start_command(self):
        link, ws = _connected_link()
        message = _run(link.send_start(10))
        assert message == {"action": "start", "data": {"customerCount": 10}}
        assert len(ws.sent) == 1
        assert json.loads(ws.sent[0]) == {"action": "start", "data": {"customerCount": 10}}
        assert link.stats["commands_sent"] == 1

    def test_string_count_coerced(self):
        link, ws = _connected_link()
        _run(link.send_start("3"))
        assert json.loads(ws.sent[0])["data"]["customerCount"] == 3

    def test_not_connected_raises(self):
        link = SimulationLink("ws://test/ws", on_message=lambda m: None)
        assert link.connected is False
        with pytest.raises(LinkNotReady):
            _run(link.send_start(5))

    def test_closed_socket_sends_nothing(self):
        link, ws = _connected_link()
        ws.state = State.CLOSED
        with pytest.raises(LinkNotReady):
            _run(link.send_start(5))
        assert ws.sent == []

    def test_invalid_count_sends_nothing(self):
        link, ws = _connected_link()
        with pytest.raises(ValueError):
            _run(link.send_start(0))
        with pytest.raises(ValueError):
            _run(link.send_start("abc"))
        assert ws.sent == []


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:

    def test_delivers_messages_in_order(self):
        received = []
        ws = FakeWebSocket(["a", "b", "c"])
        link = None

        def on_message(message):
            received.append(message)
            if message == "c":
                link._running = False

        link = SimulationLink("ws://test/ws", on_message, reconnect_delay=0,
                              connect=lambda url: ws)
        _run(link.run())
        assert received == ["a", "b", "c"]
        assert link.stats["messages_received"] == 3
        assert link.stats["connects"] == 1
        assert link.connected is False

    def test_reconnects_after_failure(self):
        attempts = []
        received = []
        link = None

        def connect(url):
            attempts.append(url)
            if len(attempts) == 1:
                raise OSError("connection refused")
            return FakeWebSocket(["hello"])

        def on_message(message):
            received.append(message)
            link._running = False

        link = SimulationLink("ws://test/ws", on_message, reconnect_delay=0, connect=connect)
        _run(link.run())
        assert attempts == ["ws://test/ws", "ws://test/ws"]
        assert received == ["hello"]
        assert "connection refused" in link.stats["last_error"]
        assert link.stats["connects"] == 1

    def test_reconnects_after_server_close(self):
        sockets = [FakeWebSocket(["first"]), FakeWebSocket(["second"])]
        received = []
        link = None

        def on_message(message):
            received.append(message)
            if message == "second":
                link._running = False

        link = SimulationLink("ws://test/ws", on_message, reconnect_delay=0,
                              connect=lambda url: sockets.pop(0))
        _run(link.run())
        assert received == ["first", "second"]
        assert link.stats["connects"] == 2

    def test_handler_error_does_not_end_receive_loop(self):
        received = []
        ws = FakeWebSocket(["bad", "good"])
        link = None

        def on_message(message):
            if message == "bad":
                raise RuntimeError("handler failed")
            received.append(message)
            link._running = False

        link = SimulationLink("ws://test/ws", on_message, reconnect_delay=0,
                              connect=lambda url: ws)
        _run(link.run())
        assert received == ["good"]
        assert link.stats["handler_errors"] == 1
        assert link.stats["messages_received"] == 2
        assert link.stats["connects"] == 1

    def test_stop_closes_socket(self):
        link, ws = _connected_link()
        _run(link.stop())
        assert ws.state is State.CLOSED
        assert link.connected is False
