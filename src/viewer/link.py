"""SimulationLink - WebSocket connection to the store simulation server.

Receives full-state snapshots and hands each raw message to a callback
(normally ``ViewerEngine.handle_message``) on the event loop, one message at
a time.  Sends the ``start`` command:

    {"action": "start", "data": {"customerCount": N}}

The server closes the socket when the last customer leaves.  The link logs
the closure and reconnects after ``reconnect_delay`` seconds until stop()
is called.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

from loguru import logger
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.protocol import State


class LinkNotReady(RuntimeError):
    """The WebSocket is not open; the command was not sent."""


def validate_customer_count(value: Any) -> int:
    """Coerce a user-supplied customer count.

    Raises:
        ValueError: If the value is not an integer >= 1.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid customer count: {value!r}")
    try:
        count = int(str(value).strip())
    except ValueError:
        raise ValueError(f"Invalid customer count: {value!r}") from None
    if count < 1:
        raise ValueError(f"Customer count must be at least 1, got {count}")
    return count


class SimulationLink:
    """Reconnecting WebSocket client for the simulation server."""

    def __init__(
        self,
        url: str,
        on_message: Callable[[str | bytes], Any],
        reconnect_delay: float = 2.0,
        connect: Callable[..., Any] = ws_connect,
    ) -> None:
        self._url = url
        self._on_message = on_message
        self._reconnect_delay = reconnect_delay
        self._connect = connect
        self._ws = None
        self._running = False
        # Stats
        self._messages_received: int = 0
        self._commands_sent: int = 0
        self._connects: int = 0
        self._handler_errors: int = 0
        self._last_error: str = ""

    @property
    def url(self) -> str:
        return self._url

    @property
    def connected(self) -> bool:
        ws = self._ws
        return ws is not None and ws.state is State.OPEN

    @property
    def stats(self) -> dict:
        return {
            "url": self._url,
            "connected": self.connected,
            "connects": self._connects,
            "messages_received": self._messages_received,
            "commands_sent": self._commands_sent,
            "handler_errors": self._handler_errors,
            "last_error": self._last_error,
        }

    async def run(self) -> None:
        """Receive loop.  Returns only after stop()."""
        self._running = True
        while self._running:
            try:
                async with self._connect(self._url) as ws:
                    self._ws = ws
                    self._connects += 1
                    logger.info(f"Simulation link connected: {self._url}")
                    async for message in ws:
                        self._messages_received += 1
                        try:
                            self._on_message(message)
                        except Exception as e:
                            self._handler_errors += 1
                            logger.exception(f"Simulation message handler error: {e}")
                logger.info("Simulation link closed by server")
            except ConnectionClosed as e:
                self._last_error = str(e)
                logger.warning(f"Simulation link dropped: {e}")
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                self._last_error = str(e)
                logger.warning(f"Simulation link failed ({self._url}): {e}")
            finally:
                self._ws = None

            if not self._running:
                break
            await asyncio.sleep(self._reconnect_delay)

    async def stop(self) -> None:
        self._running = False
        ws = self._ws
        if ws is not None:
            await ws.close()

    async def send_start(self, customer_count: Any) -> dict:
        """Ask the server to start a run with ``customer_count`` customers.

        Raises:
            ValueError: If the count is invalid (nothing is sent).
            LinkNotReady: If the connection is not open (nothing is sent).
        """
        count = validate_customer_count(customer_count)
        if not self.connected:
            raise LinkNotReady(
                "Connection to the simulation server is not established. "
                "Try again once the viewer has reconnected."
            )
        message = {"action": "start", "data": {"customerCount": count}}
        await self._ws.send(json.dumps(message))
        self._commands_sent += 1
        logger.info(f"Start command sent: {count} customers")
        return message
