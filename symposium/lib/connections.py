"""Connection streams for the SSE transport.

Each client holds one event stream. Tool calls posted for a connection run
as background tasks and their replies are pushed onto that stream.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Coroutine
from uuid import uuid4

from symposium.lib.exceptions import ConnectionNotFoundError
from symposium.lib.streaming import EventBuilder, StreamEvent

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages"


class Connection:
    """
    One client event stream.

    Supports:
    - Sequenced events through an EventBuilder
    - Queueing events emitted before the client starts reading
    - Background tasks tied to the connection's lifetime
    """

    def __init__(self, connection_id: str | None = None):
        self.connection_id = connection_id or uuid4().hex
        self.builder = EventBuilder()
        self._queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def endpoint(self) -> str:
        return f"{MESSAGES_PATH}?sessionId={self.connection_id}"

    async def emit(self, event: StreamEvent) -> None:
        """Emit an event to the stream."""
        if self._closed:
            logger.warning(
                f"Dropping {event.event_type} event for closed connection {self.connection_id}"
            )
            return
        await self._queue.put(event)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run a coroutine in the background for this connection."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def close(self) -> None:
        """Close the stream and cancel calls still running for it."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        await self._queue.put(None)

    async def events(self) -> AsyncIterator[dict[str, str]]:
        """Iterate over events formatted for ``EventSourceResponse``."""
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield event.to_sse()


class ConnectionManager:
    """Registry of open connection streams."""

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    async def open(self) -> Connection:
        """Open a connection and announce its message endpoint."""
        connection = Connection()
        self._connections[connection.connection_id] = connection
        await connection.emit(connection.builder.endpoint(connection.endpoint))
        logger.info(f"New client connected, sessionId: {connection.connection_id}")
        return connection

    def get(self, connection_id: str) -> Connection:
        """
        Get an open connection.

        Raises:
            ConnectionNotFoundError: If the connection is unknown or closed
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            raise ConnectionNotFoundError(connection_id)
        return connection

    async def close(self, connection_id: str) -> None:
        """Close and forget a connection. Session bindings are kept."""
        connection = self._connections.pop(connection_id, None)
        if connection is not None:
            await connection.close()
            logger.info(f"Client disconnected, sessionId: {connection_id}")

    async def shutdown(self) -> None:
        """Close every connection."""
        for connection_id in list(self._connections):
            await self.close(connection_id)


# =============================================================================
# Module-level manager instance
# =============================================================================


_default_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the default connection manager."""
    global _default_manager
    if _default_manager is None:
        _default_manager = ConnectionManager()
    return _default_manager


async def close_connection_manager() -> None:
    """Close all connections of the default manager."""
    global _default_manager
    if _default_manager:
        await _default_manager.shutdown()
        _default_manager = None
