"""SSE transport endpoints.

A client opens ``GET /sse`` and receives an ``endpoint`` event naming the
URL to POST its JSON-RPC messages to. Replies arrive as ``message`` events
on the same stream.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sse_starlette.sse import EventSourceResponse

from symposium.config import Settings, get_settings
from symposium.lib.connections import (
    Connection,
    ConnectionManager,
    get_connection_manager,
)
from symposium.lib.dispatch import ToolDispatcher, get_dispatcher

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/sse")
async def open_stream(
    manager: ConnectionManager = Depends(get_connection_manager),
    settings: Settings = Depends(get_settings),
) -> EventSourceResponse:
    """Open an event stream for a new connection."""
    connection = await manager.open()

    async def event_generator():
        try:
            async for event in connection.events():
                yield event
        finally:
            await manager.close(connection.connection_id)

    return EventSourceResponse(event_generator(), ping=settings.sse_ping_seconds)


@router.post("/messages", status_code=202)
async def post_message(
    request: Request,
    session_id: str | None = Query(default=None, alias="sessionId"),
    x_session_id: str | None = Header(default=None),
    manager: ConnectionManager = Depends(get_connection_manager),
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    """
    Accept a JSON-RPC message for a connection.

    The message is handled in the background; its reply is pushed onto the
    connection's stream.
    """
    connection_id = x_session_id or session_id
    if not connection_id:
        raise HTTPException(status_code=400, detail="Session ID is required")

    connection = manager.get(connection_id)

    try:
        message = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")

    connection.spawn(deliver(dispatcher, connection, message))
    return {"status": "accepted", "sessionId": connection_id}


async def deliver(
    dispatcher: ToolDispatcher, connection: Connection, message: Any
) -> None:
    """Handle a message and push its reply onto the connection stream."""
    try:
        reply = await dispatcher.handle_message(message, connection.connection_id)
    except Exception as e:
        logger.exception(f"Error processing message for {connection.connection_id}")
        await connection.emit(
            connection.builder.error(str(e), {"type": type(e).__name__})
        )
        return

    if reply is not None:
        await connection.emit(connection.builder.message(reply))
