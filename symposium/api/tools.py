"""Tool-call endpoints (request/response variant).

Each call names its connection in the ``X-Connection-ID`` header. A call
that has to wait for registration to close keeps the HTTP request open
until it does.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from symposium.lib.dispatch import ToolDispatcher, get_dispatcher
from symposium.lib.models import ToolDescriptor

router = APIRouter()


@router.get("/tools", response_model=list[ToolDescriptor])
async def list_tools(
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
) -> list[ToolDescriptor]:
    """List the available tools and their argument schemas."""
    return dispatcher.list_tools()


@router.post("/tools/{tool_name}")
async def call_tool(
    tool_name: str,
    arguments: dict[str, Any] | None = Body(default=None),
    x_connection_id: str | None = Header(default=None),
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    """
    Invoke a tool for a connection.

    Tool failures are returned as ``{"status": "error", ...}`` payloads.
    """
    if not x_connection_id:
        raise HTTPException(
            status_code=400,
            detail="Connection ID is required (X-Connection-ID header)",
        )

    # Unknown tools are a routing error, not a tool result
    dispatcher.resolve(tool_name)

    return await dispatcher.call(tool_name, arguments, x_connection_id)
