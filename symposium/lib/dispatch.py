"""JSON tool-call dispatcher.

Maps tool names to coordinator operations and folds every Symposium error
into a structured result, so a bad call never reaches the transport as an
exception. ``handle_message`` adds a minimal JSON-RPC 2.0 envelope for the
streamed transport.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from symposium import __version__
from symposium.coordinator.engine import SessionCoordinator, get_coordinator
from symposium.lib.exceptions import (
    RoundLimitExceededError,
    SymposiumError,
    ToolNotFoundError,
    ValidationError,
)
from symposium.lib.models import (
    ErrorResult,
    ReadArguments,
    RegisterArguments,
    StatusArguments,
    SubmitArguments,
    ToolDescriptor,
    ToolResult,
)

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

# JSON-RPC error codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

ToolHandler = Callable[[SessionCoordinator, Any, str], Awaitable[ToolResult]]


# =============================================================================
# Tool Handlers
# =============================================================================


async def _register(
    coordinator: SessionCoordinator, args: RegisterArguments, connection_key: str
) -> ToolResult:
    return await coordinator.register(
        connection_key,
        identity=args.identity,
        topic=args.topic,
        initial_text=args.initial_text,
        metadata=args.metadata,
    )


async def _submit(
    coordinator: SessionCoordinator, args: SubmitArguments, connection_key: str
) -> ToolResult:
    return await coordinator.submit(connection_key, args.text, identity=args.identity)


async def _read(
    coordinator: SessionCoordinator, args: ReadArguments, connection_key: str
) -> ToolResult:
    return await coordinator.read(connection_key)


async def _status(
    coordinator: SessionCoordinator, args: StatusArguments, connection_key: str
) -> ToolResult:
    return coordinator.status(connection_key)


@dataclass(frozen=True)
class ToolSpec:
    """A callable tool and its argument model."""

    name: str
    description: str
    arguments: type[BaseModel]
    handler: ToolHandler
    aliases: tuple[str, ...] = field(default_factory=tuple)

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=self.arguments.model_json_schema(by_alias=True),
        )


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="register-participant",
        description=(
            "Register as a participant in the debate on a prompt. Waits until "
            "registration closes and returns every initial response."
        ),
        arguments=RegisterArguments,
        handler=_register,
        aliases=("register",),
    ),
    ToolSpec(
        name="submit-response",
        description="Submit your response for the next round of the debate.",
        arguments=SubmitArguments,
        handler=_submit,
        aliases=("submit",),
    ),
    ToolSpec(
        name="get-responses",
        description=(
            "Read every response in your debate so far. Waits while "
            "registration is still open."
        ),
        arguments=ReadArguments,
        handler=_read,
        aliases=("read",),
    ),
    ToolSpec(
        name="get-session-status",
        description="Report whether your debate is still registering or ready.",
        arguments=StatusArguments,
        handler=_status,
        aliases=("status",),
    ),
)


def error_result(exc: SymposiumError) -> dict[str, Any]:
    """Convert a Symposium error into a tool result payload."""
    result = ErrorResult(
        error=type(exc).__name__.removesuffix("Error"),
        message=exc.message,
    )
    if isinstance(exc, RoundLimitExceededError):
        result.max_rounds = exc.max_rounds
        result.rounds_remaining = exc.rounds_remaining
    return result.to_payload()


# =============================================================================
# Dispatcher
# =============================================================================


class ToolDispatcher:
    """Routes tool calls to a SessionCoordinator."""

    def __init__(
        self,
        coordinator: SessionCoordinator,
        tools: tuple[ToolSpec, ...] = TOOLS,
    ):
        self.coordinator = coordinator
        self.tools = tools
        self._by_name: dict[str, ToolSpec] = {}
        for spec in tools:
            self._by_name[spec.name] = spec
            for alias in spec.aliases:
                self._by_name[alias] = spec

    def list_tools(self) -> list[ToolDescriptor]:
        return [spec.descriptor() for spec in self.tools]

    def resolve(self, name: str) -> ToolSpec:
        """
        Look up a tool by name or alias.

        Raises:
            ToolNotFoundError: If no tool has this name
        """
        spec = self._by_name.get(name)
        if spec is None:
            raise ToolNotFoundError(name)
        return spec

    def _validate(self, spec: ToolSpec, arguments: dict[str, Any]) -> BaseModel:
        try:
            return spec.arguments.model_validate(arguments)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = ".".join(str(part) for part in first["loc"])
            raise ValidationError(
                f"Invalid argument '{field_name}' for {spec.name}: {first['msg']}",
                field=field_name,
                value=first.get("input"),
            ) from e

    async def call(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        connection_key: str,
    ) -> dict[str, Any]:
        """
        Invoke a tool on behalf of a connection.

        Args:
            name: Tool name or alias
            arguments: Raw JSON arguments
            connection_key: Identifier of the calling connection

        Returns:
            The tool result payload; failures are error payloads
        """
        try:
            spec = self.resolve(name)
            args = self._validate(spec, arguments or {})
            result = await spec.handler(self.coordinator, args, connection_key)
        except SymposiumError as e:
            logger.info(f"Tool {name} failed for {connection_key}: {e.message}")
            return error_result(e)

        return result.to_payload()

    # -------------------------------------------------------------------------
    # JSON-RPC envelope
    # -------------------------------------------------------------------------

    async def handle_message(
        self, message: Any, connection_key: str
    ) -> dict[str, Any] | None:
        """
        Handle one JSON-RPC message.

        Returns:
            The reply, or None for notifications
        """
        if not isinstance(message, dict) or message.get("jsonrpc") != JSONRPC_VERSION:
            msg_id = message.get("id") if isinstance(message, dict) else None
            return _rpc_error(msg_id, INVALID_REQUEST, "Invalid Request")

        method = message.get("method")
        if "id" not in message:
            logger.debug(f"Notification {method} from {connection_key}")
            return None

        msg_id = message["id"]
        params = message.get("params") or {}
        if not isinstance(params, dict):
            return _rpc_error(msg_id, INVALID_PARAMS, "params must be an object")

        if method == "initialize":
            return _rpc_result(
                msg_id,
                {
                    "protocolVersion": params.get("protocolVersion", PROTOCOL_VERSION),
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": "symposium", "version": __version__},
                },
            )

        if method == "ping":
            return _rpc_result(msg_id, {})

        if method == "tools/list":
            return _rpc_result(
                msg_id,
                {"tools": [t.model_dump(by_alias=True) for t in self.list_tools()]},
            )

        if method == "tools/call":
            name = params.get("name")
            arguments = params.get("arguments") or {}
            if not isinstance(name, str):
                return _rpc_error(msg_id, INVALID_PARAMS, "Tool name is required")
            if not isinstance(arguments, dict):
                return _rpc_error(msg_id, INVALID_PARAMS, "arguments must be an object")

            payload = await self.call(name, arguments, connection_key)
            return _rpc_result(
                msg_id,
                {"content": [{"type": "text", "text": json.dumps(payload)}]},
            )

        return _rpc_error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")


def _rpc_result(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}


def _rpc_error(msg_id: Any, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "error": {"code": code, "message": message},
    }


# =============================================================================
# Module-level dispatcher instance
# =============================================================================


_default_dispatcher: ToolDispatcher | None = None


def get_dispatcher() -> ToolDispatcher:
    """Get the default dispatcher, bound to the default coordinator."""
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = ToolDispatcher(get_coordinator())
    return _default_dispatcher


def reset_dispatcher() -> None:
    """Reset the dispatcher (for testing)."""
    global _default_dispatcher
    _default_dispatcher = None
