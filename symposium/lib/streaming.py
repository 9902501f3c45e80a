"""SSE streaming helpers for Symposium.

Builds sequenced Server-Sent Events for connection streams.
"""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from symposium.lib.utils import utcnow


# =============================================================================
# Event Types
# =============================================================================


class EventType:
    """SSE event type constants."""

    # Tells the client where to POST its messages
    ENDPOINT = "endpoint"

    # JSON-RPC replies
    MESSAGE = "message"

    # Transport failures
    ERROR = "error"


class StreamEvent(BaseModel):
    """A single event on a connection stream."""

    sequence: int = Field(description="Monotonic counter per connection")
    event_type: str = Field(description="Event type")
    data: Any = Field(default=None)
    timestamp: datetime = Field(default_factory=utcnow)

    def to_sse(self) -> dict[str, str]:
        """Format for ``EventSourceResponse``."""
        if isinstance(self.data, str):
            data = self.data
        else:
            data = json.dumps(self.data)
        return {"id": str(self.sequence), "event": self.event_type, "data": data}


# =============================================================================
# Event Builder
# =============================================================================


class EventBuilder:
    """Builder for stream events with automatic sequencing."""

    def __init__(self) -> None:
        self._sequence = 0

    def build(self, event_type: str, data: Any = None) -> StreamEvent:
        """Build an event with the next sequence number."""
        event = StreamEvent(sequence=self._sequence, event_type=event_type, data=data)
        self._sequence += 1
        return event

    def endpoint(self, path: str) -> StreamEvent:
        """Build the endpoint announcement (data is the bare path)."""
        return self.build(EventType.ENDPOINT, path)

    def message(self, payload: dict[str, Any]) -> StreamEvent:
        """Build a JSON-RPC message event."""
        return self.build(EventType.MESSAGE, payload)

    def error(self, error: str, details: dict[str, Any] | None = None) -> StreamEvent:
        """Build a transport error event."""
        return self.build(EventType.ERROR, {"error": error, "details": details or {}})
