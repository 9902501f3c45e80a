"""Custom exceptions for Symposium."""

from typing import Any


class SymposiumError(Exception):
    """Base exception for all Symposium errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(SymposiumError):
    """Base exception for session-related errors."""

    pass


class SessionNotFoundError(SessionError):
    """Raised when no session is bound to the caller."""

    def __init__(self, key: str, **kwargs: Any):
        super().__init__(f"Session not found: {key}", **kwargs)
        self.key = key


class RegistrationNotClosedError(SessionError):
    """Raised when a round operation is attempted while registration is open."""

    def __init__(self, topic: str, **kwargs: Any):
        super().__init__("Registration period has not ended yet", **kwargs)
        self.topic = topic


# =============================================================================
# Participant Errors
# =============================================================================


class ParticipantError(SymposiumError):
    """Base exception for participant-related errors."""

    pass


class ParticipantNotFoundError(ParticipantError):
    """Raised when an identity never registered in the bound session."""

    def __init__(self, identity: str | None, **kwargs: Any):
        if identity:
            message = f"Participant not found in this session: {identity}"
        else:
            message = "Participant not found in this session"
        super().__init__(message, **kwargs)
        self.identity = identity


class RoundLimitExceededError(ParticipantError):
    """Raised when a participant has used all allotted rounds."""

    def __init__(self, identity: str, max_rounds: int, **kwargs: Any):
        super().__init__(
            f"You have completed all {max_rounds} rounds of discussion.", **kwargs
        )
        self.identity = identity
        self.max_rounds = max_rounds
        self.rounds_remaining = 0


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SymposiumError):
    """Raised when tool arguments fail validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(SymposiumError):
    """Base exception for transport and dispatch errors."""

    pass


class ConnectionNotFoundError(TransportError):
    """Raised when a message references an unknown connection."""

    def __init__(self, connection_id: str, **kwargs: Any):
        super().__init__(f"Connection not found: {connection_id}", **kwargs)
        self.connection_id = connection_id


class ToolNotFoundError(TransportError):
    """Raised when a call names a tool that does not exist."""

    def __init__(self, tool_name: str, **kwargs: Any):
        super().__init__(f"Unknown tool: {tool_name}", **kwargs)
        self.tool_name = tool_name
