"""Pydantic models for Symposium."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from symposium.lib.utils import now_ms


# =============================================================================
# Enums
# =============================================================================


class SessionPhase(str, Enum):
    """Session lifecycle phase."""

    REGISTERING = "registering"
    ACTIVE = "active"


# =============================================================================
# Domain Models
# =============================================================================


class Contribution(BaseModel):
    """One timestamped message in a session log."""

    model_config = ConfigDict(frozen=True)

    identity: str = Field(description="Participant who wrote the text")
    topic: str = Field(description="Topic the text responds to")
    text: str = Field(description="The contribution itself")
    timestamp: int = Field(
        default_factory=now_ms, description="Unix timestamp in milliseconds"
    )


class Participant(BaseModel):
    """One registered voice in a session."""

    identity: str
    session_id: UUID
    connection_key: str | None = Field(
        default=None, description="Connection that registered this participant"
    )
    joined_at: int = Field(default_factory=now_ms)
    rounds_completed: int = Field(
        default=1, description="Registration counts as round 1"
    )
    metadata: dict[str, Any] | None = Field(
        default=None, description="Opaque persona metadata, passed through"
    )


class Snapshot(BaseModel):
    """Immutable, time-ordered copy of a session's contributions."""

    model_config = ConfigDict(frozen=True)

    topic: str
    responses: tuple[Contribution, ...] = ()
    participant_count: int = 0


# =============================================================================
# Tool Arguments
# =============================================================================


class RegisterArguments(BaseModel):
    """Arguments of the register tool."""

    identity: str = Field(
        min_length=1,
        validation_alias=AliasChoices("identity", "name"),
        description="Name of the participant, unique within a session",
    )
    topic: str = Field(
        min_length=1,
        validation_alias=AliasChoices("topic", "prompt"),
        description="The prompt or subject being debated",
    )
    initial_text: str = Field(
        validation_alias=AliasChoices("initial_text", "initialText", "initial_response"),
        description="The participant's initial response to the topic",
    )
    metadata: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("metadata", "persona_metadata"),
        description="Optional metadata about the participant's persona",
    )


class SubmitArguments(BaseModel):
    """Arguments of the submit tool."""

    text: str = Field(
        validation_alias=AliasChoices("text", "response"),
        description="The participant's response for the next round",
    )
    identity: str | None = Field(
        default=None,
        validation_alias=AliasChoices("identity", "name"),
        description="Participant name; defaults to the one registered on this connection",
    )


class ReadArguments(BaseModel):
    """Arguments of the read tool (none required)."""

    pass


class StatusArguments(BaseModel):
    """Arguments of the status tool (none required)."""

    pass


# =============================================================================
# Tool Results
# =============================================================================


class ToolResult(BaseModel):
    """Base class for tool results serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RegisterResult(ToolResult):
    """Result of a registration, delivered once registration has closed."""

    status: Literal["success"] = "success"
    message: str
    participant_id: str = Field(alias="participantId")
    registration_open: bool = Field(default=False, alias="registrationOpen")
    responses: list[Contribution] = Field(default_factory=list)
    participant_count: int = Field(alias="participantCount")
    instructions: str | None = None


class SubmitResult(ToolResult):
    """Acknowledgement of a submitted round."""

    status: Literal["success"] = "success"
    message: str
    current_round: int = Field(alias="currentRound")
    rounds_remaining: int = Field(alias="roundsRemaining")
    instructions: str | None = None
    responses: list[Contribution] | None = None
    participant_count: int | None = Field(default=None, alias="participantCount")


class ReadResult(ToolResult):
    """All responses of the caller's session so far."""

    status: Literal["success"] = "success"
    responses: list[Contribution] = Field(default_factory=list)
    participant_count: int = Field(alias="participantCount")
    topic: str | None = None
    instructions: str | None = None


class StatusResult(ToolResult):
    """Phase and size of the caller's session."""

    status: Literal["ready", "waiting", "not_found"]
    participant_count: int | None = Field(default=None, alias="participantCount")
    topic: str | None = None
    message: str | None = None


class ErrorResult(ToolResult):
    """A failed tool call."""

    status: Literal["error"] = "error"
    error: str = Field(description="Error type name")
    message: str
    max_rounds: int | None = Field(default=None, alias="maxRounds")
    rounds_remaining: int | None = Field(default=None, alias="roundsRemaining")


class ToolDescriptor(BaseModel):
    """A tool advertised by the dispatcher."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


# =============================================================================
# API Response Models
# =============================================================================


class SessionSummary(BaseModel):
    """Diagnostic view of a session."""

    session_id: UUID
    topic: str
    phase: SessionPhase
    participant_count: int
    response_count: int
    pending_waiters: int
    created_at: datetime
    last_activity_at: datetime


class SessionDetail(SessionSummary):
    """Diagnostic view of a session with its participants and log."""

    participants: list[Participant] = Field(default_factory=list)
    responses: list[Contribution] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"


class ConfigResponse(BaseModel):
    """Effective coordinator configuration."""

    quiet_period_seconds: float
    max_rounds: int
    inline_responses_on_submit: bool
    partition_by_topic: bool
    tools: list[str]
