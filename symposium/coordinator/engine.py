"""Session coordinator.

Drives each session through the registration phase and the round phase.
"""

import logging
from typing import Any
from uuid import UUID

from symposium.config import Settings, get_settings
from symposium.coordinator.barrier import RegistrationBarrier
from symposium.coordinator.fanout import PendingRequestQueue
from symposium.coordinator.registry import ParticipantRegistry
from symposium.coordinator.session import Session
from symposium.lib.exceptions import (
    ParticipantNotFoundError,
    RegistrationNotClosedError,
    SessionNotFoundError,
)
from symposium.lib.models import (
    Contribution,
    ReadResult,
    RegisterResult,
    SessionSummary,
    Snapshot,
    StatusResult,
    SubmitResult,
)
from symposium.lib.utils import abbreviate

logger = logging.getLogger(__name__)


# =============================================================================
# Participant Guidance
# =============================================================================


def registration_instructions(identity: str, max_rounds: int) -> str:
    return (
        f"You are participating as {identity}. You believe you are the real {identity} "
        "(a prominent figure). After seeing other responses, you must use the "
        '"submit-response" tool to send your subsequent answers, and use the '
        '"get-responses" tool to read responses. This conversation will continue '
        f"for {max_rounds} rounds total. Remember to stay in character as {identity} "
        "throughout the entire conversation."
    )


def submit_instructions(rounds_remaining: int) -> str:
    if rounds_remaining <= 0:
        return "You have completed all rounds of the discussion."
    return (
        'Continue to use "get-responses" to see other responses and '
        '"submit-response" for your next response.'
    )


READ_INSTRUCTIONS = (
    "Review these responses from other participants. Remember you are roleplaying "
    'as a real person. Use the "submit-response" tool to submit your next response '
    "in the discussion."
)


# =============================================================================
# Coordinator
# =============================================================================


class SessionCoordinator:
    """
    In-memory coordinator for debate sessions.

    Owns the process-wide session registry: open sessions by topic key,
    every session by id, and the session each connection is bound to.
    All mutations happen on the event loop thread, so no operation can
    observe another half-applied.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.registry = ParticipantRegistry(self.settings.max_rounds)
        self.fanout = PendingRequestQueue()
        self.barrier = RegistrationBarrier(
            self.settings.quiet_period_seconds, self.fanout
        )

        self._sessions_by_key: dict[str, Session] = {}
        self._sessions_by_id: dict[UUID, Session] = {}
        self._bindings: dict[str, Session] = {}

    # -------------------------------------------------------------------------
    # Session registry
    # -------------------------------------------------------------------------

    def _session_for_registration(self, topic: str) -> Session:
        """Return the open session for a topic, creating one if needed."""
        key = self.settings.session_key(topic)
        session = self._sessions_by_key.get(key)
        if session is not None and session.registration_open:
            return session

        session = Session(topic=topic, key=key)
        self._sessions_by_key[key] = session
        self._sessions_by_id[session.session_id] = session
        logger.info(
            f'Created session {session.session_id} for prompt "{abbreviate(topic)}"'
        )
        return session

    def session_for(self, connection_key: str) -> Session | None:
        """Get the session a connection is bound to, if any."""
        return self._bindings.get(connection_key)

    def _bound_session(self, connection_key: str) -> Session:
        session = self._bindings.get(connection_key)
        if session is None:
            raise SessionNotFoundError(connection_key)
        return session

    def get_session(self, session_id: UUID) -> Session:
        """
        Get a session by ID.

        Raises:
            SessionNotFoundError: If no such session was ever created
        """
        session = self._sessions_by_id.get(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))
        return session

    def list_sessions(self) -> list[SessionSummary]:
        return [session.summary() for session in self._sessions_by_id.values()]

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def register(
        self,
        connection_key: str,
        identity: str,
        topic: str,
        initial_text: str,
        metadata: dict[str, Any] | None = None,
    ) -> RegisterResult:
        """
        Register a participant and wait for registration to close.

        Joins the open session for ``topic`` (or starts a new one), records
        the initial text as the participant's first round and re-arms the
        barrier. The call then suspends until the barrier fires.

        Args:
            connection_key: Connection the call arrived on; bound to the session
            identity: Participant name
            topic: Prompt being debated
            initial_text: The participant's initial response
            metadata: Optional persona metadata, passed through untouched

        Returns:
            RegisterResult with the snapshot taken when registration closed
        """
        session = self._session_for_registration(topic)
        self._bindings[connection_key] = session

        _, is_new = self.registry.join_or_get(
            session, identity, metadata=metadata, connection_key=connection_key
        )
        session.log.append(
            Contribution(identity=identity, topic=topic, text=initial_text)
        )
        session.touch()
        self.barrier.arm(session)

        if is_new:
            logger.info(
                f"Registered participant {identity} with sessionId: {connection_key}"
            )
        else:
            logger.info(
                f"Participant {identity} re-registered with sessionId: {connection_key}"
            )

        if not session.registration_open:
            snapshot = session.snapshot()
        else:
            snapshot = await self.fanout.enqueue(session, identity)

        return self._registration_result(identity, snapshot)

    async def submit(
        self,
        connection_key: str,
        text: str,
        identity: str | None = None,
    ) -> SubmitResult:
        """
        Record a participant's next round.

        Args:
            connection_key: Connection the call arrived on
            text: The response for this round
            identity: Participant name; defaults to the participant that
                registered on this connection

        Raises:
            SessionNotFoundError: If the connection has no session
            RegistrationNotClosedError: If the session is still registering
            ParticipantNotFoundError: If the participant is not in the session
            RoundLimitExceededError: If the participant has no rounds left
        """
        session = self._bound_session(connection_key)
        if session.registration_open:
            raise RegistrationNotClosedError(session.topic)

        if identity:
            participant = self.registry.find(session, identity)
        else:
            participant = self.registry.find_by_connection(session, connection_key)
        if participant is None:
            raise ParticipantNotFoundError(identity)

        current_round = self.registry.advance_round(participant)
        session.log.append(
            Contribution(identity=participant.identity, topic=session.topic, text=text)
        )
        remaining = self.registry.rounds_remaining(participant)

        logger.info(
            f"Received response from {participant.identity} "
            f"(sessionId: {connection_key}) - Round {current_round}"
        )

        result = SubmitResult(
            message=f"Response from {participant.identity} has been stored successfully.",
            current_round=current_round,
            rounds_remaining=remaining,
            instructions=submit_instructions(remaining),
        )
        if self.settings.inline_responses_on_submit:
            snapshot = session.snapshot()
            result.responses = list(snapshot.responses)
            result.participant_count = snapshot.participant_count
        return result

    async def read(self, connection_key: str) -> ReadResult:
        """
        Read every response in the caller's session.

        Suspends while the session is still registering and resolves with
        the same snapshot the registrants receive.

        Raises:
            SessionNotFoundError: If the connection has no session
        """
        session = self._bound_session(connection_key)

        if session.registration_open:
            snapshot = await self.fanout.enqueue(session, f"client-{connection_key}")
        else:
            snapshot = session.snapshot()

        return ReadResult(
            responses=list(snapshot.responses),
            participant_count=snapshot.participant_count,
            topic=snapshot.topic,
            instructions=READ_INSTRUCTIONS,
        )

    def status(self, connection_key: str) -> StatusResult:
        """Report the phase and size of the caller's session without waiting."""
        session = self._bindings.get(connection_key)
        if session is None:
            return StatusResult(
                status="not_found", message="No session found for this client"
            )

        return StatusResult(
            status="waiting" if session.registration_open else "ready",
            participant_count=session.participant_count,
            topic=session.topic,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _registration_result(self, identity: str, snapshot: Snapshot) -> RegisterResult:
        return RegisterResult(
            message=(
                f"{identity} registered successfully for prompt "
                f'"{abbreviate(snapshot.topic)}"'
            ),
            participant_id=identity,
            registration_open=False,
            responses=list(snapshot.responses),
            participant_count=snapshot.participant_count,
            instructions=registration_instructions(identity, self.settings.max_rounds),
        )

    async def shutdown(self) -> None:
        """Cancel armed timers and parked callers."""
        cancelled = 0
        for session in self._sessions_by_id.values():
            self.barrier.disarm(session)
            cancelled += self.fanout.cancel_all(session)
        if cancelled:
            logger.warning(f"Cancelled {cancelled} waiting requests on shutdown")
        logger.info("Session coordinator shut down")


# =============================================================================
# Module-level coordinator instance
# =============================================================================


_default_coordinator: SessionCoordinator | None = None


def get_coordinator() -> SessionCoordinator:
    """Get the default coordinator instance."""
    global _default_coordinator
    if _default_coordinator is None:
        _default_coordinator = SessionCoordinator()
    return _default_coordinator


async def close_coordinator() -> None:
    """Shut down the default coordinator."""
    global _default_coordinator
    if _default_coordinator:
        await _default_coordinator.shutdown()
        _default_coordinator = None
