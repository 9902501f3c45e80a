"""Session state owned by the coordinator."""

import asyncio
from uuid import UUID, uuid4

from symposium.coordinator.log import ResponseLog
from symposium.lib.models import (
    Participant,
    SessionDetail,
    SessionPhase,
    SessionSummary,
    Snapshot,
)
from symposium.lib.utils import utcnow


class Session:
    """
    A group discussion that forms during registration and then runs rounds.

    ``registration_open`` flips from True to False exactly once, when the
    registration barrier fires. A closed session never reopens; later
    registrations for the same topic start a new Session.
    """

    def __init__(self, topic: str, key: str):
        self.session_id: UUID = uuid4()
        self.topic = topic
        self.key = key
        self.participants: dict[str, Participant] = {}
        self.log = ResponseLog()
        self.registration_open = True
        self.pending: dict[str, list[asyncio.Future[Snapshot]]] = {}
        self.created_at = utcnow()
        self.last_activity_at = self.created_at

        # Armed debounce timer; the epoch invalidates callbacks of replaced timers
        self.barrier_handle: asyncio.TimerHandle | None = None
        self.barrier_epoch = 0

    @property
    def phase(self) -> SessionPhase:
        if self.registration_open:
            return SessionPhase.REGISTERING
        return SessionPhase.ACTIVE

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def pending_count(self) -> int:
        return sum(len(waiters) for waiters in self.pending.values())

    def touch(self) -> None:
        """Update the last activity timestamp."""
        self.last_activity_at = utcnow()

    def snapshot(self) -> Snapshot:
        """Take an immutable copy of the log and participant count."""
        return Snapshot(
            topic=self.topic,
            responses=self.log.snapshot(),
            participant_count=self.participant_count,
        )

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            topic=self.topic,
            phase=self.phase,
            participant_count=self.participant_count,
            response_count=len(self.log),
            pending_waiters=self.pending_count,
            created_at=self.created_at,
            last_activity_at=self.last_activity_at,
        )

    def detail(self) -> SessionDetail:
        return SessionDetail(
            **self.summary().model_dump(),
            participants=[p.model_copy() for p in self.participants.values()],
            responses=list(self.log.snapshot()),
        )
