"""Per-session participant registry and round accounting."""

from typing import Any

from symposium.coordinator.session import Session
from symposium.lib.exceptions import RoundLimitExceededError
from symposium.lib.models import Participant


class ParticipantRegistry:
    """Tracks who joined a session and how many rounds each has used."""

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds

    def join_or_get(
        self,
        session: Session,
        identity: str,
        metadata: dict[str, Any] | None = None,
        connection_key: str | None = None,
    ) -> tuple[Participant, bool]:
        """
        Add a participant to a session, or return the one already there.

        Args:
            session: Session being joined
            identity: Participant name, unique within the session
            metadata: Opaque persona metadata, stored as given
            connection_key: Connection the registration arrived on

        Returns:
            Tuple of (participant, is_new). An existing participant keeps
            its rounds and metadata but moves to the newer connection.
        """
        existing = session.participants.get(identity)
        if existing is not None:
            if connection_key is not None:
                existing.connection_key = connection_key
            return existing, False

        participant = Participant(
            identity=identity,
            session_id=session.session_id,
            connection_key=connection_key,
            metadata=metadata,
        )
        session.participants[identity] = participant
        return participant, True

    def find(self, session: Session, identity: str) -> Participant | None:
        return session.participants.get(identity)

    def find_by_connection(
        self, session: Session, connection_key: str
    ) -> Participant | None:
        """Find the participant that registered on a connection."""
        for participant in session.participants.values():
            if participant.connection_key == connection_key:
                return participant
        return None

    def rounds_remaining(self, participant: Participant) -> int:
        return max(self.max_rounds - participant.rounds_completed, 0)

    def advance_round(self, participant: Participant) -> int:
        """
        Count one more round for a participant.

        Returns:
            The new round count

        Raises:
            RoundLimitExceededError: If every round is already used. The
                participant is left unchanged.
        """
        if participant.rounds_completed >= self.max_rounds:
            raise RoundLimitExceededError(participant.identity, self.max_rounds)

        participant.rounds_completed += 1
        return participant.rounds_completed
