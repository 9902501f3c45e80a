"""Debounced registration barrier."""

import asyncio
import logging

from symposium.coordinator.fanout import PendingRequestQueue
from symposium.coordinator.session import Session
from symposium.lib.utils import abbreviate

logger = logging.getLogger(__name__)


class RegistrationBarrier:
    """
    Decides when a session stops accepting participants.

    Every registration re-arms a quiet-period timer. When the timer elapses
    without another registration, the barrier fires: registration closes
    and all waiters are released with the same snapshot.
    """

    def __init__(self, quiet_period: float, fanout: PendingRequestQueue):
        """
        Initialize the barrier.

        Args:
            quiet_period: Seconds without registrations before closing
            fanout: Queue whose waiters are released on firing
        """
        self.quiet_period = quiet_period
        self.fanout = fanout

    def arm(self, session: Session) -> None:
        """Cancel any running timer for the session and start a fresh one."""
        if not session.registration_open:
            return

        self.disarm(session)
        session.barrier_epoch += 1
        loop = asyncio.get_running_loop()
        session.barrier_handle = loop.call_later(
            self.quiet_period, self.fire, session, session.barrier_epoch
        )
        logger.debug(
            f"Barrier armed for session {session.session_id} "
            f"(epoch {session.barrier_epoch}, {self.quiet_period}s)"
        )

    def disarm(self, session: Session) -> None:
        """Cancel the session's timer without closing registration."""
        if session.barrier_handle is not None:
            session.barrier_handle.cancel()
            session.barrier_handle = None

    def fire(self, session: Session, epoch: int | None = None) -> bool:
        """
        Close registration and release every waiter.

        Args:
            session: Session to close
            epoch: Epoch of the timer that fired. A stale epoch (the timer
                was replaced after being scheduled) is ignored.

        Returns:
            True if this call closed registration
        """
        if epoch is not None and epoch != session.barrier_epoch:
            return False
        if not session.registration_open:
            return False

        session.registration_open = False
        session.barrier_handle = None

        snapshot = session.snapshot()
        released = self.fanout.drain_all(session, snapshot)

        logger.info(
            f'Registration period ended for session with prompt "{abbreviate(session.topic)}" '
            f"({snapshot.participant_count} participants, {released} waiters released)"
        )
        return True
