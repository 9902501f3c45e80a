"""Suspended callers waiting for registration to close."""

import asyncio
import logging

from symposium.coordinator.session import Session
from symposium.lib.models import Snapshot

logger = logging.getLogger(__name__)


class PendingRequestQueue:
    """
    Holds suspended callers until a session's registration closes.

    Each waiter is an ``asyncio.Future`` that resolves with the Snapshot
    taken when the barrier fired. Callers must check
    ``session.registration_open`` before enqueueing; a closed session is
    answered immediately instead.
    """

    def enqueue(self, session: Session, key: str) -> asyncio.Future[Snapshot]:
        """Park a caller under ``key`` and return its future."""
        future: asyncio.Future[Snapshot] = asyncio.get_running_loop().create_future()
        session.pending.setdefault(key, []).append(future)
        logger.info(f"Request from {key} is waiting for registration to end")
        return future

    def drain_all(self, session: Session, snapshot: Snapshot) -> int:
        """
        Release every waiter of a session with one snapshot.

        Waiters whose callers went away (cancelled futures) are skipped.

        Returns:
            Number of waiters released
        """
        released = 0
        for futures in session.pending.values():
            for future in futures:
                if future.done():
                    continue
                future.set_result(snapshot)
                released += 1
        session.pending.clear()
        return released

    def cancel_all(self, session: Session) -> int:
        """Cancel every waiter of a session (process shutdown only)."""
        cancelled = 0
        for futures in session.pending.values():
            for future in futures:
                if future.cancel():
                    cancelled += 1
        session.pending.clear()
        return cancelled
