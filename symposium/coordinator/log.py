"""Append-only record of session contributions."""

from symposium.lib.models import Contribution


class ResponseLog:
    """
    Ordered record of contributions.

    Entries are kept in append order. Snapshots are sorted by timestamp;
    the sort is stable, so equal timestamps keep their append order.
    """

    def __init__(self) -> None:
        self._entries: list[Contribution] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, contribution: Contribution) -> None:
        """Record a contribution."""
        self._entries.append(contribution)

    def snapshot(self) -> tuple[Contribution, ...]:
        """Return a time-ordered copy of every contribution so far."""
        return tuple(sorted(self._entries, key=lambda c: c.timestamp))
