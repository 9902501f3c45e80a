"""Utility functions for the Symposium backend."""

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def utcnow() -> datetime:
    """Current timezone-aware UTC time."""
    return datetime.now(timezone.utc)


def abbreviate(text: str, limit: int = 30) -> str:
    """
    Shorten text for log lines and status messages.

    Args:
        text: The text to shorten
        limit: Number of characters kept before the ellipsis

    Returns:
        The first ``limit`` characters followed by "..."

    Examples:
        >>> abbreviate("Should cities ban private cars downtown?")
        'Should cities ban private cars...'
        >>> abbreviate("Short", 30)
        'Short...'
    """
    return f"{text[:limit]}..."
