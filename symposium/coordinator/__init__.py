"""Coordinator package - manages session registration and rounds."""

from symposium.coordinator.barrier import RegistrationBarrier
from symposium.coordinator.engine import (
    SessionCoordinator,
    close_coordinator,
    get_coordinator,
)
from symposium.coordinator.fanout import PendingRequestQueue
from symposium.coordinator.log import ResponseLog
from symposium.coordinator.registry import ParticipantRegistry
from symposium.coordinator.session import Session

__all__ = [
    # Building blocks
    "ParticipantRegistry",
    "PendingRequestQueue",
    "RegistrationBarrier",
    "ResponseLog",
    "Session",
    # Coordinator
    "SessionCoordinator",
    "close_coordinator",
    "get_coordinator",
]
