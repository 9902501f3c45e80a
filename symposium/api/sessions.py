"""Session diagnostics endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from symposium.coordinator.engine import SessionCoordinator, get_coordinator
from symposium.lib.models import SessionDetail, SessionSummary

router = APIRouter()


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions(
    topic: str | None = None,
    coordinator: SessionCoordinator = Depends(get_coordinator),
) -> list[SessionSummary]:
    """List every session created since startup, optionally for one topic."""
    sessions = coordinator.list_sessions()
    if topic is not None:
        sessions = [s for s in sessions if s.topic == topic]
    return sessions


@router.get("/sessions/{session_id}", response_model=SessionDetail)
async def get_session(
    session_id: UUID,
    coordinator: SessionCoordinator = Depends(get_coordinator),
) -> SessionDetail:
    """Get a session with its participants and responses."""
    return coordinator.get_session(session_id).detail()
