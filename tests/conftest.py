"""Shared pytest fixtures for all tests."""

import httpx
import pytest
from fastapi import FastAPI

from symposium.config import Settings, get_settings
from symposium.coordinator.engine import SessionCoordinator, get_coordinator
from symposium.lib.connections import ConnectionManager, get_connection_manager
from symposium.lib.dispatch import ToolDispatcher, get_dispatcher
from symposium.main import create_app

# Short enough to keep the suite fast, long enough for loose scheduling
QUIET_PERIOD = 0.1


@pytest.fixture
def settings():
    """Coordinator settings with a short quiet period and three rounds."""
    return Settings(quiet_period_seconds=QUIET_PERIOD, max_rounds=3)


@pytest.fixture
def coordinator(settings):
    """Fresh coordinator per test."""
    return SessionCoordinator(settings)


@pytest.fixture
def dispatcher(coordinator):
    return ToolDispatcher(coordinator)


@pytest.fixture
def connection_manager():
    return ConnectionManager()


@pytest.fixture
def app(settings, coordinator, dispatcher, connection_manager) -> FastAPI:
    """Application wired to the per-test coordinator."""
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_coordinator] = lambda: coordinator
    application.dependency_overrides[get_dispatcher] = lambda: dispatcher
    application.dependency_overrides[get_connection_manager] = lambda: connection_manager
    return application


def make_client(app: FastAPI) -> httpx.AsyncClient:
    """In-process HTTP client for the application."""
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
        timeout=10.0,
    )
