"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the chat core: a fresh session
registry, a coordinator bound to it and recording connection handles.
"""

import os
import tempfile

import pytest

# Set environment variables for testing before importing chatrelay modules
os.environ.setdefault("SERVE_CLIENT", "false")
os.environ.setdefault(
    "LOG_FILE_PATH",
    os.path.join(tempfile.gettempdir(), "chatrelay-tests", "errors.log"),
)

from chatrelay.managers.broadcast_coordinator import (  # noqa: E402
    BroadcastCoordinator,
)
from chatrelay.managers.session_registry import (  # noqa: E402
    ConnectionRegistry,
)
from tests.mocks.websocket_mocks import create_fake_connection  # noqa: E402


@pytest.fixture
def registry():
    """
    Provides an empty session registry.

    Returns:
        ConnectionRegistry: Fresh registry instance
    """
    return ConnectionRegistry()


@pytest.fixture
def coordinator(registry):
    """
    Provides a coordinator using the `registry` fixture.

    Returns:
        BroadcastCoordinator: Coordinator with the default JSON format
    """
    return BroadcastCoordinator(registry)


@pytest.fixture
def connection_factory():
    """
    Provides a factory for recording connection handles.

    Returns:
        Callable: Creates a new FakeConnection per call
    """
    return create_fake_connection


@pytest.fixture
def join(coordinator):
    """
    Provides a helper that joins a connection and clears its frames.

    Returns:
        Callable: join(connection, username)
    """

    def _join(connection, username):
        coordinator.on_connect(connection)
        coordinator.on_frame(
            connection, f'{{"type": "join", "username": "{username}"}}'
        )
        connection.clear()
        return connection

    return _join
