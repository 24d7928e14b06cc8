"""
Integration tests for the chat WebSocket endpoint.

These tests run the full application with FastAPI's TestClient and talk to
it over real WebSocket sessions.
"""

import pytest
from fastapi.testclient import TestClient

from chatrelay import application
from chatrelay.constants import (
    MSG_INVALID_FORMAT,
    MSG_JOIN_FIRST,
    MSG_UNKNOWN_TYPE,
    MSG_USERNAME_TAKEN,
)
from chatrelay.settings import Settings


@pytest.fixture
def app():
    """
    Create the application without static file hosting.

    Returns:
        FastAPI: FastAPI application instance.
    """
    return application(Settings(_env_file=None, SERVE_CLIENT=False))


@pytest.fixture
def client(app):
    """
    Create a test client sharing one event loop across sessions.

    Returns:
        TestClient: FastAPI test client instance.
    """
    with TestClient(app) as client:
        yield client


class TestChatWebSocket:
    """End-to-end tests over WebSocket sessions."""

    def test_chat_scenario(self, client, app):
        """Test join, conflict, notices, message echo and departure."""
        with client.websocket_connect("/") as ws_b:
            with client.websocket_connect("/") as ws_a:
                ws_a.send_json({"type": "join", "username": "alice"})
                joined = ws_a.receive_json()
                assert joined["type"] == "joined"
                assert joined["username"] == "alice"

                ws_b.send_json({"type": "join", "username": "alice"})
                error = ws_b.receive_json()
                assert error["type"] == "error"
                assert error["message"] == MSG_USERNAME_TAKEN

                ws_b.send_json({"type": "join", "username": "bob"})
                assert ws_b.receive_json()["type"] == "joined"
                notice = ws_a.receive_json()
                assert notice["type"] == "system"
                assert notice["text"] == "bob joined the chat"

                ws_b.send_json({"type": "message", "text": "hi"})
                for ws in (ws_b, ws_a):
                    message = ws.receive_json()
                    assert message["type"] == "message"
                    assert message["username"] == "bob"
                    assert message["text"] == "hi"

                assert app.state.registry.usernames() == ["alice", "bob"]

            left = ws_b.receive_json()
            assert left["type"] == "system"
            assert left["text"] == "alice left the chat"
            assert app.state.registry.usernames() == ["bob"]

    def test_message_before_join(self, client):
        """Test an unjoined client is told to join first."""
        with client.websocket_connect("/") as ws:
            ws.send_json({"type": "message", "text": "hello"})
            error = ws.receive_json()

        assert error["type"] == "error"
        assert error["message"] == MSG_JOIN_FIRST

    def test_malformed_frames_keep_connection_open(self, client):
        """Test bad frames are answered and the connection stays usable."""
        with client.websocket_connect("/") as ws:
            ws.send_text("this is not json")
            assert ws.receive_json()["message"] == MSG_INVALID_FORMAT

            ws.send_json({"type": "shout"})
            assert ws.receive_json()["message"] == MSG_UNKNOWN_TYPE

            ws.send_json({"type": "join", "username": "alice"})
            assert ws.receive_json()["type"] == "joined"

    def test_deeply_nested_frame_keeps_connection(self, client, app):
        """Test a frame too deep to parse leaves the session in place."""
        with client.websocket_connect("/") as ws_b:
            with client.websocket_connect("/") as ws_a:
                ws_a.send_json({"type": "join", "username": "alice"})
                assert ws_a.receive_json()["type"] == "joined"
                ws_b.send_json({"type": "join", "username": "bob"})
                assert ws_b.receive_json()["type"] == "joined"
                assert ws_a.receive_json()["text"] == "bob joined the chat"

                ws_a.send_text("[" * 100_000)
                error = ws_a.receive_json()
                assert error["type"] == "error"
                assert error["message"] == MSG_INVALID_FORMAT

                ws_a.send_json({"type": "message", "text": "still here"})
                for ws in (ws_a, ws_b):
                    message = ws.receive_json()
                    assert message["type"] == "message"
                    assert message["username"] == "alice"

                assert app.state.registry.usernames() == ["alice", "bob"]

    def test_unjoined_message_with_bad_text(self, client):
        """Test an unjoined client is told to join even if `text` is bad."""
        with client.websocket_connect("/") as ws:
            ws.send_json({"type": "message", "text": 5})
            error = ws.receive_json()

        assert error["message"] == MSG_JOIN_FIRST

    def test_binary_frames(self, client):
        """Test JSON sent in binary frames is accepted."""
        with client.websocket_connect("/") as ws:
            ws.send_json({"type": "join", "username": "alice"}, mode="binary")
            joined = ws.receive_json()

        assert joined["type"] == "joined"

    def test_username_released_on_disconnect(self, client, app):
        """Test a username can be reused after its owner disconnects."""
        with client.websocket_connect("/") as ws:
            ws.send_json({"type": "join", "username": "alice"})
            assert ws.receive_json()["type"] == "joined"

        with client.websocket_connect("/") as ws:
            ws.send_json({"type": "join", "username": "alice"})
            assert ws.receive_json()["type"] == "joined"

    def test_connections_tracked(self, client, app):
        """Test live connections are tracked for shutdown and then released."""
        with client.websocket_connect(
            "/", headers={"X-Correlation-ID": "trace-1234"}
        ) as ws:
            ws.send_json({"type": "join", "username": "alice"})
            ws.receive_json()
            assert len(app.state.connection_manager) == 1
            assert len(app.state.registry) == 1

        assert len(app.state.registry) == 0
        assert len(app.state.connection_manager) == 0
