"""
Tests for the session registry.

This module tests username uniqueness, idempotent removal, snapshot
iteration and concurrent registration.
"""

import threading

import pytest

from chatrelay.constants import MSG_ALREADY_JOINED, MSG_USERNAME_TAKEN
from chatrelay.exceptions import ConflictError, ValidationError
from chatrelay.managers.session_registry import ConnectionRegistry
from tests.mocks.websocket_mocks import create_fake_connection


class TestConnectionRegistry:
    """Tests for ConnectionRegistry class."""

    def test_init(self, registry):
        """Test registry starts empty."""
        assert len(registry) == 0
        assert list(registry.all()) == []
        assert registry.usernames() == []

    def test_register(self, registry):
        """Test registering a connection creates a session."""
        conn = create_fake_connection()

        session = registry.register(conn, "alice")

        assert session.username == "alice"
        assert session.joined_at.tzinfo is not None
        assert registry.get(conn) is session
        assert conn in registry
        assert len(registry) == 1

    def test_register_duplicate_username(self, registry):
        """Test a taken username is rejected and the registry is unchanged."""
        alice = create_fake_connection()
        impostor = create_fake_connection()
        registry.register(alice, "alice")

        with pytest.raises(ConflictError) as exc_info:
            registry.register(impostor, "alice")

        assert exc_info.value.message == MSG_USERNAME_TAKEN
        assert impostor not in registry
        assert registry.usernames() == ["alice"]

    def test_usernames_are_case_sensitive(self, registry):
        """Test usernames differing only in case are distinct."""
        registry.register(create_fake_connection(), "alice")
        registry.register(create_fake_connection(), "Alice")

        assert sorted(registry.usernames()) == ["Alice", "alice"]

    def test_register_twice_same_connection(self, registry):
        """Test a connection cannot own two sessions."""
        conn = create_fake_connection()
        registry.register(conn, "alice")

        with pytest.raises(ValidationError) as exc_info:
            registry.register(conn, "bob")

        assert exc_info.value.message == MSG_ALREADY_JOINED
        assert registry.get(conn).username == "alice"
        assert len(registry) == 1

    def test_unregister(self, registry):
        """Test unregistering returns the removed session."""
        conn = create_fake_connection()
        registry.register(conn, "alice")

        session = registry.unregister(conn)

        assert session.username == "alice"
        assert conn not in registry
        assert registry.get(conn) is None

    def test_unregister_is_idempotent(self, registry):
        """Test unregistering unknown or removed connections is a no-op."""
        conn = create_fake_connection()

        assert registry.unregister(conn) is None

        registry.register(conn, "alice")
        registry.unregister(conn)
        assert registry.unregister(conn) is None
        assert len(registry) == 0

    def test_username_reusable_after_unregister(self, registry):
        """Test a released username can be taken by another connection."""
        first = create_fake_connection()
        second = create_fake_connection()
        registry.register(first, "alice")
        registry.unregister(first)

        session = registry.register(second, "alice")

        assert session.username == "alice"
        assert registry.get(second) is session

    def test_all_is_snapshot(self, registry):
        """Test changes during iteration are not observed by the iterator."""
        alice = create_fake_connection()
        bob = create_fake_connection()
        registry.register(alice, "alice")
        registry.register(bob, "bob")

        seen = []
        for handle, session in registry.all():
            seen.append(session.username)
            registry.unregister(alice)
            registry.unregister(bob)
            registry.register(create_fake_connection(), "carol")

        assert sorted(seen) == ["alice", "bob"]
        assert registry.usernames() == ["carol"]


class TestConnectionRegistryConcurrency:
    """Tests for ConnectionRegistry under concurrent access."""

    def test_concurrent_register_same_username(self):
        """Test exactly one of many racing joins wins a username."""
        registry = ConnectionRegistry()
        connections = [create_fake_connection() for _ in range(32)]
        barrier = threading.Barrier(len(connections))
        winners = []
        conflicts = []

        def join(conn):
            barrier.wait()
            try:
                registry.register(conn, "alice")
                winners.append(conn)
            except ConflictError:
                conflicts.append(conn)

        threads = [
            threading.Thread(target=join, args=(conn,)) for conn in connections
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(winners) == 1
        assert len(conflicts) == len(connections) - 1
        assert registry.usernames() == ["alice"]
        assert winners[0] in registry

    def test_concurrent_register_distinct_usernames(self):
        """Test concurrent joins with distinct names all succeed."""
        registry = ConnectionRegistry()
        connections = [create_fake_connection() for _ in range(32)]

        threads = [
            threading.Thread(target=registry.register, args=(conn, f"user{i}"))
            for i, conn in enumerate(connections)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == len(connections)
        assert len(set(registry.usernames())) == len(connections)
