import threading
from collections.abc import Iterator

from chatrelay.constants import MSG_ALREADY_JOINED, MSG_USERNAME_TAKEN
from chatrelay.exceptions import ConflictError, ValidationError
from chatrelay.logging import logger
from chatrelay.protocols import ConnectionHandle
from chatrelay.schemas.session import Session


class ConnectionRegistry:
    """
    Registry of joined sessions keyed by connection handle.

    Enforces that usernames are unique across live sessions and that a
    handle owns at most one session. All mutations and snapshots take the
    same lock, so the uniqueness check and the insert form one atomic step.
    """

    def __init__(self) -> None:
        self._sessions: dict[ConnectionHandle, Session] = {}
        self._lock = threading.Lock()

    def register(self, handle: ConnectionHandle, username: str) -> Session:
        """
        Create a session for `handle` under `username`.

        Args:
            handle: Connection that is joining.
            username: Display name, already trimmed and non-empty.

        Returns:
            The newly stored Session.

        Raises:
            ConflictError: If another session already holds `username`.
            ValidationError: If `handle` already owns a session.
        """
        with self._lock:
            if handle in self._sessions:
                raise ValidationError(MSG_ALREADY_JOINED)

            if any(s.username == username for s in self._sessions.values()):
                raise ConflictError(MSG_USERNAME_TAKEN)

            session = Session(username=username)
            self._sessions[handle] = session

        logger.debug(
            f"Session for {username} registered on connection "
            f"{handle.connection_id}"
        )
        return session

    def unregister(self, handle: ConnectionHandle) -> Session | None:
        """
        Remove the session owned by `handle`.

        Safe to call for handles that never joined or were already removed.

        Returns:
            The removed Session, or None if there was none.
        """
        with self._lock:
            session = self._sessions.pop(handle, None)

        if session is not None:
            logger.debug(
                f"Session for {session.username} removed from connection "
                f"{handle.connection_id}"
            )
        return session

    def get(self, handle: ConnectionHandle) -> Session | None:
        """Session owned by `handle`, or None if it has not joined."""
        with self._lock:
            return self._sessions.get(handle)

    def all(self) -> Iterator[tuple[ConnectionHandle, Session]]:
        """
        Iterate over a point-in-time snapshot of all sessions.

        The snapshot is copied under the lock; registrations and removals
        that happen while the caller iterates are not observed.
        """
        with self._lock:
            snapshot = list(self._sessions.items())
        return iter(snapshot)

    def usernames(self) -> list[str]:
        """Snapshot of the usernames of all live sessions."""
        with self._lock:
            return [s.username for s in self._sessions.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._sessions
