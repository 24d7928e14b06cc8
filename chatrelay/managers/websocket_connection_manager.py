import asyncio

from chatrelay.api.ws.connection import ChatConnection
from chatrelay.constants import WS_GOING_AWAY_CODE, WS_GOING_AWAY_REASON
from chatrelay.logging import logger


class ConnectionManager:
    """
    Manager for live WebSocket connections.

    Tracks every accepted connection, joined or not, by connection ID so
    they can all be closed when the server shuts down. Chat sessions are
    tracked separately by the ConnectionRegistry.
    """

    def __init__(self) -> None:
        """
        Initializes a new instance of the `ConnectionManager` class.

        The `connections` attribute is a dict mapping connection IDs to
        ChatConnection handles.
        """
        self.connections: dict[str, ChatConnection] = {}

    def connect(self, connection: ChatConnection) -> None:
        """
        Adds a new connection.

        Args:
            connection: The accepted connection to track.
        """
        self.connections[connection.connection_id] = connection
        logger.debug(
            f"Connection {connection.connection_id} added to active connections"
        )

    def disconnect(self, connection_id: str) -> None:
        """
        Removes a connection by ID. Unknown IDs are ignored.

        Args:
            connection_id: The ID of the connection to remove.
        """
        if self.connections.pop(connection_id, None) is None:
            return

        logger.debug(
            f"Connection {connection_id} removed from active connections"
        )

    def __len__(self) -> int:
        return len(self.connections)

    async def close_all(
        self,
        code: int = WS_GOING_AWAY_CODE,
        reason: str = WS_GOING_AWAY_REASON,
    ) -> int:
        """
        Closes all tracked connections concurrently.

        Args:
            code: WebSocket close code sent to every client.
            reason: Close reason sent to every client.

        Returns:
            Number of connections that were closed.
        """
        # Snapshot, endpoints remove themselves while we close them
        connections_snapshot = list(self.connections.values())
        if not connections_snapshot:
            return 0

        logger.info(f"Closing {len(connections_snapshot)} WebSocket connections")
        await asyncio.gather(
            *[conn.close(code=code, reason=reason) for conn in connections_snapshot],
            return_exceptions=True,
        )
        self.connections.clear()
        return len(connections_snapshot)
