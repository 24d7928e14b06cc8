from typing import Any

from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from chatrelay.api.ws.connection import ChatConnection
from chatrelay.logging import clear_log_context, logger, set_log_context
from chatrelay.managers.broadcast_coordinator import BroadcastCoordinator
from chatrelay.managers.websocket_connection_manager import ConnectionManager
from chatrelay.middlewares.correlation_id import (
    CORRELATION_ID_HEADER,
    bind_correlation_id,
)
from chatrelay.utils.metrics import ws_connections_active, ws_connections_total


class ChatWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint bridging Starlette callbacks to the coordinator.

    Starlette runs one instance per connection and processes inbound frames
    sequentially. The coordinator and connection manager are taken from
    `app.state`, where the application factory stores them.
    """

    encoding = None  # Accept both text and binary frames

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Return the raw frame payload without parsing it.

        Parsing happens in the coordinator so that malformed frames are
        answered with an `error` envelope instead of closing the socket.
        """
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accept the connection and register its handle.

        This method performs the following tasks:
        1. Accepts the WebSocket handshake
        2. Creates a ChatConnection with its own outbound queue and writer
        3. Sets the correlation ID used by every log line of this connection
        4. Registers the connection in the connection manager
        5. Notifies the coordinator (connection starts unjoined)
        """
        await super().on_connect(websocket)

        state = self.scope["app"].state
        self.coordinator: BroadcastCoordinator = state.coordinator
        self.connection_manager: ConnectionManager = state.connection_manager

        self.connection = ChatConnection(
            websocket, queue_size=state.settings.WS_SEND_QUEUE_SIZE
        )

        bind_correlation_id(
            websocket.headers.get(CORRELATION_ID_HEADER),
            fallback=self.connection.connection_id,
        )
        set_log_context(connection_id=self.connection.connection_id)

        self.connection.start()
        self.connection_manager.connect(self.connection)
        ws_connections_total.inc()
        ws_connections_active.inc()

        self.coordinator.on_connect(self.connection)

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Release the connection.

        The coordinator drops the session and announces the departure before
        the first await, so the notice goes out even if the handler task is
        being cancelled. The writer is stopped last.
        """
        connection: ChatConnection | None = getattr(self, "connection", None)
        if connection is None:
            return

        self.connection_manager.disconnect(connection.connection_id)
        self.coordinator.on_close(connection)
        ws_connections_active.dec()

        logger.debug(
            f"Connection {connection.connection_id} closed with code {close_code}"
        )
        clear_log_context()

        await connection.stop()
