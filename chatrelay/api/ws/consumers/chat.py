from fastapi import APIRouter
from starlette.websockets import WebSocket

from chatrelay.api.ws.websocket import ChatWebSocketEndpoint

router = APIRouter()


@router.websocket_route("/")
class Chat(ChatWebSocketEndpoint):
    """
    Chat WebSocket endpoint.

    Served at the site root, where the browser client opens its socket on
    the page origin. Every frame is handed to the broadcast coordinator,
    which answers protocol errors itself.
    """

    async def on_receive(self, websocket: WebSocket, data: str | bytes) -> None:
        """
        Handles one inbound frame.

        Args:
            websocket: The WebSocket connection instance
            data: Raw text or binary frame payload
        """
        self.coordinator.on_frame(self.connection, data)
