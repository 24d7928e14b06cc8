import asyncio
import uuid

from starlette.websockets import WebSocket, WebSocketDisconnect

from chatrelay.constants import WS_CLOSE_TIMEOUT_SECONDS
from chatrelay.logging import logger


class ChatConnection:
    """
    Connection handle wrapping a Starlette WebSocket.

    Outbound frames go into a bounded queue drained by a dedicated writer
    task, so `send` never waits on the network. A slow peer fills its own
    queue and starts dropping frames instead of stalling the broadcaster.
    """

    def __init__(self, websocket: WebSocket, queue_size: int = 256) -> None:
        """
        Args:
            websocket: Accepted WebSocket connection.
            queue_size: Maximum number of frames waiting to be written.
        """
        self.websocket = websocket
        self.connection_id = str(uuid.uuid4())
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once the connection stopped accepting frames."""
        return self._closed

    def start(self) -> None:
        """Start the writer task. Must be called from the event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(
                self._write_loop(), name=f"ws_writer_{self.connection_id[:8]}"
            )

    def send(self, frame: str) -> bool:
        """
        Queue a frame for delivery without blocking.

        Returns:
            False if the connection is closed or its queue is full.
        """
        if self._closed:
            return False

        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(
                f"Outbound queue full for connection {self.connection_id}, "
                f"dropping frame"
            )
            return False

        return True

    async def _write_loop(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                await self.websocket.send_text(frame)
            except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
                # WebSocketDisconnect: Client disconnected
                # ConnectionError: Network errors
                # RuntimeError: WebSocket in invalid state
                logger.debug(
                    f"Writer for connection {self.connection_id} stopped: {e}"
                )
                self._closed = True
                return
            finally:
                self._queue.task_done()

    async def stop(self) -> None:
        """Stop accepting frames and cancel the writer task."""
        self._closed = True

        if self._writer is not None and not self._writer.done():
            self._writer.cancel()
            await asyncio.gather(self._writer, return_exceptions=True)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        """
        Stop the writer and close the underlying WebSocket.

        Closing is bounded by WS_CLOSE_TIMEOUT_SECONDS so a dead peer
        cannot hold up shutdown.
        """
        await self.stop()

        try:
            await asyncio.wait_for(
                self.websocket.close(code=code, reason=reason),
                timeout=WS_CLOSE_TIMEOUT_SECONDS,
            )
        except (
            asyncio.TimeoutError,
            WebSocketDisconnect,
            ConnectionError,
            RuntimeError,
        ) as e:
            logger.debug(
                f"Could not close connection {self.connection_id} cleanly: {e}"
            )
