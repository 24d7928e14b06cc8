from typing import Any, Callable

from chatrelay.api.ws.formats import JSONFormatStrategy, MessageFormatStrategy
from chatrelay.constants import (
    ENVELOPE_JOIN,
    ENVELOPE_MESSAGE,
    MSG_ALREADY_JOINED,
    MSG_INVALID_FORMAT,
    MSG_JOIN_FIRST,
    MSG_TEXT_REQUIRED,
    MSG_USERNAME_REQUIRED,
    SYSTEM_JOINED_TEMPLATE,
    SYSTEM_LEFT_TEMPLATE,
)
from chatrelay.exceptions import ProtocolError, TransportError, ValidationError
from chatrelay.logging import logger
from chatrelay.managers.session_registry import ConnectionRegistry
from chatrelay.protocols import ConnectionHandle
from chatrelay.schemas.envelopes import (
    ChatMessageEnvelope,
    ChatMessageRequest,
    JoinedEnvelope,
    JoinRequest,
    OutboundEnvelope,
    SystemEnvelope,
)
from chatrelay.utils.error_handler import handle_chat_errors
from chatrelay.utils.metrics import (
    chat_sessions_active,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)


def _trimmed(value: Any) -> str:
    """Trim an optional string field. Other JSON types are malformed."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ProtocolError(MSG_INVALID_FORMAT)
    return value.strip()


class BroadcastCoordinator:
    """
    Chat protocol state machine and broadcaster.

    Each connection is either unjoined (no session in the registry) or
    joined. The coordinator is the only component that mutates the
    registry, and it never blocks: every outbound frame is handed to the
    connection's non-blocking `send`.

    Transport callbacks:
    - `on_connect(handle)` when a connection is accepted
    - `on_frame(handle, raw)` for every inbound frame
    - `on_close(handle)` once the connection is gone
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        message_format: MessageFormatStrategy | None = None,
    ) -> None:
        """
        Args:
            registry: Session registry owned by this coordinator.
            message_format: Wire codec, JSON by default.
        """
        self.registry = registry
        self.message_format = message_format or JSONFormatStrategy()
        self._handlers: dict[str, Callable[[ConnectionHandle, Any], None]] = {
            ENVELOPE_JOIN: self._handle_join,
            ENVELOPE_MESSAGE: self._handle_message,
        }

    def on_connect(self, handle: ConnectionHandle) -> None:
        """New connection; it starts unjoined."""
        logger.debug(f"New client connected ({handle.connection_id})")

    @handle_chat_errors
    def on_frame(self, handle: ConnectionHandle, raw: str | bytes) -> None:
        """
        Decode one inbound frame and dispatch it by envelope type.

        Client errors are answered with an `error` envelope by the
        `handle_chat_errors` decorator; the connection state is unchanged.
        """
        envelope = self.message_format.decode(raw)
        ws_messages_received_total.labels(type=envelope.type).inc()
        self._handlers[envelope.type](handle, envelope)

    def on_close(self, handle: ConnectionHandle) -> None:
        """
        Drop the connection's session and announce the departure.

        Unjoined connections leave silently.
        """
        session = self.registry.unregister(handle)
        if session is None:
            logger.debug(
                f"Unjoined client disconnected ({handle.connection_id})"
            )
            return

        chat_sessions_active.set(len(self.registry))
        self.broadcast(
            SystemEnvelope(
                text=SYSTEM_LEFT_TEMPLATE.format(username=session.username)
            )
        )
        logger.info(f"{session.username} disconnected")

    def _handle_join(
        self, handle: ConnectionHandle, request: JoinRequest
    ) -> None:
        if self.registry.get(handle) is not None:
            raise ValidationError(MSG_ALREADY_JOINED)

        username = _trimmed(request.username)
        if not username:
            raise ValidationError(MSG_USERNAME_REQUIRED)

        session = self.registry.register(handle, username)
        chat_sessions_active.set(len(self.registry))

        self.send_to(handle, JoinedEnvelope(username=session.username))
        self.broadcast(
            SystemEnvelope(
                text=SYSTEM_JOINED_TEMPLATE.format(username=session.username)
            ),
            exclude=handle,
        )
        logger.info(f"{session.username} joined the chat")

    def _handle_message(
        self, handle: ConnectionHandle, request: ChatMessageRequest
    ) -> None:
        session = self.registry.get(handle)
        if session is None:
            raise ValidationError(MSG_JOIN_FIRST)

        text = _trimmed(request.text)
        if not text:
            raise ValidationError(MSG_TEXT_REQUIRED)

        # Echo to the sender too, so every client sees the same order
        self.broadcast(ChatMessageEnvelope(username=session.username, text=text))
        logger.debug(f"{session.username}: {text}")

    def send_to(
        self, handle: ConnectionHandle, envelope: OutboundEnvelope
    ) -> bool:
        """
        Send an envelope to a single connection.

        Returns:
            True if the connection accepted the frame.
        """
        return self._deliver(handle, self.message_format.encode(envelope))

    def broadcast(
        self,
        envelope: OutboundEnvelope,
        exclude: ConnectionHandle | None = None,
    ) -> int:
        """
        Send an envelope to every joined connection.

        Recipients are taken from a registry snapshot at call time. A
        connection that fails to accept the frame does not affect delivery
        to the others.

        Args:
            envelope: Envelope to fan out, encoded once.
            exclude: Optional connection to skip (e.g. the joining client).

        Returns:
            Number of connections that accepted the frame.
        """
        frame = self.message_format.encode(envelope)
        delivered = 0

        for handle, _session in self.registry.all():
            if handle is exclude:
                continue
            if self._deliver(handle, frame):
                delivered += 1

        return delivered

    def _deliver(self, handle: ConnectionHandle, frame: str) -> bool:
        try:
            accepted = handle.send(frame)
        except Exception as ex:
            # Catch-all for misbehaving handles, delivery must go on
            error = TransportError(str(ex), handle.connection_id)
        else:
            if accepted:
                ws_messages_sent_total.inc()
                return True
            error = TransportError(
                "connection did not accept the frame", handle.connection_id
            )

        logger.warning(
            f"Failed to send to connection {error.connection_id}: "
            f"{error.message}"
        )
        ws_send_failures_total.inc()
        return False
