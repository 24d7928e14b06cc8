"""
Protocol for WebSocket message format strategies.

Defines the interface for turning raw frames into inbound envelopes and
outbound envelopes into frames, using structural subtyping (Protocol). Any
class implementing these methods is compatible without explicit inheritance.
"""

from typing import Protocol

from chatrelay.schemas.envelopes import InboundEnvelope, OutboundEnvelope


class MessageFormatStrategy(Protocol):
    """
    Protocol for WebSocket message format handling.

    Example:
        ```python
        from chatrelay.api.ws.formats import JSONFormatStrategy


        strategy = JSONFormatStrategy()
        envelope = strategy.decode('{"type": "join", "username": "alice"}')
        frame = strategy.encode(JoinedEnvelope(username="alice"))
        ```
    """

    def decode(self, raw: str | bytes) -> InboundEnvelope:
        """
        Convert a raw WebSocket frame to an inbound envelope.

        Args:
            raw: Text frame, or binary frame holding encoded text.

        Returns:
            Parsed and validated envelope.

        Raises:
            ProtocolError: If the frame is malformed or its type is unknown.
        """
        ...

    def encode(self, envelope: OutboundEnvelope) -> str:
        """
        Convert an outbound envelope to a text frame.

        Args:
            envelope: Envelope to serialize.

        Returns:
            Frame ready for websocket.send_text().
        """
        ...
