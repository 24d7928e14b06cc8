"""JSON message format strategy for WebSocket communication."""

import json

from pydantic import ValidationError as PydanticValidationError

from chatrelay.constants import MSG_INVALID_FORMAT, MSG_UNKNOWN_TYPE
from chatrelay.exceptions import ProtocolError
from chatrelay.schemas.envelopes import (
    INBOUND_ENVELOPES,
    InboundEnvelope,
    OutboundEnvelope,
)


class JSONFormatStrategy:
    """
    JSON message format strategy (default).

    Handles JSON-formatted envelopes with Pydantic validation. Binary
    frames are accepted when they contain UTF-8 encoded JSON.
    """

    def decode(self, raw: str | bytes) -> InboundEnvelope:
        """
        Parse a JSON frame into an inbound envelope.

        Args:
            raw: Text or UTF-8 encoded binary frame.

        Returns:
            JoinRequest or ChatMessageRequest with fields as sent.

        Raises:
            ProtocolError: "Invalid message format" if the frame is not
                JSON, nests too deeply to parse, or is `null`. "Unknown
                message type" if any other value has no recognized `type`,
                including JSON values that are not objects.
        """
        try:
            payload = json.loads(raw)
        except (UnicodeDecodeError, ValueError, RecursionError) as ex:
            raise ProtocolError(MSG_INVALID_FORMAT) from ex

        if payload is None:
            raise ProtocolError(MSG_INVALID_FORMAT)

        kind = payload.get("type") if isinstance(payload, dict) else None
        model = INBOUND_ENVELOPES.get(kind) if isinstance(kind, str) else None
        if model is None:
            raise ProtocolError(MSG_UNKNOWN_TYPE)

        try:
            return model.model_validate(payload)
        except PydanticValidationError as ex:
            raise ProtocolError(MSG_INVALID_FORMAT) from ex

    def encode(self, envelope: OutboundEnvelope) -> str:
        """
        Serialize an outbound envelope to a JSON text frame.

        Args:
            envelope: Envelope to serialize.

        Returns:
            JSON string.
        """
        return envelope.model_dump_json()
