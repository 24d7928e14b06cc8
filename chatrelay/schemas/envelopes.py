"""
Wire envelopes exchanged with chat clients.

Inbound envelopes only pin down `type`. The `username` and `text` fields
are kept as sent; their types are checked by the coordinator after the
join state, so an unjoined client always hears that it must join first.
Outbound envelopes are immutable and stamped with the time they were
created.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from chatrelay.constants import (
    ENVELOPE_ERROR,
    ENVELOPE_JOIN,
    ENVELOPE_JOINED,
    ENVELOPE_MESSAGE,
    ENVELOPE_SYSTEM,
)
from chatrelay.fields.iso_timestamp import IsoTimestamp, IsoTimestampField


class InboundEnvelope(BaseModel):  # type: ignore[misc]
    """Base model for client to server envelopes. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str


class JoinRequest(InboundEnvelope):
    """
    Request to join the chat under a display name.

    Attributes:
        username: Requested display name as sent, any JSON value.
    """

    type: Literal["join"] = ENVELOPE_JOIN
    username: Any = None


class ChatMessageRequest(InboundEnvelope):
    """
    Chat message sent by a joined client.

    Attributes:
        text: Message text as sent, any JSON value.
    """

    type: Literal["message"] = ENVELOPE_MESSAGE
    text: Any = None


INBOUND_ENVELOPES: dict[str, type[InboundEnvelope]] = {
    ENVELOPE_JOIN: JoinRequest,
    ENVELOPE_MESSAGE: ChatMessageRequest,
}


class OutboundEnvelope(BaseModel):  # type: ignore[misc]
    """Base model for server to client envelopes."""

    model_config = ConfigDict(frozen=True)

    type: str


class JoinedEnvelope(OutboundEnvelope):
    """Join confirmation, sent to the joining client only."""

    type: Literal["joined"] = ENVELOPE_JOINED
    username: str
    timestamp: IsoTimestamp = IsoTimestampField()


class ChatMessageEnvelope(OutboundEnvelope):
    """Chat message broadcast to every joined client, sender included."""

    type: Literal["message"] = ENVELOPE_MESSAGE
    username: str
    text: str
    timestamp: IsoTimestamp = IsoTimestampField()


class SystemEnvelope(OutboundEnvelope):
    """Join and leave notifications."""

    type: Literal["system"] = ENVELOPE_SYSTEM
    text: str
    timestamp: IsoTimestamp = IsoTimestampField()


class ErrorEnvelope(OutboundEnvelope):
    """Error reported to the single client that caused it."""

    type: Literal["error"] = ENVELOPE_ERROR
    message: str
    timestamp: IsoTimestamp = IsoTimestampField()
