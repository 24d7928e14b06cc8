"""
Custom exception classes for the chat relay.

Every protocol-level failure is represented by a subclass of
`ChatRelayError`. Errors caused by a client's envelope are converted into an
`error` envelope for that client only; transport errors are logged and
swallowed by the broadcaster.
"""

from chatrelay.schemas.envelopes import ErrorEnvelope


class ChatRelayError(Exception):
    """
    Base class for chat relay errors.

    Attributes:
        message: Human-readable message sent to the client.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_envelope(self) -> ErrorEnvelope:
        """
        Convert the exception to an outbound `error` envelope.

        Returns:
            ErrorEnvelope stamped with the current time.
        """
        return ErrorEnvelope(message=self.message)


class ValidationError(ChatRelayError):
    """
    Envelope content failed validation.

    Raised for an empty username or text, a join on an already joined
    connection, and a chat message from a connection that has not joined.
    """

    pass


class ConflictError(ChatRelayError):
    """
    Requested username is held by another session.
    """

    pass


class ProtocolError(ChatRelayError):
    """
    Envelope could not be parsed or has an unknown type.
    """

    pass


class TransportError(ChatRelayError):
    """
    Outbound frame could not be handed to a connection.

    Never reported to clients; the broadcaster logs it and moves on to the
    next recipient.
    """

    def __init__(self, message: str, connection_id: str = "") -> None:
        super().__init__(message)
        self.connection_id = connection_id
