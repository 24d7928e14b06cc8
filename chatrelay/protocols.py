"""
Protocol classes for structural subtyping (duck typing with type safety).

The broadcast core never imports the transport. Anything that implements
`ConnectionHandle` can be registered and receive frames, which keeps the
coordinator testable with plain fakes.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ConnectionHandle(Protocol):
    """
    Protocol for one live transport connection.

    Handles are compared and hashed by identity. The only capability the
    core needs is a non-blocking send.

    Attributes:
        connection_id: Identifier used in logs.
    """

    connection_id: str

    def send(self, frame: str) -> bool:
        """
        Queue an outbound frame without blocking.

        Args:
            frame: Encoded envelope.

        Returns:
            True if the frame was queued, False if the connection is closed
            or cannot accept more frames. Never raises.
        """
        ...
