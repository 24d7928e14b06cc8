"""
Error handler decorator for chat protocol handlers.

Converts ChatRelayError instances raised while processing a client's
envelope into an `error` envelope for that client only, eliminating
try/except blocks in the individual handlers.
"""

from functools import wraps
from typing import Any, Callable

from chatrelay.exceptions import ChatRelayError, TransportError
from chatrelay.logging import logger
from chatrelay.protocols import ConnectionHandle
from chatrelay.utils.metrics import chat_errors_total


def handle_chat_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator for coordinator methods taking `(self, handle, ...)`.

    The decorated object must provide `send_to(handle, envelope)`.

    Example:
        ```python
        @handle_chat_errors
        def on_frame(self, handle, raw):
            envelope = self.message_format.decode(raw)  # may raise ProtocolError
            ...
        ```
    """

    @wraps(func)
    def wrapper(
        self: Any, handle: ConnectionHandle, *args: Any, **kwargs: Any
    ) -> Any:
        try:
            return func(self, handle, *args, **kwargs)
        except TransportError:
            raise
        except ChatRelayError as ex:
            logger.debug(
                f"{type(ex).__name__} on connection {handle.connection_id}: "
                f"{ex.message}",
                extra={"exception_type": type(ex).__name__},
            )
            chat_errors_total.labels(error_type=type(ex).__name__).inc()
            self.send_to(handle, ex.to_envelope())
            return None

    return wrapper
