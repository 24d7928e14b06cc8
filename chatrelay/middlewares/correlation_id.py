"""
Correlation IDs for log lines.

An HTTP request gets its ID from the `X-Correlation-ID` header or a fresh
one, and the ID is echoed back in the response. A WebSocket connection
binds one ID for its whole lifetime: the upgrade request's header when the
client sent one, otherwise the start of its connection ID. Either way the
ID lives in a ContextVar that the log formatters read.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_LENGTH = 8

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def bind_correlation_id(
    header_value: str | None, fallback: str | None = None
) -> str:
    """
    Pick and bind the correlation ID for the current context.

    Args:
        header_value: `X-Correlation-ID` sent by the client, if any.
        fallback: ID to use without a header. A random one if omitted.

    Returns:
        The bound ID, at most CORRELATION_ID_LENGTH characters.
    """
    cid = (header_value or fallback or uuid.uuid4().hex)[:CORRELATION_ID_LENGTH]
    correlation_id.set(cid)
    return cid


class CorrelationIDMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
    """
    Binds a correlation ID to every HTTP request and returns it in the
    `X-Correlation-ID` response header.

    WebSocket scopes bypass BaseHTTPMiddleware; the chat endpoint binds its
    own ID in `on_connect`.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
        cid = bind_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.request_id = cid

        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = cid
        return response
