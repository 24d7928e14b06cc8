"""
Prometheus metrics for WebSocket connections and chat traffic.

Counter names registered with `prometheus_client` get a `_total` suffix on
exposition, so names are declared without it.
"""

from chatrelay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

# WebSocket Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections", "Total WebSocket connections accepted"
)

# Chat Session Metrics
chat_sessions_active = _get_or_create_gauge(
    "chat_sessions_active", "Number of joined chat sessions"
)

# Message Metrics
ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received",
    "Total valid envelopes received",
    ["type"],  # join, message
)

ws_messages_sent_total = _get_or_create_counter(
    "ws_messages_sent", "Total frames queued for delivery"
)

ws_send_failures_total = _get_or_create_counter(
    "ws_send_failures", "Total frames a connection did not accept"
)

chat_errors_total = _get_or_create_counter(
    "chat_errors",
    "Total error envelopes sent to clients",
    ["error_type"],  # ValidationError, ConflictError, ProtocolError
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "chat_sessions_active",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_send_failures_total",
    "chat_errors_total",
]
