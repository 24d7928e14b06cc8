"""
Prometheus metrics definitions.

All metrics are re-exported here so callers can import them from a single
place:

    from chatrelay.utils.metrics import ws_connections_active
"""

from chatrelay.utils.metrics._helpers import _get_or_create_gauge
from chatrelay.utils.metrics.websocket import (
    chat_errors_total,
    chat_sessions_active,
    ws_connections_active,
    ws_connections_total,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)

app_info = _get_or_create_gauge(
    "app_info",
    "Application information",
    ["version", "python_version", "environment"],
)

__all__ = [
    "app_info",
    "chat_errors_total",
    "chat_sessions_active",
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_send_failures_total",
]
