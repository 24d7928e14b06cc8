"""
Application-level constants for hardcoded protocol behavior.

These values define the chat wire protocol and its safety limits and should
NEVER be changed via environment variables or configuration.

For configurable values (port, CORS, queue sizes, logging, etc.),
see chatrelay/settings.py where values can be overridden via environment
variables.
"""

# ============================================================================
# Envelope types
# ============================================================================

ENVELOPE_JOIN = "join"
ENVELOPE_JOINED = "joined"
ENVELOPE_MESSAGE = "message"
ENVELOPE_SYSTEM = "system"
ENVELOPE_ERROR = "error"


# ============================================================================
# Error messages sent to clients
# ============================================================================

MSG_USERNAME_REQUIRED = "Username is required"
MSG_USERNAME_TAKEN = "Username is already taken"
MSG_ALREADY_JOINED = "You have already joined the chat"
MSG_JOIN_FIRST = "You must join the chat first"
MSG_TEXT_REQUIRED = "Message text is required"
MSG_UNKNOWN_TYPE = "Unknown message type"
MSG_INVALID_FORMAT = "Invalid message format"


# ============================================================================
# System notifications
# ============================================================================

SYSTEM_JOINED_TEMPLATE = "{username} joined the chat"
SYSTEM_LEFT_TEMPLATE = "{username} left the chat"


# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Close code used for every connection when the server shuts down (RFC 6455)
WS_GOING_AWAY_CODE = 1001
WS_GOING_AWAY_REASON = "Server shutting down"

# Timeout (seconds) when closing WebSocket connections gracefully
# Ensures connections don't hang indefinitely during shutdown
WS_CLOSE_TIMEOUT_SECONDS = 5


# ============================================================================
# Logging
# ============================================================================

# Maximum size of a single structured log line (bytes)
MAX_LOG_SIZE_BYTES = 100_000
