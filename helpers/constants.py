"""
Security-focused constants for the Room Chat Server
"""

# Rooms (first entry is the default room)
ALLOWED_ROOMS = ("general", "support", "random")
DEFAULT_ROOM = ALLOWED_ROOMS[0]

# Message and name limits
MAX_MESSAGE_LENGTH = 500
MAX_USERNAME_LENGTH = 32
MESSAGE_WINDOW_SIZE = 100

# Cooldown windows in seconds, per action kind
MESSAGE_RATE_SECONDS = 0.3
NAME_RATE_SECONDS = 1.0
CLEAR_RATE_SECONDS = 5.0

# Upper bound on a single socket write before the recipient is skipped
SEND_TIMEOUT_SECONDS = 5.0

ACTION_POST = "post"
ACTION_SET_NAME = "set_name"
ACTION_CLEAR = "clear"

RATE_LIMITS = {
    ACTION_POST: MESSAGE_RATE_SECONDS,
    ACTION_SET_NAME: NAME_RATE_SECONDS,
    ACTION_CLEAR: CLEAR_RATE_SECONDS,
}

# Sanitization patterns (characters to remove)
USERNAME_STRIP_PATTERN = r'[^a-zA-Z0-9 _-]'
ROOM_STRIP_PATTERN = r'[^a-z0-9\-_]'
MESSAGE_SANITIZATION_PATTERN = r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]'

# Client -> server event types
EVENT_POST_MESSAGE = "post-message"
EVENT_JOIN_ROOM = "join-room"
EVENT_SET_USERNAME = "set-username"
EVENT_VERIFY_ADMIN = "verify-admin"
EVENT_CLEAR_ROOM = "clear-room"

# Server -> client event types
EVENT_RECEIVE_MESSAGES = "receive-messages"
EVENT_ACK = "ack"
EVENT_ERROR = "error"

# Logging levels
LOG_LEVEL = "INFO"

# Error messages
ERROR_MESSAGES = {
    "name_rate_limit": "Rate limited. Try again shortly.",
    "clear_rate_limit": "Rate limited. Try again later.",
    "post_rate_limit": "Rate limited.",
    "empty_name": "Name cannot be empty.",
    "invalid_room": "Invalid room.",
    "unauthorized": "Unauthorized.",
    "clear_failed": "Failed to clear room.",
    "store_failed": "Message store unavailable.",
    "unexpected": "Unexpected error.",
    "invalid_json": "Invalid JSON format",
    "unknown_event": "Unknown event type",
}
