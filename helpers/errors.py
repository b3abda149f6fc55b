"""
Error taxonomy for chat actions
"""


class ChatError(Exception):
    """Base class for errors local to a single client action"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ChatError):
    """Input was empty, oversized or malformed after normalization"""


class RateLimitError(ChatError):
    """Cooldown window for the action kind has not elapsed"""


class AuthorizationError(ChatError):
    """Admin token missing or invalid, or admin feature not configured"""


class PersistenceError(ChatError):
    """Underlying message store operation failed"""
