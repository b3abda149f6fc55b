"""
Input sanitization for untrusted client text: messages, room keys and display names
"""

import re
from typing import Any, Dict, Optional, Tuple
from .constants import (
    USERNAME_STRIP_PATTERN,
    ROOM_STRIP_PATTERN,
    MESSAGE_SANITIZATION_PATTERN,
    MAX_MESSAGE_LENGTH,
    MAX_USERNAME_LENGTH,
    ERROR_MESSAGES
)
from .errors import ValidationError
from .logger import log_security_event


_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_HTML_ESCAPE_PATTERN = re.compile(r'[&<>"\']')


def escape_html(text: str) -> str:
    """
    Escape markup characters so the text renders literally

    Args:
        text: Raw text

    Returns:
        Text with & < > " ' replaced by HTML entities
    """
    return _HTML_ESCAPE_PATTERN.sub(lambda m: _HTML_ESCAPES[m.group(0)], text)


def sanitize_message(message: Any) -> str:
    """
    Sanitize chat message text for storage

    Trims surrounding whitespace, removes control characters, truncates
    to MAX_MESSAGE_LENGTH and HTML-escapes the result.

    Args:
        message: Raw message payload (non-strings are treated as empty)

    Returns:
        Sanitized text, or "" if nothing is left
    """
    if not isinstance(message, str):
        return ""

    text = re.sub(MESSAGE_SANITIZATION_PATTERN, '', message).strip()
    if not text:
        return ""

    if len(text) > MAX_MESSAGE_LENGTH:
        text = text[:MAX_MESSAGE_LENGTH]

    return escape_html(text)


def sanitize_room(room: Any) -> str:
    """
    Normalize a room key: lowercase, trimmed, only [a-z0-9-_]

    Args:
        room: Raw room input

    Returns:
        Normalized room key, or "" for non-string input
    """
    if not isinstance(room, str):
        return ""

    return re.sub(ROOM_STRIP_PATTERN, '', room.lower().strip())


def sanitize_display_name(username: Any) -> str:
    """
    Sanitize a user-provided display name

    Args:
        username: Raw name input

    Returns:
        Escaped display name, at most MAX_USERNAME_LENGTH characters before escaping

    Raises:
        ValidationError: if nothing is left after normalization
    """
    if not isinstance(username, str):
        log_security_event("invalid_username_type", {"type": type(username).__name__})
        raise ValidationError(ERROR_MESSAGES["empty_name"])

    sanitized = re.sub(USERNAME_STRIP_PATTERN, '', username.strip())
    sanitized = re.sub(r'\s+', ' ', sanitized)

    if not sanitized:
        raise ValidationError(ERROR_MESSAGES["empty_name"])

    return escape_html(sanitized[:MAX_USERNAME_LENGTH])


def parse_client_frame(payload: Any) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Validate the structure of an inbound JSON frame

    Args:
        payload: Decoded JSON value

    Returns:
        Tuple of (is_valid, event_type, payload_dict)
    """
    if not isinstance(payload, dict):
        log_security_event("invalid_payload_type", {"payload_type": type(payload).__name__})
        return False, "", None

    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        log_security_event("missing_event_type", {"keys": sorted(payload.keys())})
        return False, "", None

    return True, event_type, payload
