"""
Secure logging configuration for the Room Chat Server
"""

import logging
import os
import re
import sys
from typing import Optional
from .constants import LOG_LEVEL

LOGGER_NAME = "room_chat"

_SECRET_PATTERN = re.compile(r'(token|password|secret)=([^\s|,]+)', re.IGNORECASE)


class SecureFormatter(logging.Formatter):
    """Custom formatter that masks secret values"""

    def format(self, record):
        message = super().format(record)
        return _SECRET_PATTERN.sub(r'\1=***', message)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Get a secure logger instance with proper formatting

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(SecureFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

        logger.addHandler(handler)
        logger.setLevel(os.getenv("LOG_LEVEL", LOG_LEVEL).upper())

        # Prevent propagation to root logger
        logger.propagate = False

    return logger


def log_security_event(event_type: str, details: dict, logger: Optional[logging.Logger] = None):
    """
    Log security-related events with structured data

    Args:
        event_type: Type of security event
        details: Event details (never include secrets)
        logger: Logger instance (optional)
    """
    if logger is None:
        logger = get_logger()

    logger.warning(f"SECURITY_EVENT: {event_type} | {details}")


def log_connection_event(display_name: str, room: str, action: str, connection_id: str = "unknown"):
    """
    Log connection-related events for monitoring

    Args:
        display_name: Session display name
        room: Room the session is in
        action: Action (connect/disconnect/join)
        connection_id: Connection identifier
    """
    get_logger().info(
        f"CONNECTION_EVENT: {action} | user={display_name} | room={room} | conn={connection_id}"
    )


def log_message_event(message_id: int, display_name: str, room: str, action: str, details: str = ""):
    """
    Log message-related events for debugging

    Args:
        message_id: Store-assigned message id (0 when none)
        display_name: Sender display name
        room: Room name
        action: Action (post/broadcast/drop)
        details: Additional details
    """
    get_logger().info(
        f"MESSAGE_EVENT: {action} | id={message_id} | user={display_name} | room={room} | {details}"
    )


def log_admin_event(action: str, connection_id: str, room: str = "", ok: bool = False):
    """Log admin verification and room clear outcomes"""
    room_info = f" | room={room}" if room else ""
    level = logging.INFO if ok else logging.WARNING
    get_logger().log(level, f"ADMIN_EVENT: {action} | conn={connection_id}{room_info} | ok={ok}")


def log_websocket_event(event_type: str, connection_id: str, details: str = ""):
    """
    Log WebSocket protocol events

    Args:
        event_type: Type of WebSocket event
        connection_id: Connection identifier
        details: Additional details
    """
    get_logger().debug(f"WEBSOCKET_EVENT: {event_type} | conn={connection_id} | {details}")


def log_system_event(event_type: str, details: str, level: str = "info"):
    """
    Log system-level events

    Args:
        event_type: Type of system event
        details: Event details
        level: Log level (info/warning/error)
    """
    logger = get_logger()
    log_message = f"SYSTEM_EVENT: {event_type} | {details}"

    if level == "warning":
        logger.warning(log_message)
    elif level == "error":
        logger.error(log_message)
    else:
        logger.info(log_message)
