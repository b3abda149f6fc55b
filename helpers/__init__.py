"""
Room Chat Server Helpers Module
Session, room, message store and admin components
"""

from .models import Message, Session, AckResult
from .errors import ChatError, ValidationError, RateLimitError, AuthorizationError, PersistenceError
from .validators import (
    escape_html,
    sanitize_message,
    sanitize_room,
    sanitize_display_name,
    parse_client_frame
)
from .rate_limiter import RateLimiter
from .room_registry import RoomRegistry
from .database import create_engine, create_session_factory, init_db
from .message_store import MessageStore
from .admin import AdminAuthorizer
from .broadcaster import BroadcastDispatcher, snapshot, ack_payload, error_payload
from .names import generate_display_name
from .session_manager import SessionManager
from .constants import *
from .logger import (
    get_logger,
    log_security_event,
    log_connection_event,
    log_message_event,
    log_admin_event,
    log_websocket_event,
    log_system_event
)

__all__ = [
    'Message',
    'Session',
    'AckResult',
    'ChatError',
    'ValidationError',
    'RateLimitError',
    'AuthorizationError',
    'PersistenceError',
    'escape_html',
    'sanitize_message',
    'sanitize_room',
    'sanitize_display_name',
    'parse_client_frame',
    'RateLimiter',
    'RoomRegistry',
    'create_engine',
    'create_session_factory',
    'init_db',
    'MessageStore',
    'AdminAuthorizer',
    'BroadcastDispatcher',
    'snapshot',
    'ack_payload',
    'error_payload',
    'generate_display_name',
    'SessionManager',
    'get_logger',
    'log_security_event',
    'log_connection_event',
    'log_message_event',
    'log_admin_event',
    'log_websocket_event',
    'log_system_event'
]
