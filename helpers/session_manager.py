"""
Per-connection session state and orchestration of client actions
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from .admin import AdminAuthorizer
from .broadcaster import BroadcastDispatcher, error_payload, snapshot
from .constants import ACTION_POST, ACTION_SET_NAME, ACTION_CLEAR, ERROR_MESSAGES
from .errors import ChatError, PersistenceError, ValidationError
from .logger import (
    get_logger,
    log_admin_event,
    log_connection_event,
    log_message_event,
)
from .message_store import MessageStore
from .models import AckResult, Message, Session
from .names import generate_display_name
from .rate_limiter import RateLimiter
from .room_registry import RoomRegistry
from .validators import sanitize_display_name, sanitize_message, sanitize_room

T = TypeVar("T")

logger = get_logger()


def _log_write_outcome(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Store write failed: {error}")


async def run_to_completion(write: Awaitable[T]) -> T:
    """
    Await a store write that keeps running if the caller is cancelled

    The write's outcome is always retrieved, so a failure after the caller
    went away is logged instead of surfacing as an unretrieved task error.
    """
    task = asyncio.ensure_future(write)
    task.add_done_callback(_log_write_outcome)
    return await asyncio.shield(task)


class SessionManager:
    """
    Owns every live Session and runs the actions a client can trigger

    A session's fields are only touched by its own connection's task, so
    no locking is needed here; shared state lives in the MessageStore
    (serialized writes) and the RoomRegistry (atomic moves).
    """

    def __init__(
        self,
        store: MessageStore,
        registry: RoomRegistry,
        dispatcher: BroadcastDispatcher,
        authorizer: AdminAuthorizer,
        rate_limiter: Optional[RateLimiter] = None,
        name_supply: Callable[[], str] = generate_display_name,
    ):
        self._store = store
        self._registry = registry
        self._dispatcher = dispatcher
        self._authorizer = authorizer
        self._rate_limiter = rate_limiter or RateLimiter()
        self._name_supply = name_supply
        # connection id -> Session
        self._sessions: Dict[str, Session] = {}

    def get_session(self, connection_id: str) -> Optional[Session]:
        return self._sessions.get(connection_id)

    def is_live(self, session: Session) -> bool:
        return self._sessions.get(session.connection_id) is session

    async def _window(self, room: str) -> Optional[List[Message]]:
        """The room's window, or None when the store cannot be read"""
        try:
            return await self._store.fetch_window(room)
        except PersistenceError:
            logger.error(f"No snapshot for {room}: store unavailable")
            return None

    async def connect(self, connection_id: str, websocket: Any) -> Session:
        """
        Create a session for a new connection and send its initial snapshot

        Args:
            connection_id: Transport-level connection identifier
            websocket: Accepted WebSocket, handed to the dispatcher

        Returns:
            The new Session, joined to the default room
        """
        session = Session(
            connection_id=connection_id,
            display_name=self._name_supply(),
            current_room=self._registry.default_room,
        )
        self._sessions[connection_id] = session
        self._dispatcher.register(connection_id, websocket)
        self._registry.join(connection_id, session.current_room)

        log_connection_event(session.display_name, session.current_room, "connect", connection_id)

        messages = await self._window(session.current_room)
        if messages is None:
            await self._dispatcher.send_to_session(connection_id, error_payload(ERROR_MESSAGES["store_failed"]))
            return session

        await self._dispatcher.send_to_session(connection_id, snapshot(
            messages,
            self._registry.rooms,
            session.current_room,
            display_name=session.display_name,
        ))
        return session

    def disconnect(self, session: Session) -> None:
        """Destroy a session and everything tracked for it; safe to call twice"""
        if self._sessions.pop(session.connection_id, None) is None:
            return

        self._registry.leave(session.connection_id)
        self._dispatcher.unregister(session.connection_id)
        log_connection_event(session.display_name, session.current_room, "disconnect", session.connection_id)

    def set_display_name(self, session: Session, raw: Any) -> AckResult:
        """
        Replace the session's display name

        Args:
            session: Acting session
            raw: Requested name

        Returns:
            {ok: true, username} or {ok: false, error}
        """
        try:
            self._rate_limiter.check(session, ACTION_SET_NAME)
            name = sanitize_display_name(raw)
        except ChatError as e:
            return AckResult.failure(e.message)

        session.display_name = name
        logger.info(f"Display name set: conn={session.connection_id} name={name}")
        return AckResult.success(username=name)

    async def join_room(self, session: Session, raw: Any) -> bool:
        """
        Move the session to another room and send it that room's snapshot

        Invalid, unknown or unchanged rooms are ignored without reply. If the
        new room's window cannot be read the session stays where it was and
        gets an error frame instead of a snapshot.

        Returns:
            True if the session switched rooms
        """
        if not self.is_live(session):
            return False

        room = sanitize_room(raw)
        if not room or not self._registry.is_allowed(room) or room == session.current_room:
            return False

        previous = self._registry.move(session.connection_id, room)
        messages = await self._window(room)
        if not self.is_live(session):
            return False

        if messages is None:
            self._registry.move(session.connection_id, previous)
            await self._dispatcher.send_to_session(session.connection_id, error_payload(ERROR_MESSAGES["store_failed"]))
            return False

        session.current_room = room
        log_connection_event(session.display_name, room, "join", session.connection_id)
        await self._dispatcher.send_to_session(session.connection_id, snapshot(
            messages, self._registry.rooms, room
        ))
        return True

    async def _broadcast_window(self, room: str, messages: List[Message]) -> None:
        await self._dispatcher.send_to_room(room, snapshot(messages, self._registry.rooms, room))

    async def post_message(self, session: Session, raw: Any) -> Optional[Message]:
        """
        Store a message in the session's current room and broadcast the room window

        Rate-limited, empty and unstorable messages are dropped silently.

        Returns:
            The stored Message, or None if the post was dropped
        """
        if not self._rate_limiter.allow(session, ACTION_POST):
            return None

        text = sanitize_message(raw)
        if not text:
            return None

        room = session.current_room
        author = session.display_name

        async def broadcast(messages: List[Message]) -> None:
            await self._broadcast_window(room, messages)

        try:
            # An admitted write finishes even if this connection goes away
            message = await run_to_completion(self._store.append(room, author, text, on_commit=broadcast))
        except PersistenceError as e:
            log_message_event(0, author, room, "drop", e.message)
            return None

        log_message_event(message.id, author, room, "post", f"length={len(text)}")
        return message

    def verify_admin(self, session: Session, token: Any) -> AckResult:
        """Report whether the token is the admin secret; no side effects"""
        ok = self._authorizer.verify(token)
        log_admin_event("verify", session.connection_id, ok=ok)
        return AckResult(ok=ok)

    async def clear_room(self, session: Session, raw_room: Any, token: Any) -> AckResult:
        """
        Delete a room's history and broadcast its empty window

        Args:
            session: Acting session
            raw_room: Room to clear; None means the session's current room
            token: Admin token

        Returns:
            {ok: true} or {ok: false, error}
        """
        try:
            self._rate_limiter.check(session, ACTION_CLEAR, record=False)

            room = sanitize_room(session.current_room if raw_room is None else raw_room)
            if not room or not self._registry.is_allowed(room):
                raise ValidationError(ERROR_MESSAGES["invalid_room"])

            self._authorizer.require(token)
        except ChatError as e:
            log_admin_event("clear", session.connection_id, sanitize_room(raw_room) if raw_room else "", ok=False)
            return AckResult.failure(e.message)

        # Only authorized clears start the cooldown window
        self._rate_limiter.record(session, ACTION_CLEAR)

        async def broadcast(messages: List[Message]) -> None:
            await self._broadcast_window(room, messages)

        try:
            deleted = await run_to_completion(self._store.clear_room(room, on_commit=broadcast))
        except PersistenceError:
            log_admin_event("clear", session.connection_id, room, ok=False)
            return AckResult.failure(ERROR_MESSAGES["clear_failed"])

        log_admin_event("clear", session.connection_id, room, ok=True)
        logger.info(f"{session.display_name} cleared room '{room}' ({deleted} messages)")
        return AckResult.success()

    def stats(self) -> Dict[str, Any]:
        return {
            "total_sessions": len(self._sessions),
            "rooms": self._registry.member_counts(),
        }
