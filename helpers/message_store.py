"""
Append-only message log with serialized writes
"""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from .constants import MESSAGE_WINDOW_SIZE, ERROR_MESSAGES
from .database import MessageORM
from .errors import PersistenceError
from .logger import get_logger
from .models import Message, utc_timestamp

logger = get_logger()

# Called with the room's window as read right after the write
OnCommit = Callable[[List[Message]], Awaitable[None]]


class MessageStore:
    """
    Ordered message log queryable by room, newest first

    At most one write (append or clear) is in flight at any instant. The
    window read after a write happens under the write lock, so a clear is
    never seen half-applied. The on_commit callback runs after the lock is
    released: callbacks for one room run one at a time in write order, while
    a slow callback in one room never delays writes or deliveries elsewhere.
    """

    def __init__(self, session_factory: async_sessionmaker, window_size: int = MESSAGE_WINDOW_SIZE):
        self._session_factory = session_factory
        self._window_size = window_size
        self._write_lock = asyncio.Lock()
        # Room -> future resolved when the room's latest delivery finishes
        self._delivery_tails: Dict[str, asyncio.Future] = {}

    @staticmethod
    def _orm_to_model(orm: MessageORM) -> Message:
        return Message(
            id=orm.id,
            author=orm.author,
            text=orm.text,
            created_at=orm.created_at,
            room=orm.room,
        )

    def _take_turn(self, room: str) -> Tuple[Optional[asyncio.Future], asyncio.Future]:
        # Must run under the write lock so turns follow write order
        previous = self._delivery_tails.get(room)
        turn = asyncio.get_running_loop().create_future()
        self._delivery_tails[room] = turn
        return previous, turn

    async def _deliver(self, room: str, window: List[Message], on_commit: OnCommit,
                       previous: Optional[asyncio.Future], turn: asyncio.Future) -> None:
        try:
            if previous is not None:
                await asyncio.shield(previous)
            await on_commit(window)
        finally:
            if not turn.done():
                turn.set_result(None)
            if self._delivery_tails.get(room) is turn:
                del self._delivery_tails[room]

    async def append(self, room: str, author: str, text: str,
                     on_commit: Optional[OnCommit] = None) -> Message:
        """
        Append a message to a room's log

        Args:
            room: Allowed room identifier
            author: Display name at posting time
            text: Sanitized, non-empty message text
            on_commit: Awaited with the room's updated window after the insert

        Returns:
            The stored Message with its assigned id and timestamp

        Raises:
            PersistenceError: if the insert fails
        """
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    orm = MessageORM(author=author, text=text, created_at=utc_timestamp(), room=room)
                    session.add(orm)
                    await session.commit()
                    message = self._orm_to_model(orm)
            except SQLAlchemyError as e:
                logger.error(f"Message insert failed for room {room}: {e}")
                raise PersistenceError(ERROR_MESSAGES["store_failed"]) from e

            if on_commit is None:
                return message

            window = await self.fetch_window(room)
            previous, turn = self._take_turn(room)

        await self._deliver(room, window, on_commit, previous, turn)
        return message

    async def fetch_window(self, room: str, limit: Optional[int] = None) -> List[Message]:
        """
        Most recent messages of a room, ordered by id descending

        Args:
            room: Room identifier
            limit: Window size (capped at the store's window size)

        Returns:
            Up to window-size messages, newest first
        """
        size = self._window_size if limit is None else min(limit, self._window_size)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(MessageORM)
                    .where(MessageORM.room == room)
                    .order_by(MessageORM.id.desc())
                    .limit(size)
                )
                return [self._orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Window fetch failed for room {room}: {e}")
            raise PersistenceError(ERROR_MESSAGES["store_failed"]) from e

    async def clear_room(self, room: str, on_commit: Optional[OnCommit] = None) -> int:
        """
        Delete every message of a room in one transaction

        Args:
            room: Room identifier
            on_commit: Awaited with the room's (now empty) window after the delete

        Returns:
            Number of deleted messages

        Raises:
            PersistenceError: if the delete fails
        """
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    result = await session.execute(
                        delete(MessageORM).where(MessageORM.room == room)
                    )
                    await session.commit()
                    deleted = result.rowcount or 0
            except SQLAlchemyError as e:
                logger.error(f"Clear failed for room {room}: {e}")
                raise PersistenceError(ERROR_MESSAGES["clear_failed"]) from e

            if on_commit is None:
                return deleted

            window = await self.fetch_window(room)
            previous, turn = self._take_turn(room)

        await self._deliver(room, window, on_commit, previous, turn)
        return deleted

    async def count(self) -> int:
        """Total number of stored messages"""
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.count(MessageORM.id)))
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(ERROR_MESSAGES["store_failed"]) from e
