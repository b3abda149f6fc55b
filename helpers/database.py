"""
SQLite database configuration and ORM model for the message log
"""

from sqlalchemy import Column, Integer, String, Text, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from .constants import DEFAULT_ROOM
from .logger import get_logger

logger = get_logger()


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class MessageORM(Base):
    """Append-only message log."""

    __tablename__ = "messages"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    author = Column(String(64), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(String(32), nullable=False)
    room = Column(
        String(64),
        nullable=False,
        default=DEFAULT_ROOM,
        server_default=DEFAULT_ROOM,
        index=True,
    )


def create_engine(database_url: str) -> AsyncEngine:
    """Create the async engine; in-memory databases share one connection."""
    if ":memory:" in database_url:
        return create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Get async session factory."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """
    Create the messages table and bring legacy tables up to date.

    Tables created before rooms existed lack the room column; it is added
    with the default room so old rows land in the default room.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

        result = await conn.execute(text("PRAGMA table_info(messages)"))
        columns = {row[1] for row in result}
        if "room" not in columns:
            await conn.execute(text(
                f"ALTER TABLE messages ADD COLUMN room VARCHAR(64) NOT NULL DEFAULT '{DEFAULT_ROOM}'"
            ))
            logger.info("Added room column to legacy messages table")
