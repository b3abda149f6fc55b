"""Shared test fixtures for the room chat server."""
import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from config import Settings
from helpers import (
    AdminAuthorizer,
    BroadcastDispatcher,
    MessageStore,
    RateLimiter,
    RoomRegistry,
    SessionManager,
    create_engine,
    create_session_factory,
    init_db,
)
from main import create_app

ADMIN_TOKEN = "s3cret-admin-token"


class FakeWebSocket:
    """Records frames sent by the dispatcher."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_text(self, data: str):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(json.loads(data))

    @property
    def last(self):
        return self.sent[-1]


class StuckWebSocket:
    """A socket whose writes block until released, like a peer that stopped reading."""

    def __init__(self):
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.sent = []

    async def send_text(self, data: str):
        self.entered.set()
        await self.release.wait()
        self.sent.append(json.loads(data))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
async def store(tmp_path):
    """MessageStore backed by a temporary SQLite file."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    await init_db(engine)

    yield MessageStore(create_session_factory(engine))

    await engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def dispatcher(registry):
    return BroadcastDispatcher(registry)


@pytest.fixture
def session_manager(store, registry, dispatcher, clock):
    """SessionManager wired to real components with a fake clock and fixed names."""
    names = iter(f"User {i}" for i in range(1, 1000))
    return SessionManager(
        store=store,
        registry=registry,
        dispatcher=dispatcher,
        authorizer=AdminAuthorizer(ADMIN_TOKEN),
        rate_limiter=RateLimiter(clock=clock),
        name_supply=lambda: next(names),
    )


@pytest.fixture
def make_client(tmp_path):
    """Factory for a TestClient over a fresh app and database."""

    def _make(admin_token: str = ADMIN_TOKEN) -> TestClient:
        settings = Settings(
            admin_token=admin_token,
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
        )
        return TestClient(create_app(settings))

    return _make
