"""Tests for the per-session cooldown gate."""
import pytest

from helpers import RateLimitError, RateLimiter, Session
from helpers.constants import ACTION_CLEAR, ACTION_POST, ACTION_SET_NAME


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


def make_session(connection_id="ws_test"):
    return Session(connection_id=connection_id, display_name="Tester")


def test_first_action_is_allowed(limiter):
    session = make_session()
    assert limiter.allow(session, ACTION_POST) is True
    assert session.last_message_at is not None


def test_second_action_within_window_is_denied(limiter, clock):
    session = make_session()
    assert limiter.allow(session, ACTION_POST)
    clock.advance(0.1)
    assert limiter.allow(session, ACTION_POST) is False


def test_action_allowed_after_window(limiter, clock):
    session = make_session()
    assert limiter.allow(session, ACTION_POST)
    clock.advance(0.31)
    assert limiter.allow(session, ACTION_POST)


def test_denial_does_not_extend_window(limiter, clock):
    session = make_session()
    limiter.allow(session, ACTION_SET_NAME)
    first = session.last_name_change_at
    clock.advance(0.5)
    assert not limiter.allow(session, ACTION_SET_NAME)
    assert session.last_name_change_at == first
    clock.advance(0.5)
    assert limiter.allow(session, ACTION_SET_NAME)


def test_action_kinds_are_independent(limiter):
    session = make_session()
    assert limiter.allow(session, ACTION_POST)
    assert limiter.allow(session, ACTION_SET_NAME)
    assert limiter.allow(session, ACTION_CLEAR)
    assert not limiter.allow(session, ACTION_POST)
    assert not limiter.allow(session, ACTION_SET_NAME)
    assert not limiter.allow(session, ACTION_CLEAR)


def test_sessions_are_independent(limiter):
    alice, bob = make_session("ws_a"), make_session("ws_b")
    assert limiter.allow(alice, ACTION_POST)
    assert limiter.allow(bob, ACTION_POST)


def test_check_raises_with_action_message(limiter, clock):
    session = make_session()
    limiter.check(session, ACTION_CLEAR)
    clock.advance(1)
    with pytest.raises(RateLimitError) as exc_info:
        limiter.check(session, ACTION_CLEAR)
    assert exc_info.value.message == "Rate limited. Try again later."


def test_custom_intervals(clock):
    limiter = RateLimiter({ACTION_POST: 2.0, ACTION_SET_NAME: 0, ACTION_CLEAR: 0}, clock=clock)
    session = make_session()
    assert limiter.allow(session, ACTION_POST)
    clock.advance(1.0)
    assert not limiter.allow(session, ACTION_POST)
    assert limiter.interval(ACTION_POST) == 2.0


def test_peek_does_not_start_window(limiter, clock):
    session = make_session()
    assert limiter.allow(session, ACTION_CLEAR, record=False)
    assert session.last_clear_at is None

    limiter.check(session, ACTION_CLEAR, record=False)
    limiter.record(session, ACTION_CLEAR)
    assert session.last_clear_at == clock.now

    clock.advance(1)
    assert limiter.allow(session, ACTION_CLEAR, record=False) is False
