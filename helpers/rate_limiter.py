"""
Per-session, per-action cooldown gate
"""

import time
from typing import Callable, Dict, Optional

from .constants import RATE_LIMITS, ACTION_POST, ACTION_SET_NAME, ACTION_CLEAR, ERROR_MESSAGES
from .errors import RateLimitError
from .logger import log_security_event
from .models import Session

# Action kind -> Session attribute holding its last allowed timestamp
_TIMESTAMP_FIELDS = {
    ACTION_POST: "last_message_at",
    ACTION_SET_NAME: "last_name_change_at",
    ACTION_CLEAR: "last_clear_at",
}

_DENY_MESSAGES = {
    ACTION_POST: ERROR_MESSAGES["post_rate_limit"],
    ACTION_SET_NAME: ERROR_MESSAGES["name_rate_limit"],
    ACTION_CLEAR: ERROR_MESSAGES["clear_rate_limit"],
}


class RateLimiter:
    """Cooldown gate with an independent window for each action kind"""

    def __init__(self, intervals: Optional[Dict[str, float]] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._intervals = dict(RATE_LIMITS if intervals is None else intervals)
        self._clock = clock

    def interval(self, kind: str) -> float:
        return self._intervals[kind]

    def allow(self, session: Session, kind: str, record: bool = True) -> bool:
        """
        Check the cooldown for (session, kind) and record the action if allowed

        Args:
            session: Acting session
            kind: One of post / set_name / clear
            record: Start a new window on allow; pass False to only peek

        Returns:
            True if the action may proceed
        """
        attr = _TIMESTAMP_FIELDS[kind]
        now = self._clock()
        last = getattr(session, attr)

        if last is not None and now - last < self._intervals[kind]:
            log_security_event("rate_limit_exceeded", {
                "conn": session.connection_id,
                "action": kind,
                "elapsed_ms": int((now - last) * 1000),
            })
            return False

        if record:
            setattr(session, attr, now)
        return True

    def record(self, session: Session, kind: str) -> None:
        """Start the cooldown window for (session, kind) now"""
        setattr(session, _TIMESTAMP_FIELDS[kind], self._clock())

    def check(self, session: Session, kind: str, record: bool = True) -> None:
        """Like allow(), but raises RateLimitError on denial"""
        if not self.allow(session, kind, record=record):
            raise RateLimitError(_DENY_MESSAGES[kind])
