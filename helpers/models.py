"""
Data models for the Room Chat Server
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from .constants import DEFAULT_ROOM


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.123Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Message:
    """Persisted chat message, immutable once written"""
    id: int
    author: str
    text: str
    created_at: str
    room: str = DEFAULT_ROOM

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "author": self.author,
            "text": self.text,
            "createdAt": self.created_at,
            "room": self.room,
        }


@dataclass
class Session:
    """Per-connection ephemeral state"""
    connection_id: str
    display_name: str
    current_room: str = DEFAULT_ROOM
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # Cooldown timestamps (monotonic seconds), one per rate-limited action kind
    last_message_at: Optional[float] = None
    last_name_change_at: Optional[float] = None
    last_clear_at: Optional[float] = None


@dataclass
class AckResult:
    """Outcome of an acknowledged action"""
    ok: bool
    error: Optional[str] = None
    username: Optional[str] = None

    @classmethod
    def success(cls, **kwargs) -> "AckResult":
        return cls(ok=True, **kwargs)

    @classmethod
    def failure(cls, error: str) -> "AckResult":
        return cls(ok=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out unset fields"""
        data: Dict[str, Any] = {"ok": self.ok}
        if self.error is not None:
            data["error"] = self.error
        if self.username is not None:
            data["username"] = self.username
        return data
