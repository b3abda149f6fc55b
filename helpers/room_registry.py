"""
Fixed room allow-list and per-room broadcast group membership
"""

from typing import Dict, Iterable, List, Optional, Set
from .constants import ALLOWED_ROOMS


class RoomRegistry:
    """
    Immutable room allow-list plus the broadcast group for each room

    Groups hold connection ids only. Every mutation runs without awaiting,
    so under asyncio a move is atomic: no other task can observe a
    connection in zero or two groups.
    """

    def __init__(self, rooms: Iterable[str] = ALLOWED_ROOMS):
        self._rooms = tuple(rooms)
        if not self._rooms:
            raise ValueError("at least one room is required")
        if len(set(self._rooms)) != len(self._rooms):
            raise ValueError("room identifiers must be unique")
        # Room -> set of connection ids
        self._groups: Dict[str, Set[str]] = {room: set() for room in self._rooms}
        # Connection id -> room
        self._membership: Dict[str, str] = {}

    @property
    def rooms(self) -> List[str]:
        """Canonical ordered room list sent in every snapshot"""
        return list(self._rooms)

    @property
    def default_room(self) -> str:
        return self._rooms[0]

    def is_allowed(self, room: str) -> bool:
        return room in self._groups

    def join(self, connection_id: str, room: str) -> Optional[str]:
        """
        Put a connection into a room's group, leaving its previous group

        Args:
            connection_id: Connection identifier
            room: Allowed room identifier

        Returns:
            The previous room, or None if the connection was not in a group
        """
        if room not in self._groups:
            raise ValueError(f"unknown room: {room}")

        previous = self._membership.get(connection_id)
        if previous is not None:
            self._groups[previous].discard(connection_id)
        self._groups[room].add(connection_id)
        self._membership[connection_id] = room
        return previous

    def move(self, connection_id: str, room: str) -> Optional[str]:
        """Switch a connection to another room's group in one step"""
        if connection_id not in self._membership:
            raise KeyError(connection_id)
        return self.join(connection_id, room)

    def leave(self, connection_id: str) -> Optional[str]:
        """Remove a connection from its group; returns the room it left"""
        room = self._membership.pop(connection_id, None)
        if room is not None:
            self._groups[room].discard(connection_id)
        return room

    def room_of(self, connection_id: str) -> Optional[str]:
        return self._membership.get(connection_id)

    def members(self, room: str) -> List[str]:
        """Snapshot of the connection ids currently in a room's group"""
        return list(self._groups.get(room, ()))

    def member_counts(self) -> Dict[str, int]:
        return {room: len(self._groups[room]) for room in self._rooms}
