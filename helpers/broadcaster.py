"""
Delivery of room snapshots and acknowledgments to connected clients
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

from .constants import EVENT_RECEIVE_MESSAGES, EVENT_ACK, EVENT_ERROR, SEND_TIMEOUT_SECONDS
from .logger import get_logger, log_security_event
from .models import Message
from .room_registry import RoomRegistry

logger = get_logger()


def snapshot(messages: List[Message], rooms: List[str], current_room: str,
             display_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a room snapshot payload

    Args:
        messages: Room window, newest first
        rooms: Canonical room list
        current_room: Room the snapshot belongs to
        display_name: Included only on the initial per-session snapshot

    Returns:
        JSON-serializable payload
    """
    payload: Dict[str, Any] = {
        "type": EVENT_RECEIVE_MESSAGES,
        "messages": [message.to_dict() for message in messages],
        "rooms": list(rooms),
        "currentRoom": current_room,
    }
    if display_name is not None:
        payload["displayName"] = display_name
    return payload


def ack_payload(event: str, ack_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    """Acknowledgment frame correlating a result with the client's ack id"""
    return {"type": EVENT_ACK, "event": event, "ack": ack_id, **result}


def error_payload(message: str) -> Dict[str, Any]:
    return {"type": EVENT_ERROR, "message": message}


class BroadcastDispatcher:
    """
    Sole holder of transport-level connections

    Routes payloads to one session or to every session in a room's group
    as tracked by the RoomRegistry. Each socket write is bounded by
    send_timeout, and room members are written to concurrently, so a stuck
    recipient only loses its own frame.
    """

    def __init__(self, registry: RoomRegistry, send_timeout: float = SEND_TIMEOUT_SECONDS):
        self._registry = registry
        self._send_timeout = send_timeout
        # connection id -> WebSocket
        self._connections: Dict[str, Any] = {}

    def register(self, connection_id: str, websocket: Any) -> None:
        self._connections[connection_id] = websocket

    def unregister(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def send_to_session(self, connection_id: str, payload: Dict[str, Any]) -> bool:
        """
        Send payload to a single session

        Args:
            connection_id: Target connection
            payload: JSON-serializable payload

        Returns:
            True if the frame was written
        """
        websocket = self._connections.get(connection_id)
        if websocket is None:
            return False

        try:
            await asyncio.wait_for(websocket.send_text(json.dumps(payload)), self._send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Timed out sending {payload.get('type')} to {connection_id}")
            log_security_event("send_timeout", {
                "conn": connection_id,
                "type": payload.get("type"),
                "timeout_s": self._send_timeout
            })
            return False
        except Exception as e:
            # Delivery failure never propagates to the action that triggered it
            logger.error(f"Failed to send {payload.get('type')} to {connection_id}: {e}")
            log_security_event("send_failed", {
                "conn": connection_id,
                "type": payload.get("type"),
                "error": str(e)
            })
            return False

    async def send_to_room(self, room: str, payload: Dict[str, Any]) -> int:
        """
        Send payload to every session currently joined to a room

        Args:
            room: Room identifier
            payload: JSON-serializable payload

        Returns:
            Number of successful recipients
        """
        results = await asyncio.gather(*[
            self.send_to_session(connection_id, payload)
            for connection_id in self._registry.members(room)
        ])
        recipients = sum(1 for delivered in results if delivered)

        logger.info(f"Room broadcast: {payload.get('type')} to {recipients} recipients in {room}")
        return recipients
