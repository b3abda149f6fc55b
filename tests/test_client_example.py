"""Tests for the demo client's frame handling and commands."""
import asyncio
import json

import pytest

from client_example import ChatClient


class RecordingSocket:
    """Stands in for a websockets connection."""

    def __init__(self):
        self.sent = []

    async def send(self, data):
        self.sent.append(json.loads(data))


def test_initial_snapshot_sets_state():
    client = ChatClient()

    client.handle_frame({
        "type": "receive-messages",
        "messages": [{"id": 1, "author": "Ada", "text": "hi", "createdAt": "2024-01-01T00:00:00.000Z"}],
        "rooms": ["general", "support", "random"],
        "currentRoom": "general",
        "displayName": "Mira Teal",
    })

    assert client.display_name == "Mira Teal"
    assert client.current_room == "general"
    assert client.rooms == ["general", "support", "random"]
    assert len(client.messages) == 1


def test_room_snapshot_keeps_display_name():
    client = ChatClient()
    client.display_name = "Ada"

    client.handle_frame({"type": "receive-messages", "messages": [], "rooms": ["general"], "currentRoom": "support"})

    assert client.display_name == "Ada"
    assert client.current_room == "support"


@pytest.mark.asyncio
async def test_request_resolves_on_matching_ack():
    client = ChatClient()
    client.websocket = RecordingSocket()

    pending = asyncio.create_task(client.set_username("Ada"))
    await asyncio.sleep(0)
    frame = client.websocket.sent[0]
    assert frame == {"type": "set-username", "username": "Ada", "ack": 1}

    client.handle_frame({"type": "ack", "event": "set-username", "ack": 1, "ok": True, "username": "Ada"})

    assert (await pending)["ok"] is True
    assert client.display_name == "Ada"


@pytest.mark.asyncio
async def test_commands_map_to_events():
    client = ChatClient()
    client.websocket = RecordingSocket()

    assert await client.run_command("/join support") is True
    assert await client.run_command("hello there") is True
    assert await client.run_command("/quit") is False

    assert client.websocket.sent == [
        {"type": "join-room", "room": "support"},
        {"type": "post-message", "message": "hello there"},
    ]
