"""
WebSocket Room Chat Client Example
Interactive client and scripted scenarios for manual testing
"""

import asyncio
import itertools
import json
import websockets
import argparse
import sys
from typing import Any, Dict, List, Optional


class ChatClient:
    """WebSocket room chat client for testing"""

    def __init__(self, server_url: str = "ws://localhost:3000/ws"):
        self.server_url = server_url
        self.websocket = None
        self.display_name: Optional[str] = None
        self.current_room: Optional[str] = None
        self.rooms: List[str] = []
        self.messages: List[Dict[str, Any]] = []
        self.running = False
        self._ack_ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future] = {}

    async def connect(self) -> bool:
        """Connect to the server and wait for the initial snapshot"""
        try:
            self.websocket = await websockets.connect(self.server_url)
            print(f"✅ Connected to {self.server_url}")
        except Exception as e:
            print(f"❌ Connection failed: {e}")
            return False

        self.handle_frame(json.loads(await self.websocket.recv()))
        return self.display_name is not None

    async def _send(self, payload: Dict[str, Any]):
        await self.websocket.send(json.dumps(payload))

    async def _request(self, payload: Dict[str, Any], timeout: float = 5.0) -> Dict[str, Any]:
        """Send an acknowledged event and wait for its ack"""
        ack_id = next(self._ack_ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[ack_id] = future
        try:
            await self._send({**payload, "ack": ack_id})
            return await asyncio.wait_for(future, timeout)
        finally:
            self._pending.pop(ack_id, None)

    async def post(self, message: str):
        await self._send({"type": "post-message", "message": message})

    async def join(self, room: str):
        await self._send({"type": "join-room", "room": room})

    async def set_username(self, username: str) -> Dict[str, Any]:
        return await self._request({"type": "set-username", "username": username})

    async def verify_admin(self, token: str) -> Dict[str, Any]:
        return await self._request({"type": "verify-admin", "token": token})

    async def clear_room(self, room: str, token: str) -> Dict[str, Any]:
        return await self._request({"type": "clear-room", "room": room, "token": token})

    def handle_frame(self, data: Dict[str, Any]):
        """Apply one server frame to local state and print it"""
        msg_type = data.get("type")

        if msg_type == "receive-messages":
            self.messages = data.get("messages", [])
            self.rooms = data.get("rooms", [])
            self.current_room = data.get("currentRoom")
            if "displayName" in data:
                self.display_name = data["displayName"]
                print(f"👤 You are {self.display_name}")
            print(f"📋 #{self.current_room} ({len(self.messages)} messages) rooms: {', '.join(self.rooms)}")
            for message in reversed(self.messages[:10]):
                print(f"📨 [{message.get('createdAt', '')}] {message.get('author')}: {message.get('text')}")

        elif msg_type == "ack":
            future = self._pending.get(data.get("ack"))
            if future is not None and not future.done():
                future.set_result(data)
            if data.get("event") == "set-username" and data.get("ok"):
                self.display_name = data.get("username")
            status = "✅" if data.get("ok") else "❌"
            print(f"{status} {data.get('event')}: {data.get('error') or 'ok'}")

        elif msg_type == "error":
            print(f"❌ Server error: {data.get('message', 'Unknown error')}")

        else:
            print(f"❓ Unknown message type: {msg_type}")

    async def listen_for_messages(self):
        """Listen for incoming frames until stopped or closed"""
        while self.running:
            try:
                message = await asyncio.wait_for(self.websocket.recv(), timeout=1.0)
                self.handle_frame(json.loads(message))
            except asyncio.TimeoutError:
                continue
            except websockets.exceptions.ConnectionClosed:
                print("🔌 Connection closed by server")
                break

    async def disconnect(self):
        """Disconnect from server"""
        self.running = False
        if self.websocket:
            await self.websocket.close()
            print("🔌 Disconnected from server")

    async def run_command(self, user_input: str) -> bool:
        """Run one line of interactive input; returns False to quit"""
        command, _, arg = user_input.partition(" ")
        arg = arg.strip()

        if command == "/quit":
            return False
        if command == "/join":
            await self.join(arg)
        elif command == "/name":
            await self.set_username(arg)
        elif command == "/admin":
            await self.verify_admin(arg)
        elif command == "/clear":
            room, _, token = arg.partition(" ")
            await self.clear_room(room, token.strip())
        else:
            await self.post(user_input)
        return True

    async def run_interactive(self):
        """Run interactive chat session"""
        if not await self.connect():
            return

        self.running = True
        listen_task = asyncio.create_task(self.listen_for_messages())
        loop = asyncio.get_running_loop()

        try:
            print("\n🎮 Interactive mode started!")
            print("Commands: /join <room>, /name <name>, /admin <token>, /clear <room> <token>, /quit")
            print("-" * 50)

            while self.running:
                try:
                    user_input = (await loop.run_in_executor(None, input, f"{self.display_name}> ")).strip()
                except (KeyboardInterrupt, EOFError):
                    break

                if user_input and not await self.run_command(user_input):
                    break

        finally:
            self.running = False
            listen_task.cancel()
            await self.disconnect()


async def room_isolation_scenario(server_url: str):
    """Two clients in different rooms; each only sees its own room's messages"""
    print("\n🧪 Scenario: Room Isolation")
    print("=" * 60)

    general = ChatClient(server_url)
    support = ChatClient(server_url)
    if not (await general.connect() and await support.connect()):
        return

    for client in (general, support):
        client.running = True
    tasks = [asyncio.create_task(c.listen_for_messages()) for c in (general, support)]

    await support.join("support")
    await asyncio.sleep(0.5)
    await general.post("Hello general!")
    await support.post("Hello support!")
    await asyncio.sleep(1)

    for task in tasks:
        task.cancel()
    await general.disconnect()
    await support.disconnect()
    print("✅ Scenario completed")


async def main():
    """Main function with command line interface"""
    parser = argparse.ArgumentParser(description="WebSocket Room Chat Client")
    parser.add_argument("--server", default="ws://localhost:3000/ws", help="Server URL")
    parser.add_argument("--scenario", choices=["isolation"], help="Run scripted scenario")

    args = parser.parse_args()

    if args.scenario == "isolation":
        await room_isolation_scenario(args.server)
    else:
        await ChatClient(args.server).run_interactive()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Client error: {e}")
        sys.exit(1)
