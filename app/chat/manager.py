"""
Room broadcast channel.

Connections join named rooms and anything published to a room goes to every
connection in it, sender included. Delivery is best effort: a send that
fails drops that connection from every room and nobody is told. Nothing here
touches the database, storing chat history is the caller's job.
"""

import asyncio
import logging
import uuid
from typing import Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class RoomManager:
    def __init__(self):
        self.connections: Dict[str, WebSocket] = {}
        self.rooms: Dict[str, Dict[str, WebSocket]] = {}
        self.lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, connection_id: Optional[str] = None) -> str:
        connection_id = connection_id or uuid.uuid4().hex
        async with self.lock:
            self.connections[connection_id] = websocket
        return connection_id

    async def join(self, connection_id: str, room_id: str) -> bool:
        """Add a connection to a room. Joining twice changes nothing."""
        async with self.lock:
            websocket = self.connections.get(connection_id)
            if websocket is None:
                return False
            self.rooms.setdefault(room_id, {})[connection_id] = websocket
        logger.info("Connection %s joined room %s", connection_id, room_id)
        return True

    async def leave(self, connection_id: str, room_id: str):
        async with self.lock:
            self._remove_from_room(connection_id, room_id)

    async def disconnect(self, connection_id: str):
        """Forget the connection and pull it out of every room"""
        async with self.lock:
            self.connections.pop(connection_id, None)
            for room_id in list(self.rooms):
                self._remove_from_room(connection_id, room_id)
        logger.info("Connection %s disconnected", connection_id)

    def _remove_from_room(self, connection_id: str, room_id: str):
        members = self.rooms.get(room_id)
        if members is None:
            return
        members.pop(connection_id, None)
        # Empty rooms are dropped
        if not members:
            del self.rooms[room_id]

    async def members(self, room_id: str) -> List[str]:
        async with self.lock:
            return list(self.rooms.get(room_id, {}))

    async def publish(self, room_id: str, message: dict) -> int:
        """
        Send `message` to every connection in the room.
        Returns how many sends went through, an unknown room is simply 0.
        """
        async with self.lock:
            targets = list(self.rooms.get(room_id, {}).items())

        if not targets:
            return 0

        results = await asyncio.gather(
            *(self._send(ws, message) for _, ws in targets)
        )

        dead = [connection_id for (connection_id, _), sent in zip(targets, results) if not sent]
        if dead:
            async with self.lock:
                for connection_id in dead:
                    self.connections.pop(connection_id, None)
                    for joined in list(self.rooms):
                        self._remove_from_room(connection_id, joined)
            logger.warning("Dropped %d dead connection(s) from room %s", len(dead), room_id)

        return len(targets) - len(dead)

    async def _send(self, websocket: WebSocket, message: dict) -> bool:
        try:
            await websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning("Send failed: %s", e)
            return False


room_manager = RoomManager()


def get_room_manager() -> RoomManager:
    return room_manager
