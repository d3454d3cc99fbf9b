"""
In-process room registry for group chat.

Membership lives only in this process; running several workers needs an
external pub/sub relay, which this module does not provide.
"""
from fastapi import WebSocket
from typing import Any, Dict, Set
import asyncio
import json
import logging
import uuid
import weakref

logger = logging.getLogger(__name__)


class ChatConnection:
    """One connected client and the rooms it has asked for"""

    def __init__(self, websocket: WebSocket):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self.rooms: Set[str] = set()

    async def emit(self, event: str, data: Any):
        await self.websocket.send_text(json.dumps({"event": event, "data": data}))


class ChatHub:
    def __init__(self):
        self.connections: Dict[str, ChatConnection] = {}
        self.rooms: Dict[str, Dict[str, ChatConnection]] = {}
        # A lock outlives room membership while a sender holds or awaits it
        self._room_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def connect(self, websocket: WebSocket) -> ChatConnection:
        await websocket.accept()
        connection = ChatConnection(websocket)
        self.connections[connection.id] = connection
        logger.info(f"Chat client connected: {connection.id}")
        return connection

    def disconnect(self, connection: ChatConnection):
        for room in list(connection.rooms):
            self.leave(connection, room)
        if self.connections.pop(connection.id, None) is not None:
            logger.info(f"Chat client disconnected: {connection.id}")

    def join(self, connection: ChatConnection, room: str):
        # Earlier rooms are kept; a client may listen to several groups
        self.rooms.setdefault(room, {})[connection.id] = connection
        connection.rooms.add(room)
        logger.info(f"Connection {connection.id} joined group chat room: {room}")

    def leave(self, connection: ChatConnection, room: str):
        members = self.rooms.get(room)
        if members is not None:
            members.pop(connection.id, None)
            if not members:
                del self.rooms[room]
        connection.rooms.discard(room)

    def room_lock(self, room: str) -> asyncio.Lock:
        """Serializes save-then-broadcast so every member sees persistence order"""
        lock = self._room_locks.get(room)
        if lock is None:
            lock = asyncio.Lock()
            self._room_locks[room] = lock
        return lock

    async def broadcast(self, room: str, event: str, data: Any):
        for connection in list(self.rooms.get(room, {}).values()):
            try:
                await connection.emit(event, data)
            except Exception as e:
                logger.warning(f"Dropping chat connection {connection.id} after failed send: {str(e)}")
                self.disconnect(connection)
