"""
Websocket consumer for per-post comment rooms.

Frames are JSON objects of the form {"event": <name>, "data": <payload>}.
"""

import logging
import uuid
from typing import Any
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from utils.auth import SocketAuthRejected, authenticate_socket
from .notifier import room_name

logger = logging.getLogger(__name__)


def handshake_token(scope: dict) -> str | None:
    """Token from `?token=` or an `Authorization: Bearer` header."""
    query = parse_qs(scope.get("query_string", b"").decode())
    if query.get("token"):
        return query["token"][0]

    for name, value in scope.get("headers", []):
        if name == b"authorization":
            scheme, _, token = value.decode().partition(" ")
            if scheme.lower() == "bearer" and token:
                return token.strip()
    return None


class CommentConsumer(AsyncJsonWebsocketConsumer):
    """Joins sockets to blog rooms and relays typing signals between members."""

    async def connect(self):
        self.user = None
        self.rooms: set[str] = set()

        try:
            self.user = await database_sync_to_async(authenticate_socket)(handshake_token(self.scope))
        except SocketAuthRejected as e:
            logger.info(f"[Realtime] Rejected socket: {e}")
            await self.close()
            return

        await self.accept()
        who = f"User: {self.user.name or self.user.email}" if self.user else "Anonymous"
        logger.info(f"[Realtime] Socket connected: {self.channel_name} ({who})")

    async def disconnect(self, code):
        for room in list(self.rooms):
            await self.channel_layer.group_discard(room, self.channel_name)
        self.rooms.clear()
        logger.info(f"[Realtime] Socket disconnected: {self.channel_name}")

    async def receive_json(self, content: Any, **kwargs):
        if not isinstance(content, dict) or not isinstance(content.get("event"), str):
            await self.send_error("Frames must be objects with an 'event' name")
            return

        handler = {
            "join_blog": self.join_blog,
            "leave_blog": self.leave_blog,
            "typing": self.typing,
            "stop_typing": self.stop_typing,
        }.get(content["event"])
        if handler is None:
            await self.send_error(f"Unknown event: {content['event']}")
            return

        await handler(content.get("data"))

    async def join_blog(self, blog_id: Any):
        room = self.room_for(blog_id)
        if room is None:
            await self.send_error("Invalid blog id")
            return

        await self.channel_layer.group_add(room, self.channel_name)
        self.rooms.add(room)
        logger.debug(f"[Realtime] {self.channel_name} joined {room}")
        await self.emit("joined_blog", {"blogId": str(blog_id)})

    async def leave_blog(self, blog_id: Any):
        room = self.room_for(blog_id)
        if room is None:
            await self.send_error("Invalid blog id")
            return

        await self.channel_layer.group_discard(room, self.channel_name)
        self.rooms.discard(room)
        logger.debug(f"[Realtime] {self.channel_name} left {room}")
        await self.emit("left_blog", {"blogId": str(blog_id)})

    async def typing(self, data: Any):
        data = data if isinstance(data, dict) else {}
        room = self.room_for(data.get("blogId"))
        if room is None:
            await self.send_error("Invalid blog id")
            return

        await self.relay(room, "user_typing", {"userName": data.get("userName")})

    async def stop_typing(self, data: Any):
        data = data if isinstance(data, dict) else {}
        room = self.room_for(data.get("blogId"))
        if room is None:
            await self.send_error("Invalid blog id")
            return

        await self.relay(room, "user_stop_typing", None)

    async def relay(self, room: str, event: str, data: Any):
        await self.channel_layer.group_send(
            room,
            {"type": "room.event", "event": event, "data": data, "sender": self.channel_name},
        )

    async def room_event(self, message: dict):
        """Group message handler; typing relays skip the socket that sent them."""
        if message.get("sender") == self.channel_name:
            return
        await self.emit(message["event"], message.get("data"))

    async def emit(self, event: str, data: Any):
        await self.send_json({"event": event, "data": data})

    async def send_error(self, message: str):
        await self.emit("error", {"message": message})

    @staticmethod
    def room_for(blog_id: Any) -> str | None:
        try:
            return room_name(uuid.UUID(str(blog_id)))
        except ValueError:
            return None
