"""
Fan-out of comment events to per-post socket rooms.

Delivery is best-effort: a failed broadcast is logged and never affects the
write that triggered it. Clients reconcile by re-fetching after reconnect.
"""

import logging
from typing import Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)

NEW_COMMENT = "new_comment"
COMMENT_UPDATED = "comment_updated"
COMMENT_DELETED = "comment_deleted"


def room_name(post_id: Any) -> str:
    return f"blog_{post_id}"


def broadcast(post_id: Any, event: str, data: Any) -> None:
    """Send `event` to every socket currently joined to the post's room."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"[Realtime] No channel layer configured, dropping {event}")
        return

    try:
        async_to_sync(channel_layer.group_send)(
            room_name(post_id),
            {"type": "room.event", "event": event, "data": data},
        )
    except Exception:
        logger.exception(f"[Realtime] Failed to broadcast {event} to {room_name(post_id)}")


def notify_room(post_id: Any, event: str, data: Any) -> None:
    """Broadcast once the current transaction commits."""
    transaction.on_commit(lambda: broadcast(post_id, event, data))
