"""Fan-out of room events to the right audience.

Every emission targets individual connection ids taken from the
``RoomRegistry``, never a transport-level room, so the registry stays the
single source of truth for who hears what. Emission is fire-and-forget:
a failure for one recipient is logged and the rest still receive the event.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from socketio.exceptions import SocketIOError

from .room_registry import RoomRegistry
from .ws_constants import (
    EVT_CODE_UPDATE,
    EVT_MENTOR_LEFT,
    EVT_RECEIVE_MESSAGE,
    EVT_ROLE_ASSIGNED,
    EVT_USER_COUNT,
)

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    # Same shape as JavaScript's Date.toISOString(), which the client parses.
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ChatMessage:
    message: str
    sender: str
    role: str
    sender_id: str
    timestamp: str = field(default_factory=_utc_timestamp)

    def to_payload(self) -> dict:
        return {
            "message": self.message,
            "sender": self.sender,
            "role": self.role,
            "timestamp": self.timestamp,
            "senderId": self.sender_id,
        }


class BroadcastRouter:
    def __init__(self, sio, registry: RoomRegistry):
        self.sio = sio
        self.registry = registry

    async def safe_emit(self, event: str, data, to: str) -> bool:
        """Emit to a single connection, return False if the transport refused it."""
        try:
            # data=None goes out as an event with no arguments
            await self.sio.emit(event, data, to=to)
            return True
        except (SocketIOError, RuntimeError) as e:
            logger.warning("Failed to emit %s to %s: %s", event, to, e)
            return False

    async def _fan_out(self, event: str, data, recipients: Iterable[str]) -> int:
        delivered = 0
        for connection_id in sorted(recipients):
            if await self.safe_emit(event, data, connection_id):
                delivered += 1
        return delivered

    async def role_assigned(self, connection_id: str, is_mentor: bool) -> None:
        await self.safe_emit(EVT_ROLE_ASSIGNED, {"isMentor": is_mentor}, connection_id)

    async def presence(self, room_id: str) -> int:
        """Broadcast the current member count to the whole room and return it."""
        members = self.registry.members(room_id)
        count = len(members)
        await self._fan_out(EVT_USER_COUNT, count, members)
        return count

    async def code_update(self, room_id: str, code: str, sender_id: str) -> int:
        """Push the sender's full buffer to every other member. Last write wins."""
        recipients = self.registry.members(room_id) - {sender_id}
        delivered = await self._fan_out(EVT_CODE_UPDATE, code, recipients)
        logger.debug("code-update from %s reached %d/%d members of %r",
                     sender_id, delivered, len(recipients), room_id)
        return delivered

    async def chat(self, room_id: str, message: ChatMessage) -> int:
        """Deliver *message* to the whole room, sender included."""
        return await self._fan_out(EVT_RECEIVE_MESSAGE, message.to_payload(), self.registry.members(room_id))

    async def mentor_left(self, room_id: str, recipients: Iterable[str]) -> int:
        """Tell the members of a torn-down room that the session is over.

        The room is already gone from the registry, so the audience is
        passed in explicitly.
        """
        recipients = frozenset(recipients)
        delivered = await self._fan_out(EVT_MENTOR_LEFT, None, recipients)
        logger.info("Mentor left room %r, notified %d members", room_id, delivered)
        return delivered
