import logging

from .broadcast import BroadcastRouter
from .room_registry import LeaveResult, RoomRegistry

logger = logging.getLogger(__name__)


class DisconnectReconciler:
    """Repairs registry state when a connection leaves its room.

    - not in any room: no-op;
    - mentor: the room is torn down and every remaining member gets one
      ``mentor-left``. Members are not moved anywhere; their sockets stay
      open but they no longer belong to a room;
    - student with members left behind: presence is re-broadcast;
    - last member: the registry already dropped the room, nobody to tell.
    """

    def __init__(self, registry: RoomRegistry, router: BroadcastRouter):
        self.registry = registry
        self.router = router

    async def reconcile(self, connection_id: str) -> LeaveResult | None:
        result = self.registry.leave(connection_id)
        if result is None:
            logger.debug("Connection %s left without joining a room", connection_id)
            return None

        if result.was_mentor:
            # Registry first: the room must be gone before any await.
            self.registry.teardown(result.room_id)
            await self.router.mentor_left(result.room_id, result.remaining)
        elif result.remaining:
            await self.router.presence(result.room_id)
        return result
