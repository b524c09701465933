import logging
from dataclasses import dataclass, field
from typing import Callable

from .roles import first_join_wins

logger = logging.getLogger(__name__)


@dataclass
class Room:
    id: str
    members: set[str] = field(default_factory=set)
    mentor_id: str | None = None


@dataclass(frozen=True)
class JoinResult:
    room_id: str
    is_mentor: bool
    member_count: int
    created: bool = False


@dataclass(frozen=True)
class LeaveResult:
    room_id: str
    was_mentor: bool
    remaining: frozenset[str] = frozenset()

    @property
    def remaining_count(self) -> int:
        return len(self.remaining)


class RoomRegistry:
    """Authoritative in-memory table of active rooms and their members.

    Invariants kept by every method:

    - a room exists iff it has at least one member;
    - ``room.mentor_id``, when set, is one of ``room.members``;
    - ``_room_of`` maps every joined connection to exactly one room.

    Methods are synchronous so a mutation is never interleaved with
    another coroutine. Broadcasting is the caller's job.
    """

    def __init__(self, assign_role: Callable[[Room, str], bool] = first_join_wins):
        self._rooms: dict[str, Room] = {}
        # connection id -> room id, so a disconnect never scans every room
        self._room_of: dict[str, str] = {}
        self._assign_role = assign_role

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def join(self, room_id: str, connection_id: str) -> JoinResult:
        """Add *connection_id* to *room_id*, creating the room if needed. Never rejects.

        A connection already in another room is moved out of it first, with
        the same effect as ``leave()``. Callers that need mentor teardown on
        the old room must reconcile before joining.
        """
        previous = self._room_of.get(connection_id)
        if previous is not None and previous != room_id:
            logger.info("Connection %s moved from room %r to %r", connection_id, previous, room_id)
            self.leave(connection_id)

        room = self._rooms.get(room_id)
        created = room is None
        if created:
            room = Room(id=room_id)
            self._rooms[room_id] = room
            logger.info("Created room %r", room_id)

        room.members.add(connection_id)
        self._room_of[connection_id] = room_id

        if room.mentor_id is None and self._assign_role(room, connection_id):
            room.mentor_id = connection_id
            logger.info("Connection %s is the mentor of room %r", connection_id, room_id)

        logger.debug("Connection %s joined room %r (%d members)", connection_id, room_id, len(room.members))
        return JoinResult(
            room_id=room_id,
            is_mentor=room.mentor_id == connection_id,
            member_count=len(room.members),
            created=created,
        )

    def leave(self, connection_id: str) -> LeaveResult | None:
        """Remove *connection_id* from its room. Returns None if it never joined one.

        The room is deleted when its last member leaves. A departing mentor
        leaves the room in place without a mentor; the caller decides
        whether to tear it down.
        """
        room_id = self._room_of.pop(connection_id, None)
        if room_id is None:
            return None
        room = self._rooms.get(room_id)
        if room is None:
            return None

        room.members.discard(connection_id)
        was_mentor = room.mentor_id == connection_id
        if was_mentor:
            room.mentor_id = None

        if not room.members:
            del self._rooms[room_id]
            logger.info("Room %r is empty, removed", room_id)

        return LeaveResult(room_id=room_id, was_mentor=was_mentor, remaining=frozenset(room.members))

    def teardown(self, room_id: str) -> frozenset[str]:
        """Delete *room_id* outright and forget its members. Returns the members dropped."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            return frozenset()
        for connection_id in room.members:
            if self._room_of.get(connection_id) == room_id:
                del self._room_of[connection_id]
        logger.info("Tore down room %r (%d members dropped)", room_id, len(room.members))
        return frozenset(room.members)

    def member_count(self, room_id: str) -> int:
        room = self._rooms.get(room_id)
        return len(room.members) if room else 0

    def members(self, room_id: str) -> frozenset[str]:
        room = self._rooms.get(room_id)
        return frozenset(room.members) if room else frozenset()

    def room_of(self, connection_id: str) -> str | None:
        return self._room_of.get(connection_id)

    def is_member(self, room_id: str, connection_id: str) -> bool:
        return self._room_of.get(connection_id) == room_id

    def mentor_of(self, room_id: str) -> str | None:
        room = self._rooms.get(room_id)
        return room.mentor_id if room else None

    def snapshot(self, room_id: str) -> dict | None:
        """Read-only view of a room for the REST API."""
        room = self._rooms.get(room_id)
        if room is None:
            return None
        return {
            "room_id": room.id,
            "user_count": len(room.members),
            "has_mentor": room.mentor_id is not None,
        }
