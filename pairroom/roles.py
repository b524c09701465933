"""Role assignment for room members.

A room has one mentor for its whole lifetime: the connection that finds
no mentor recorded when it joins. Everyone after that is a student.
There is no re-election; when the mentor leaves the room is torn down
(see ``reconciler.py``) and the next join starts a fresh room.
"""

from .ws_constants import ROLE_MENTOR, ROLE_STUDENT

_LABELS = {ROLE_MENTOR: "Mentor", ROLE_STUDENT: "Student"}


def first_join_wins(room, connection_id: str) -> bool:
    """Return True when *connection_id* should become the mentor of *room*."""
    return room.mentor_id is None


def role_of(is_mentor: bool) -> str:
    return ROLE_MENTOR if is_mentor else ROLE_STUDENT


def label_of(role: str) -> str:
    """Display label the client shows for *role* ("Mentor" / "Student")."""
    return _LABELS[role]
