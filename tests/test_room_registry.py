"""Tests for pairroom.room_registry -- membership, mentor bookkeeping, reverse index."""

import pytest

from pairroom.room_registry import JoinResult, LeaveResult, RoomRegistry


def _mentor_count(registry: RoomRegistry, room_id: str) -> int:
    mentor = registry.mentor_of(room_id)
    return sum(1 for c in registry.members(room_id) if c == mentor)


# ---------------------------------------------------------------------------
# join
# ---------------------------------------------------------------------------

class TestJoin:

    def test_first_join_creates_room_and_mentor(self, registry):
        result = registry.join("R", "A")
        assert result == JoinResult(room_id="R", is_mentor=True, member_count=1, created=True)
        assert "R" in registry
        assert registry.mentor_of("R") == "A"

    def test_subsequent_joins_are_students(self, registry):
        registry.join("R", "A")
        b = registry.join("R", "B")
        c = registry.join("R", "C")
        assert b.is_mentor is False
        assert c.is_mentor is False
        assert c.created is False
        assert registry.mentor_of("R") == "A"
        assert registry.member_count("R") == 3

    def test_rooms_are_independent(self, registry):
        assert registry.join("R1", "A").is_mentor is True
        assert registry.join("R2", "B").is_mentor is True
        assert registry.member_count("R1") == 1
        assert registry.member_count("R2") == 1
        assert len(registry) == 2

    def test_rejoin_by_same_connection_is_idempotent(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        again = registry.join("R", "A")
        assert again.is_mentor is True
        assert again.member_count == 2
        assert registry.join("R", "B").is_mentor is False

    def test_join_records_reverse_index(self, registry):
        registry.join("R", "A")
        assert registry.room_of("A") == "R"
        assert registry.is_member("R", "A") is True
        assert registry.is_member("other", "A") is False

    def test_custom_role_policy_is_used(self):
        registry = RoomRegistry(assign_role=lambda room, connection_id: connection_id.startswith("m"))
        assert registry.join("R", "s1").is_mentor is False
        assert registry.join("R", "m1").is_mentor is True
        assert registry.join("R", "m2").is_mentor is False

    def test_at_most_one_mentor(self, registry):
        for i in range(20):
            registry.join("R", f"c{i}")
        assert _mentor_count(registry, "R") == 1

    def test_join_other_room_moves_connection(self, registry):
        registry.join("R1", "A")
        registry.join("R2", "A")

        assert "R1" not in registry
        assert registry.room_of("A") == "R2"
        assert registry.leave("A") == LeaveResult(room_id="R2", was_mentor=True, remaining=frozenset())
        assert len(registry) == 0

    def test_moving_mentor_leaves_old_room_without_mentor(self, registry):
        registry.join("R1", "A")
        registry.join("R1", "B")

        registry.join("R2", "A")

        assert registry.members("R1") == frozenset({"B"})
        assert registry.mentor_of("R1") is None
        assert registry.is_member("R1", "A") is False
        assert registry.join("R1", "C").is_mentor is True


# ---------------------------------------------------------------------------
# leave
# ---------------------------------------------------------------------------

class TestLeave:

    def test_leave_unknown_connection_is_noop(self, registry):
        registry.join("R", "A")
        assert registry.leave("ghost") is None
        assert registry.member_count("R") == 1

    def test_student_leave_keeps_room(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        result = registry.leave("B")
        assert result == LeaveResult(room_id="R", was_mentor=False, remaining=frozenset({"A"}))
        assert result.remaining_count == 1
        assert registry.member_count("R") == 1
        assert registry.room_of("B") is None

    def test_last_member_leave_deletes_room(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        registry.leave("B")
        result = registry.leave("A")
        assert result.remaining_count == 0
        assert "R" not in registry
        assert len(registry) == 0

    def test_mentor_leave_reports_and_clears_mentor(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        result = registry.leave("A")
        assert result.was_mentor is True
        assert result.remaining == frozenset({"B"})
        assert registry.mentor_of("R") is None

    def test_leave_only_touches_own_room(self, registry):
        for i in range(50):
            registry.join(f"room-{i}", f"c{i}")
        registry.join("room-7", "extra")
        registry.leave("extra")
        assert len(registry) == 50
        assert registry.members("room-7") == frozenset({"c7"})

    def test_second_leave_is_noop(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        registry.leave("B")
        assert registry.leave("B") is None
        assert registry.member_count("R") == 1


# ---------------------------------------------------------------------------
# teardown
# ---------------------------------------------------------------------------

class TestTeardown:

    def test_teardown_removes_room_and_members(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        registry.join("R", "C")
        registry.leave("A")

        dropped = registry.teardown("R")

        assert dropped == frozenset({"B", "C"})
        assert "R" not in registry
        assert registry.room_of("B") is None
        assert registry.room_of("C") is None

    def test_teardown_unknown_room(self, registry):
        assert registry.teardown("nope") == frozenset()

    def test_join_after_teardown_elects_new_mentor(self, registry):
        registry.join("R", "A")
        registry.join("R", "B")
        registry.leave("A")
        registry.teardown("R")

        result = registry.join("R", "D")
        assert result.is_mentor is True
        assert result.created is True
        assert result.member_count == 1

    def test_orphaned_member_rejoin_becomes_mentor(self, registry):
        """A member whose room was torn down starts over like any new joiner."""
        registry.join("R", "A")
        registry.join("R", "B")
        registry.leave("A")
        registry.teardown("R")

        assert registry.leave("B") is None
        assert registry.join("R", "B").is_mentor is True


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:

    def test_member_count_unknown_room(self, registry):
        assert registry.member_count("nope") == 0
        assert registry.members("nope") == frozenset()
        assert registry.mentor_of("nope") is None

    def test_members_returns_copy(self, registry):
        registry.join("R", "A")
        members = registry.members("R")
        registry.join("R", "B")
        assert members == frozenset({"A"})

    def test_snapshot(self, registry):
        registry.join("Array Methods", "A")
        registry.join("Array Methods", "B")
        assert registry.snapshot("Array Methods") == {
            "room_id": "Array Methods",
            "user_count": 2,
            "has_mentor": True,
        }

    def test_snapshot_unknown_room(self, registry):
        assert registry.snapshot("nope") is None

    @pytest.mark.parametrize("room_id", ["", "Async Case", "שלום"])
    def test_room_ids_are_opaque(self, registry, room_id):
        assert registry.join(room_id, "A").is_mentor is True
        assert registry.room_of("A") == room_id
