"""Tests for room conflict detection."""

from datetime import date

import pytest

from lodgekeeper.domain.models import BlockedRange
from lodgekeeper.domain.results import ACCEPT, ErrorKind, Reason, Reject
from lodgekeeper.domain.room_conflict import (
    ConflictResolver,
    block_hits,
    ranges_overlap,
)

from .helpers import seed_block, seed_booking, seed_hold


@pytest.fixture
def resolver(store, clock):
    return ConflictResolver(store, clock)


class TestRangesOverlap:
    """Half-open stay overlap."""

    def test_checkout_equals_checkin_no_overlap(self):
        assert not ranges_overlap(
            date(2025, 11, 3), date(2025, 11, 5), date(2025, 11, 1), date(2025, 11, 3)
        )

    def test_partial_overlap(self):
        assert ranges_overlap(
            date(2025, 11, 2), date(2025, 11, 5), date(2025, 11, 1), date(2025, 11, 3)
        )

    def test_containment(self):
        assert ranges_overlap(
            date(2025, 11, 1), date(2025, 11, 10), date(2025, 11, 3), date(2025, 11, 4)
        )


class TestBlockHits:
    BLOCK = BlockedRange(id="B", room_id=None, start=date(2025, 11, 5), end=date(2025, 11, 6))

    def test_stay_ending_on_block_start_is_clear(self):
        assert not block_hits(self.BLOCK, date(2025, 11, 3), date(2025, 11, 5))

    def test_stay_starting_on_block_end_hits(self):
        assert block_hits(self.BLOCK, date(2025, 11, 6), date(2025, 11, 8))

    def test_stay_starting_after_block_is_clear(self):
        assert not block_hits(self.BLOCK, date(2025, 11, 7), date(2025, 11, 8))


class TestCheck:
    def test_free_room_accepted(self, resolver):
        assert resolver.check("12", date(2025, 11, 1), date(2025, 11, 3), "s1") == ACCEPT

    def test_booking_boundary_pair_accepted(self, resolver, store):
        seed_booking(store, "12", date(2025, 11, 1), date(2025, 11, 3))

        assert resolver.check("12", date(2025, 11, 3), date(2025, 11, 5), "s1") == ACCEPT

    def test_overlapping_booking_occupied(self, resolver, store):
        seed_booking(store, "12", date(2025, 11, 1), date(2025, 11, 3))

        result = resolver.check("12", date(2025, 11, 2), date(2025, 11, 4), "s1")

        assert isinstance(result, Reject)
        assert result.kind is ErrorKind.CONFLICT
        assert result.reason is Reason.OCCUPIED
        assert result.conflicting_id == "BKSEEDED000001"

    def test_other_room_unaffected(self, resolver, store):
        seed_booking(store, "12", date(2025, 11, 1), date(2025, 11, 3))

        assert resolver.check("13", date(2025, 11, 1), date(2025, 11, 3), "s1") == ACCEPT

    def test_property_wide_block(self, resolver, store):
        seed_block(store, date(2025, 11, 5), date(2025, 11, 5))

        result = resolver.check("44", date(2025, 11, 4), date(2025, 11, 6), "s1")

        assert result.reason is Reason.BLOCKED

    def test_room_block_only_blocks_that_room(self, resolver, store):
        seed_block(store, date(2025, 11, 5), date(2025, 11, 5), room_id="12")

        assert resolver.check("13", date(2025, 11, 4), date(2025, 11, 6), "s1") == ACCEPT

    def test_block_wins_over_booking(self, resolver, store):
        seed_booking(store, "12", date(2025, 11, 1), date(2025, 11, 3))
        seed_block(store, date(2025, 11, 2), date(2025, 11, 2), room_id="12")

        result = resolver.check("12", date(2025, 11, 1), date(2025, 11, 3), "s1")

        assert result.reason is Reason.BLOCKED

    def test_other_session_hold(self, resolver, store):
        seed_hold(store, "H1", "s2", "12", date(2025, 11, 1), date(2025, 11, 3))

        result = resolver.check("12", date(2025, 11, 2), date(2025, 11, 4), "s1")

        assert result.reason is Reason.HELD_BY_OTHER
        assert result.conflicting_id == "H1"

    def test_own_hold_does_not_conflict(self, resolver, store):
        seed_hold(store, "H1", "s1", "12", date(2025, 11, 1), date(2025, 11, 3))

        assert resolver.check("12", date(2025, 11, 1), date(2025, 11, 3), "s1") == ACCEPT

    def test_expired_hold_ignored(self, resolver, store):
        seed_hold(store, "H1", "s2", "12", date(2025, 11, 1), date(2025, 11, 3), expires_minutes=0)

        assert resolver.check("12", date(2025, 11, 1), date(2025, 11, 3), "s1") == ACCEPT

    def test_excluded_hold_ignored(self, resolver, store):
        seed_hold(store, "H1", "s2", "12", date(2025, 11, 1), date(2025, 11, 3))

        result = resolver.check(
            "12", date(2025, 11, 1), date(2025, 11, 3), "s1",
            exclude_hold_ids=frozenset({"H1"}),
        )

        assert result == ACCEPT

    def test_excluded_booking_ignored(self, resolver, store):
        seed_booking(store, "12", date(2025, 11, 1), date(2025, 11, 3))

        result = resolver.check(
            "12", date(2025, 11, 2), date(2025, 11, 4), "booking:BKSEEDED000001",
            exclude_booking_id="BKSEEDED000001",
        )

        assert result == ACCEPT


class TestCheckMany:
    def test_all_free(self, resolver):
        stays = [("12", date(2025, 11, 1), date(2025, 11, 3)), ("13", date(2025, 11, 1), date(2025, 11, 3))]

        assert resolver.check_many(stays, "s1") == ACCEPT

    def test_lists_every_failing_room(self, resolver, store):
        seed_booking(store, "12", date(2025, 11, 1), date(2025, 11, 3))
        seed_block(store, date(2025, 11, 2), date(2025, 11, 2), room_id="14")
        stays = [
            ("12", date(2025, 11, 1), date(2025, 11, 3)),
            ("13", date(2025, 11, 1), date(2025, 11, 3)),
            ("14", date(2025, 11, 1), date(2025, 11, 3)),
        ]

        result = resolver.check_many(stays, "s1")

        assert isinstance(result, Reject)
        assert [r.room_id for r in result.rooms] == ["12", "14"]
        assert [r.reason for r in result.rooms] == [Reason.OCCUPIED, Reason.BLOCKED]
        assert result.room_id == "12"
