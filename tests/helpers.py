"""Shared test helper functions for lodgekeeper tests.

Regular functions (not fixtures) that seed a store with the administrative
and confirmed data the core only reads.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from lodgekeeper.domain.models import (
    BlockedRange,
    BookingEntry,
    BookingRecord,
    ContactInfo,
    GuestRoster,
    Hold,
    SeasonPeriod,
)
from lodgekeeper.infra.hashing import hash_token

# 2025-09-01 12:00 in Prague: before the 2025 season cutoff (Oct 1)
NOW = datetime(2025, 9, 1, 10, 0, tzinfo=timezone.utc)

CONTACT = ContactInfo(name="Jana Novakova", email="jana@example.com", phone="+420123456789")

TEST_TOKEN = "abcdefghijklmnopqrstuvwxyz0123"


def adults(n: int = 2, tier: str = "external") -> GuestRoster:
    return GuestRoster.of(adults=n, tier=tier)


def seed_booking(
    store,
    room_id: str,
    start: date,
    end: date,
    *,
    booking_id: str = "BKSEEDED000001",
    roster: GuestRoster | None = None,
    token: str = TEST_TOKEN,
    total_price: int = 1000,
) -> BookingRecord:
    """Insert a confirmed single-room booking directly into the store."""
    record = BookingRecord(
        id=booking_id,
        entries=(
            BookingEntry(
                room_id=room_id,
                start=start,
                end=end,
                roster=roster or adults(2),
                booking_id=booking_id,
            ),
        ),
        total_price=total_price,
        token_hash=hash_token(booking_id, token),
        contact=CONTACT,
        created_at=NOW,
        updated_at=NOW,
    )
    with store.transaction([room_id]) as tx:
        tx.insert_booking(record)
    return record


def seed_block(
    store,
    start: date,
    end: date,
    *,
    room_id: str | None = None,
    block_id: str = "BLK1",
) -> BlockedRange:
    block = BlockedRange(id=block_id, room_id=room_id, start=start, end=end, reason="maintenance")
    with store.transaction() as tx:
        tx.insert_block(block)
    return block


def seed_christmas(
    store,
    *,
    start: date = date(2025, 12, 23),
    end: date = date(2026, 1, 2),
    codes: frozenset[str] = frozenset({"XMAS2025"}),
    period_id: str = "xmas-2025",
    year: int | None = 2025,
) -> SeasonPeriod:
    period = SeasonPeriod(id=period_id, start=start, end=end, codes=codes, year=year)
    with store.transaction() as tx:
        tx.insert_season_period(period)
    return period


def seed_hold(
    store,
    hold_id: str,
    session_id: str,
    room_id: str,
    start: date,
    end: date,
    *,
    expires_minutes: int = 15,
    roster: GuestRoster | None = None,
) -> Hold:
    """Insert a hold created at NOW, bypassing the hold store's checks."""
    hold = Hold(
        id=hold_id,
        session_id=session_id,
        room_id=room_id,
        start=start,
        end=end,
        roster=roster or adults(1),
        created_at=NOW,
        expires_at=NOW + timedelta(minutes=expires_minutes),
    )
    with store.transaction([room_id]) as tx:
        tx.insert_hold(hold)
    return hold
