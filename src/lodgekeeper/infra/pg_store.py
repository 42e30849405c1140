"""PostgreSQL-backed store.

Every transaction takes advisory locks on the rooms it names before any
read, so a check-then-act sequence on a room is serializable against any
other transaction touching that room.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterable, Iterator

from psycopg2.extensions import cursor as PgCursor

from lodgekeeper.domain.models import (
    BlockedRange,
    BookingEntry,
    BookingRecord,
    Hold,
    SeasonPeriod,
)
from lodgekeeper.infra.db import lock_rooms, txn
from lodgekeeper.infra.repositories import (
    bookings_repository,
    calendar_repository,
    holds_repository,
)


class PgStoreTxn:
    def __init__(self, cur: PgCursor) -> None:
        self.cur = cur

    def bookings_for_room(
        self,
        room_id: str,
        start: date,
        end: date,
        *,
        exclude_booking_id: str | None = None,
    ) -> list[BookingEntry]:
        return bookings_repository.list_entries_for_room(
            self.cur,
            room_id=room_id,
            start=start,
            end=end,
            exclude_booking_id=exclude_booking_id,
        )

    def blocks_for_room(self, room_id: str, start: date, end: date) -> list[BlockedRange]:
        return calendar_repository.list_blocks_for_room(
            self.cur, room_id=room_id, start=start, end=end
        )

    def holds_for_room(self, room_id: str, start: date, end: date) -> list[Hold]:
        return holds_repository.list_holds_for_room(
            self.cur, room_id=room_id, start=start, end=end
        )

    def session_holds(self, session_id: str) -> list[Hold]:
        return holds_repository.list_session_holds(self.cur, session_id)

    def get_hold(self, hold_id: str) -> Hold | None:
        return holds_repository.get_hold(self.cur, hold_id)

    def insert_hold(self, hold: Hold) -> None:
        holds_repository.insert_hold(self.cur, hold)

    def delete_hold(self, hold_id: str) -> bool:
        return holds_repository.delete_hold(self.cur, hold_id)

    def delete_expired_holds(self, now: datetime) -> int:
        return holds_repository.delete_expired_holds(self.cur, now)

    def insert_booking(self, record: BookingRecord) -> None:
        bookings_repository.insert_booking(self.cur, record)

    def get_booking(self, booking_id: str) -> BookingRecord | None:
        return bookings_repository.get_booking(self.cur, booking_id)

    def replace_booking(self, record: BookingRecord) -> None:
        bookings_repository.update_booking(self.cur, record)

    def delete_booking(self, booking_id: str) -> bool:
        return bookings_repository.delete_booking(self.cur, booking_id)

    def season_periods(self) -> list[SeasonPeriod]:
        return calendar_repository.list_season_periods(self.cur)

    def insert_block(self, block: BlockedRange) -> None:
        calendar_repository.insert_block(self.cur, block)

    def insert_season_period(self, period: SeasonPeriod) -> None:
        calendar_repository.insert_season_period(self.cur, period)


class PgStore:
    """Store backed by PostgreSQL (DATABASE_URL unless a DSN is given)."""

    def __init__(self, dsn: str | None = None) -> None:
        self.dsn = dsn

    @contextmanager
    def transaction(self, room_ids: Iterable[str] = ()) -> Iterator[PgStoreTxn]:
        with txn(dsn=self.dsn) as cur:
            lock_rooms(cur, room_ids)
            yield PgStoreTxn(cur)
