"""Store handle contract shared by the in-memory and PostgreSQL stores.

Range queries are deliberately inclusive on both ends (touching records
are returned) so callers can detect checkout-day boundaries; the core
applies the exact overlap rules itself. Holds are returned regardless of
expiry: lazy expiry is the core's job.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Iterable, Protocol

from lodgekeeper.domain.models import (
    BlockedRange,
    BookingEntry,
    BookingRecord,
    Hold,
    SeasonPeriod,
)


class StoreTxn(Protocol):
    """Read/write view valid for the duration of one transaction."""

    def bookings_for_room(
        self,
        room_id: str,
        start: date,
        end: date,
        *,
        exclude_booking_id: str | None = None,
    ) -> list[BookingEntry]: ...

    def blocks_for_room(self, room_id: str, start: date, end: date) -> list[BlockedRange]: ...

    def holds_for_room(self, room_id: str, start: date, end: date) -> list[Hold]: ...

    def session_holds(self, session_id: str) -> list[Hold]: ...

    def get_hold(self, hold_id: str) -> Hold | None: ...

    def insert_hold(self, hold: Hold) -> None: ...

    def delete_hold(self, hold_id: str) -> bool: ...

    def delete_expired_holds(self, now: datetime) -> int: ...

    def insert_booking(self, record: BookingRecord) -> None: ...

    def get_booking(self, booking_id: str) -> BookingRecord | None: ...

    def replace_booking(self, record: BookingRecord) -> None: ...

    def delete_booking(self, booking_id: str) -> bool: ...

    def season_periods(self) -> list[SeasonPeriod]: ...

    def insert_block(self, block: BlockedRange) -> None: ...

    def insert_season_period(self, period: SeasonPeriod) -> None: ...


class Store(Protocol):
    """Authoritative store.

    ``transaction(room_ids)`` serializes against every other transaction
    naming an overlapping room id, commits on success and rolls back on
    exception.
    """

    def transaction(self, room_ids: Iterable[str] = ()) -> ContextManager[StoreTxn]: ...
