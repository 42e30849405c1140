"""In-process authoritative store.

One re-entrant lock serializes every transaction, which trivially gives
per-room serializable check-then-act. Rollback restores a snapshot taken
when the transaction started.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Iterator

from lodgekeeper.domain.models import (
    BlockedRange,
    BookingEntry,
    BookingRecord,
    Hold,
    SeasonPeriod,
)


@dataclass
class _State:
    bookings: dict[str, BookingRecord] = field(default_factory=dict)
    holds: dict[str, Hold] = field(default_factory=dict)
    blocks: dict[str, BlockedRange] = field(default_factory=dict)
    periods: dict[str, SeasonPeriod] = field(default_factory=dict)

    def snapshot(self) -> _State:
        return _State(
            bookings=dict(self.bookings),
            holds=dict(self.holds),
            blocks=dict(self.blocks),
            periods=dict(self.periods),
        )


def _touches(start: date, end: date, other_start: date, other_end: date) -> bool:
    return other_start <= end and other_end >= start


class _MemoryTxn:
    def __init__(self, state: _State) -> None:
        self._state = state

    def bookings_for_room(
        self,
        room_id: str,
        start: date,
        end: date,
        *,
        exclude_booking_id: str | None = None,
    ) -> list[BookingEntry]:
        found = []
        for record in self._state.bookings.values():
            if record.id == exclude_booking_id:
                continue
            entry = record.entry_for(room_id)
            if entry is not None and _touches(start, end, entry.start, entry.end):
                found.append(replace(entry, booking_id=record.id))
        return sorted(found, key=lambda e: e.start)

    def blocks_for_room(self, room_id: str, start: date, end: date) -> list[BlockedRange]:
        return [
            b
            for b in self._state.blocks.values()
            if b.applies_to(room_id) and _touches(start, end, b.start, b.end)
        ]

    def holds_for_room(self, room_id: str, start: date, end: date) -> list[Hold]:
        return [
            h
            for h in self._state.holds.values()
            if h.room_id == room_id and _touches(start, end, h.start, h.end)
        ]

    def session_holds(self, session_id: str) -> list[Hold]:
        holds = [h for h in self._state.holds.values() if h.session_id == session_id]
        return sorted(holds, key=lambda h: (h.created_at, h.room_id))

    def get_hold(self, hold_id: str) -> Hold | None:
        return self._state.holds.get(hold_id)

    def insert_hold(self, hold: Hold) -> None:
        self._state.holds[hold.id] = hold

    def delete_hold(self, hold_id: str) -> bool:
        return self._state.holds.pop(hold_id, None) is not None

    def delete_expired_holds(self, now: datetime) -> int:
        expired = [h.id for h in self._state.holds.values() if not h.is_active(now)]
        for hold_id in expired:
            del self._state.holds[hold_id]
        return len(expired)

    def insert_booking(self, record: BookingRecord) -> None:
        if record.id in self._state.bookings:
            raise ValueError(f"booking {record.id} already exists")
        self._state.bookings[record.id] = replace(record, capability_token=None)

    def get_booking(self, booking_id: str) -> BookingRecord | None:
        return self._state.bookings.get(booking_id)

    def replace_booking(self, record: BookingRecord) -> None:
        self._state.bookings[record.id] = replace(record, capability_token=None)

    def delete_booking(self, booking_id: str) -> bool:
        return self._state.bookings.pop(booking_id, None) is not None

    def season_periods(self) -> list[SeasonPeriod]:
        return sorted(self._state.periods.values(), key=lambda p: p.start)

    def insert_block(self, block: BlockedRange) -> None:
        self._state.blocks[block.id] = block

    def insert_season_period(self, period: SeasonPeriod) -> None:
        self._state.periods[period.id] = period


class MemoryStore:
    """Store kept in process memory; contents are lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._state = _State()

    @contextmanager
    def transaction(self, room_ids: Iterable[str] = ()) -> Iterator[_MemoryTxn]:
        with self._lock:
            saved = self._state.snapshot()
            try:
                yield _MemoryTxn(self._state)
            except Exception:
                self._state = saved
                raise
