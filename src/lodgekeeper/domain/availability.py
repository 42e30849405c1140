"""Per-room, per-date availability as seen by one session.

Statuses are recomputed from the store on every call. When several facts
apply to the same date the strongest wins:

    blocked > booked > held-other > held-self > boundary > available

``boundary`` marks a checkout day of a booking or active hold that is not
otherwise occupied: it is still a valid check-in day for a new stay.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from lodgekeeper.domain.models import BlockedRange, BookingEntry, DayStatus, Hold
from lodgekeeper.infra.settings import PropertyCatalog
from lodgekeeper.infra.store import Store, StoreTxn
from lodgekeeper.infra.time import ClockPolicy


def classify(
    day: date,
    session_id: str,
    now: datetime,
    *,
    blocks: list[BlockedRange],
    bookings: list[BookingEntry],
    holds: list[Hold],
) -> DayStatus:
    """Derive the status of one date from the facts touching it."""
    if any(b.covers(day) for b in blocks):
        return DayStatus.BLOCKED
    if any(e.start <= day < e.end for e in bookings):
        return DayStatus.BOOKED

    active = [h for h in holds if h.is_active(now)]
    occupying = [h for h in active if h.start <= day < h.end]
    if any(h.session_id != session_id for h in occupying):
        return DayStatus.HELD_OTHER
    if occupying:
        return DayStatus.HELD_SELF

    if any(e.end == day for e in bookings) or any(h.end == day for h in active):
        return DayStatus.BOUNDARY
    return DayStatus.AVAILABLE


class AvailabilityIndex:
    def __init__(self, store: Store, clock: ClockPolicy, catalog: PropertyCatalog) -> None:
        self.store = store
        self.clock = clock
        self.catalog = catalog

    def status(
        self,
        room_id: str,
        day: date,
        session_id: str,
        *,
        tx: StoreTxn | None = None,
    ) -> DayStatus:
        """Status of one room on one date for the given session."""
        return self.status_map(room_id, day, day, session_id, tx=tx)[day]

    def status_map(
        self,
        room_id: str,
        date_from: date,
        date_to: date,
        session_id: str,
        *,
        tx: StoreTxn | None = None,
    ) -> dict[date, DayStatus]:
        """Statuses for every date of the inclusive range [date_from, date_to].

        Raises:
            ValueError: If date_to is before date_from.
        """
        if date_to < date_from:
            raise ValueError("date_to must not be before date_from")

        if tx is None:
            with self.store.transaction() as own_tx:
                return self._status_map(own_tx, room_id, date_from, date_to, session_id)
        return self._status_map(tx, room_id, date_from, date_to, session_id)

    def grid(
        self,
        date_from: date,
        date_to: date,
        session_id: str,
        room_ids: list[str] | None = None,
    ) -> dict[str, dict[date, DayStatus]]:
        """Status maps for several rooms (all catalog rooms by default)."""
        if room_ids is None:
            room_ids = self.catalog.room_ids
        with self.store.transaction() as tx:
            return {
                room_id: self.status_map(room_id, date_from, date_to, session_id, tx=tx)
                for room_id in room_ids
            }

    def _status_map(
        self,
        tx: StoreTxn,
        room_id: str,
        date_from: date,
        date_to: date,
        session_id: str,
    ) -> dict[date, DayStatus]:
        blocks = tx.blocks_for_room(room_id, date_from, date_to)
        bookings = tx.bookings_for_room(room_id, date_from, date_to)
        holds = tx.holds_for_room(room_id, date_from, date_to)
        now = self.clock.now()

        result: dict[date, DayStatus] = {}
        day = date_from
        while day <= date_to:
            result[day] = classify(
                day,
                session_id,
                now,
                blocks=blocks,
                bookings=bookings,
                holds=holds,
            )
            day += timedelta(days=1)
        return result
