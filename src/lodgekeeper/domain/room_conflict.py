"""Room conflict detection.

Centralised logic deciding whether a room can take a stay ``[start, end)``.

Overlap formula:  (new_start < existing_end) AND (new_end > existing_start)
Strict inequality allows check-out day == check-in day (touching dates are OK).

Blocks are inclusive on both ends: a block conflicts if any night of the
stay falls inside ``[block_start, block_end]``.

Precedence of reasons: blocked, then occupied, then held-by-other.
"""

from __future__ import annotations

from datetime import date

from lodgekeeper.domain.models import BlockedRange
from lodgekeeper.domain.results import ACCEPT, Accept, ErrorKind, Reason, Reject, summarize
from lodgekeeper.infra.store import Store, StoreTxn
from lodgekeeper.infra.time import ClockPolicy
from lodgekeeper.observability.logging import get_logger

logger = get_logger(__name__)


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Half-open overlap of two stays."""
    return start < other_end and end > other_start


def block_hits(block: BlockedRange, start: date, end: date) -> bool:
    """True if a night of ``[start, end)`` lies inside the inclusive block."""
    return block.start < end and block.end >= start


class ConflictResolver:
    """Accepts or rejects candidate stays against bookings, blocks and holds."""

    def __init__(self, store: Store, clock: ClockPolicy) -> None:
        self.store = store
        self.clock = clock

    def check(
        self,
        room_id: str,
        start: date,
        end: date,
        session_id: str,
        *,
        tx: StoreTxn | None = None,
        exclude_hold_ids: frozenset[str] = frozenset(),
        exclude_booking_id: str | None = None,
    ) -> Accept | Reject:
        """Check one room.

        Args:
            room_id: Room identifier.
            start: Check-in date (inclusive).
            end: Check-out date (exclusive).
            session_id: Requesting session; its own holds never conflict.
            tx: Open store transaction. Without one, a short transaction
                locking this room is opened.
            exclude_hold_ids: Holds to ignore (the hold being replaced).
            exclude_booking_id: Booking to ignore (self-service date edits).

        Returns:
            ACCEPT, or a Reject tagged occupied / blocked / held-by-other.
        """
        if tx is None:
            with self.store.transaction([room_id]) as own_tx:
                return self._check(
                    own_tx, room_id, start, end, session_id,
                    exclude_hold_ids, exclude_booking_id,
                )
        return self._check(
            tx, room_id, start, end, session_id, exclude_hold_ids, exclude_booking_id
        )

    def check_many(
        self,
        stays: list[tuple[str, date, date]],
        session_id: str,
        *,
        tx: StoreTxn | None = None,
        exclude_hold_ids: frozenset[str] = frozenset(),
    ) -> Accept | Reject:
        """Check several (room, start, end) stays; all must pass.

        The returned Reject lists every failing room in ``rooms``.
        """
        if tx is None:
            with self.store.transaction([s[0] for s in stays]) as own_tx:
                return self.check_many(
                    stays, session_id, tx=own_tx, exclude_hold_ids=exclude_hold_ids
                )

        rejects = []
        for room_id, start, end in stays:
            result = self._check(
                tx, room_id, start, end, session_id, exclude_hold_ids, None
            )
            if isinstance(result, Reject):
                rejects.append(result)
        if rejects:
            return summarize(rejects)
        return ACCEPT

    def _check(
        self,
        tx: StoreTxn,
        room_id: str,
        start: date,
        end: date,
        session_id: str,
        exclude_hold_ids: frozenset[str],
        exclude_booking_id: str | None,
    ) -> Accept | Reject:
        for block in tx.blocks_for_room(room_id, start, end):
            if block_hits(block, start, end):
                return self._reject(Reason.BLOCKED, room_id, start, end, block.id)

        for entry in tx.bookings_for_room(
            room_id, start, end, exclude_booking_id=exclude_booking_id
        ):
            if ranges_overlap(start, end, entry.start, entry.end):
                return self._reject(Reason.OCCUPIED, room_id, start, end, entry.booking_id)

        now = self.clock.now()
        for hold in tx.holds_for_room(room_id, start, end):
            if (
                hold.session_id != session_id
                and hold.id not in exclude_hold_ids
                and hold.is_active(now)
                and ranges_overlap(start, end, hold.start, hold.end)
            ):
                return self._reject(Reason.HELD_BY_OTHER, room_id, start, end, hold.id)

        return ACCEPT

    def _reject(
        self,
        reason: Reason,
        room_id: str,
        start: date,
        end: date,
        conflicting_id: str,
    ) -> Reject:
        # Only non-PII fields are logged
        logger.warning(
            "room conflict detected",
            extra={
                "extra_fields": {
                    "room_id": room_id,
                    "reason": reason.value,
                    "requested_start": start.isoformat(),
                    "requested_end": end.isoformat(),
                    "conflicting_id": conflicting_id,
                },
            },
        )
        return Reject(
            kind=ErrorKind.CONFLICT,
            reason=reason,
            room_id=room_id,
            conflicting_id=conflicting_id,
        )
