"""Self-service booking operations, gated by the booking's capability token.

An unknown booking and a wrong token look the same to the caller: both
yield None.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from lodgekeeper.domain.models import BookingRecord, RequestType
from lodgekeeper.domain.pricing import PricingEngine
from lodgekeeper.domain.results import (
    QuoteRejected,
    Reject,
    summarize,
    validation_error,
)
from lodgekeeper.domain.room_conflict import ConflictResolver
from lodgekeeper.domain.season import SeasonGate
from lodgekeeper.domain.validation import validate_stay
from lodgekeeper.infra.hashing import verify_token
from lodgekeeper.infra.settings import Policy, PropertyCatalog
from lodgekeeper.infra.store import Store, StoreTxn
from lodgekeeper.infra.time import ClockPolicy
from lodgekeeper.observability.logging import get_logger

logger = get_logger(__name__)


def _authorized(tx: StoreTxn, booking_id: str, token: str | None) -> BookingRecord | None:
    record = tx.get_booking(booking_id)
    if record is None or not verify_token(booking_id, token, record.token_hash):
        return None
    return record


class BookingService:
    def __init__(
        self,
        store: Store,
        clock: ClockPolicy,
        policy: Policy,
        catalog: PropertyCatalog,
        resolver: ConflictResolver,
        season: SeasonGate,
        pricing: PricingEngine,
    ) -> None:
        self.store = store
        self.clock = clock
        self.policy = policy
        self.catalog = catalog
        self.resolver = resolver
        self.season = season
        self.pricing = pricing

    def get_booking(self, booking_id: str, token: str | None) -> BookingRecord | None:
        with self.store.transaction() as tx:
            return _authorized(tx, booking_id, token)

    def cancel_booking(self, booking_id: str, token: str | None) -> bool:
        """Delete a booking, freeing its rooms.

        Returns:
            True if the booking was cancelled, False if not found or the
            token does not match.
        """
        with self.store.transaction() as tx:
            if _authorized(tx, booking_id, token) is None:
                return False
            tx.delete_booking(booking_id)

        logger.info(
            "booking cancelled",
            extra={"extra_fields": {"booking_id": booking_id}},
        )
        return True

    def change_room_dates(
        self,
        booking_id: str,
        token: str | None,
        room_id: str,
        start: date,
        end: date,
        access_code: str | None = None,
    ) -> BookingRecord | Reject | None:
        """Move one room of a booking to new dates.

        For a whole-property booking every room moves together. The new
        range is checked against everything except the booking itself,
        the season gate applies as for a new booking, and the total is
        re-priced.

        Returns:
            The updated record, a Reject, or None if the booking is not
            found or the token does not match.
        """
        reject = validate_stay(
            start,
            end,
            today=self.clock.today(),
            max_advance_days=self.policy.max_advance_days,
            room_id=room_id,
        )
        if reject is not None:
            return reject

        with self.store.transaction() as tx:
            record = _authorized(tx, booking_id, token)
        if record is None:
            return None
        if record.entry_for(room_id) is None:
            return validation_error("room is not part of this booking", room_id)

        with self.store.transaction(record.room_ids) as tx:
            record = _authorized(tx, booking_id, token)
            if record is None:
                return None

            entries = tuple(
                replace(e, start=start, end=end)
                if record.whole_property or e.room_id == room_id
                else e
                for e in record.entries
            )
            changed = [e for e in entries if e not in record.entries]

            rejects = []
            request_type = (
                RequestType.BULK if record.whole_property else RequestType.SINGLE_ROOM
            )
            for entry in changed:
                result = self.resolver.check(
                    entry.room_id,
                    entry.start,
                    entry.end,
                    f"booking:{booking_id}",
                    tx=tx,
                    exclude_booking_id=booking_id,
                )
                if isinstance(result, Reject):
                    rejects.append(result)
                    continue
                decision = self.season.evaluate(
                    entry.start, entry.end, request_type, access_code, tx=tx
                )
                season_reject = decision.to_reject(entry.room_id)
                if season_reject is not None:
                    rejects.append(season_reject)
            if rejects:
                return summarize(rejects)

            try:
                total = self._total(record, entries)
            except QuoteRejected as e:
                return e.reject

            updated = replace(
                record,
                entries=entries,
                total_price=total,
                updated_at=self.clock.now(),
            )
            tx.replace_booking(updated)

        logger.info(
            "booking dates changed",
            extra={
                "extra_fields": {
                    "booking_id": booking_id,
                    "room_id": room_id,
                    "start": start.isoformat(),
                    "end": end.isoformat(),
                    "total_price": total,
                },
            },
        )
        return updated

    def _total(self, record: BookingRecord, entries) -> int:
        if record.whole_property:
            return self.pricing.price_bulk(entries[0].nights, record.roster)
        total = 0
        for entry in entries:
            room = self.catalog.room(entry.room_id)
            if room is None:
                raise QuoteRejected(validation_error("unknown room", entry.room_id))
            total += self.pricing.price(entry.nights, entry.roster, room.rates)
        return total
