"""Finalize domain logic - consolidate a session's holds into one booking.

Holds were accepted in the past; bookings, blocks and the clock may have
moved since. Finalize therefore re-validates every hold inside one
transaction locking all of the session's rooms, and either:

- commits: inserts one BookingRecord and deletes the consumed holds, or
- rejects: returns a Reject listing every failing room, holds untouched.

Conflicts found on re-check are tagged ``consistency`` so callers can tell
them apart from conflicts at selection time.
"""

from __future__ import annotations

from datetime import datetime

from lodgekeeper.domain.holds import active_session_holds
from lodgekeeper.domain.models import (
    BookingEntry,
    BookingRecord,
    ContactInfo,
    GuestRoster,
    Hold,
    RequestType,
)
from lodgekeeper.domain.pricing import PricingEngine
from lodgekeeper.domain.results import (
    QuoteRejected,
    Reject,
    summarize,
    validation_error,
)
from lodgekeeper.domain.room_conflict import ConflictResolver
from lodgekeeper.domain.season import SeasonGate
from lodgekeeper.domain.validation import validate_contact
from lodgekeeper.infra.hashing import (
    generate_booking_id,
    generate_capability_token,
    hash_token,
)
from lodgekeeper.infra.settings import PropertyCatalog
from lodgekeeper.infra.store import Store, StoreTxn
from lodgekeeper.infra.time import ClockPolicy
from lodgekeeper.observability.logging import get_logger

logger = get_logger(__name__)


class BookingConsolidator:
    def __init__(
        self,
        store: Store,
        clock: ClockPolicy,
        catalog: PropertyCatalog,
        resolver: ConflictResolver,
        season: SeasonGate,
        pricing: PricingEngine,
    ) -> None:
        self.store = store
        self.clock = clock
        self.catalog = catalog
        self.resolver = resolver
        self.season = season
        self.pricing = pricing

    def finalize(
        self,
        session_id: str,
        contact: ContactInfo,
        access_code: str | None = None,
    ) -> BookingRecord | Reject:
        """Turn the session's unexpired holds into one booking.

        Args:
            session_id: Session owning the holds.
            contact: Booker contact details.
            access_code: Season access code, if the stay needs one.

        Returns:
            The committed BookingRecord with ``capability_token`` set (the
            only time the raw token is available), or a Reject whose
            ``rooms`` lists each failing room.
        """
        reject = validate_contact(contact)
        if reject is not None:
            return self._rejected(reject)

        with self.store.transaction() as tx:
            room_ids = [h.room_id for h in tx.session_holds(session_id)]

        with self.store.transaction(room_ids) as tx:
            now = self.clock.now()
            holds = active_session_holds(tx, session_id, now)
            if not holds:
                return self._rejected(validation_error("no active holds"))
            # Holds added since the first read are on rooms not locked here
            if any(h.room_id not in room_ids for h in holds):
                return self._rejected(validation_error("holds changed during finalize"))

            groups = {h.bulk_group for h in holds}
            bulk = groups != {None}
            if bulk and len(groups) > 1:
                return self._rejected(
                    validation_error("whole-property and room holds cannot be combined"),
                )

            reject = self._revalidate(tx, holds, session_id, access_code, now, bulk)
            if reject is not None:
                return self._rejected(reject)

            try:
                total = self._total(holds, bulk)
            except QuoteRejected as e:
                return self._rejected(e.reject)

            record = self._build_record(holds, contact, total, bulk, now)
            tx.insert_booking(record)
            for hold in holds:
                tx.delete_hold(hold.id)

        logger.info(
            "booking committed",
            extra={
                "extra_fields": {
                    "booking_id": record.id,
                    "rooms": len(record.entries),
                    "whole_property": record.whole_property,
                    "total_price": record.total_price,
                },
            },
        )
        return record

    def _revalidate(
        self,
        tx: StoreTxn,
        holds: list[Hold],
        session_id: str,
        access_code: str | None,
        now: datetime,
        bulk: bool,
    ) -> Reject | None:
        request_type = RequestType.BULK if bulk else RequestType.SINGLE_ROOM
        rejects = []
        for hold in holds:
            result = self.resolver.check(
                hold.room_id, hold.start, hold.end, session_id, tx=tx
            )
            if isinstance(result, Reject):
                rejects.append(result.as_consistency())
                continue
            decision = self.season.evaluate(
                hold.start, hold.end, request_type, access_code, now, tx=tx
            )
            season_reject = decision.to_reject(hold.room_id)
            if season_reject is not None:
                rejects.append(season_reject)
        if rejects:
            return summarize(rejects)

        if not bulk:
            tiers = set()
            for hold in holds:
                tiers |= hold.roster.tiers()
            return self.season.check_room_limit(
                [(h.room_id, h.start, h.end) for h in holds], tiers, now, tx=tx
            )
        return None

    def _total(self, holds: list[Hold], bulk: bool) -> int:
        if bulk:
            first = holds[0]
            return self.pricing.price_bulk(first.nights, first.roster)
        total = 0
        for hold in holds:
            room = self.catalog.room(hold.room_id)
            if room is None:
                raise QuoteRejected(validation_error("unknown room", hold.room_id))
            total += self.pricing.price(hold.nights, hold.roster, room.rates)
        return total

    def _build_record(
        self,
        holds: list[Hold],
        contact: ContactInfo,
        total: int,
        bulk: bool,
        now: datetime,
    ) -> BookingRecord:
        booking_id = generate_booking_id()
        token = generate_capability_token()
        entries = tuple(
            BookingEntry(
                room_id=h.room_id,
                start=h.start,
                end=h.end,
                roster=GuestRoster() if bulk else h.roster,
                booking_id=booking_id,
            )
            for h in sorted(holds, key=lambda h: h.room_id)
        )
        return BookingRecord(
            id=booking_id,
            entries=entries,
            total_price=total,
            token_hash=hash_token(booking_id, token),
            contact=contact,
            created_at=now,
            updated_at=now,
            whole_property=bulk,
            bulk_roster=holds[0].roster if bulk else None,
            capability_token=token,
        )

    def _rejected(self, reject: Reject) -> Reject:
        logger.info(
            "booking rejected",
            extra={
                "extra_fields": {
                    "kind": reject.kind.value,
                    "reason": reject.reason.value,
                    "rooms": [r.room_id for r in reject.rooms] or [reject.room_id],
                },
            },
        )
        return reject
