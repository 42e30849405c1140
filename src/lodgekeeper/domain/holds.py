"""Hold domain logic - session-scoped provisional reservations.

Every write runs inside one store transaction locking the affected rooms,
so the conflict check and the write it gates see the same state.

A hold whose ``expires_at`` has passed behaves as if it did not exist,
whether or not the expiry task or sweep has removed it yet.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from lodgekeeper.domain.models import GuestRoster, Hold, nights_between
from lodgekeeper.domain.pricing import PricingEngine
from lodgekeeper.domain.results import QuoteRejected, Reject, validation_error
from lodgekeeper.domain.room_conflict import ConflictResolver
from lodgekeeper.domain.validation import validate_roster, validate_stay
from lodgekeeper.infra.hashing import generate_group_id, generate_hold_id
from lodgekeeper.infra.settings import Policy, PropertyCatalog
from lodgekeeper.infra.store import Store, StoreTxn
from lodgekeeper.infra.time import ClockPolicy
from lodgekeeper.observability.logging import get_logger
from lodgekeeper.tasks.client import TasksClient

logger = get_logger(__name__)

EXPIRE_HOLD_PATH = "/tasks/holds/expire"

# Module-level tasks client (singleton for dev)
_tasks_client = TasksClient()


def _get_tasks_client() -> TasksClient:
    """Get tasks client (allows override in tests)."""
    return _tasks_client


def _schedule_expiry(hold: Hold) -> None:
    """Enqueue the expiry task for a hold.

    Idempotent by task_id. Best-effort only: reads apply lazy expiry.
    """
    task_id = f"expire-hold:{hold.id}"
    _get_tasks_client().enqueue(
        task_id,
        EXPIRE_HOLD_PATH,
        {"hold_id": hold.id, "task_id": task_id},
        schedule_time=hold.expires_at,
    )


def active_session_holds(tx: StoreTxn, session_id: str, now: datetime) -> list[Hold]:
    return [h for h in tx.session_holds(session_id) if h.is_active(now)]


def _log_hold(message: str, hold: Hold) -> None:
    logger.info(
        message,
        extra={
            "extra_fields": {
                "hold_id": hold.id,
                "room_id": hold.room_id,
                "start": hold.start.isoformat(),
                "end": hold.end.isoformat(),
                "bulk_group": hold.bulk_group,
            },
        },
    )


def _log_reject(message: str, reject: Reject) -> None:
    logger.info(
        message,
        extra={
            "extra_fields": {
                "kind": reject.kind.value,
                "reason": reject.reason.value,
                "room_id": reject.room_id,
            },
        },
    )


class HoldStore:
    """Creates, updates, deletes and lists one session's holds."""

    def __init__(
        self,
        store: Store,
        clock: ClockPolicy,
        policy: Policy,
        catalog: PropertyCatalog,
        resolver: ConflictResolver,
        pricing: PricingEngine,
    ) -> None:
        self.store = store
        self.clock = clock
        self.policy = policy
        self.catalog = catalog
        self.resolver = resolver
        self.pricing = pricing

    def _new_hold(
        self,
        session_id: str,
        room_id: str,
        start: date,
        end: date,
        roster: GuestRoster,
        quoted_price: int,
        bulk_group: str | None = None,
    ) -> Hold:
        now = self.clock.now()
        return Hold(
            id=generate_hold_id(),
            session_id=session_id,
            room_id=room_id,
            start=start,
            end=end,
            roster=roster,
            created_at=now,
            expires_at=self.clock.expiry(self.policy.hold_ttl_minutes, now),
            quoted_price=quoted_price,
            bulk_group=bulk_group,
        )

    def _validate_room_stay(
        self,
        room_id: str,
        start: date,
        end: date,
        roster: GuestRoster,
    ) -> tuple[int, Reject | None]:
        """Validate a single-room stay and price it."""
        room = self.catalog.room(room_id)
        if room is None:
            return 0, validation_error("unknown room", room_id)
        reject = validate_stay(
            start,
            end,
            today=self.clock.today(),
            max_advance_days=self.policy.max_advance_days,
            room_id=room_id,
        ) or validate_roster(room, roster)
        if reject is not None:
            return 0, reject
        try:
            price = self.pricing.price(nights_between(start, end), roster, room.rates)
        except QuoteRejected as e:
            return 0, replace(e.reject, room_id=room_id)
        return price, None

    def create(
        self,
        session_id: str,
        room_id: str,
        start: date,
        end: date,
        roster: GuestRoster,
    ) -> Hold | Reject:
        """Hold one room for ``[start, end)``.

        Returns:
            The new Hold, or a Reject (validation, capacity-exceeded,
            occupied, blocked or held-by-other).
        """
        price, reject = self._validate_room_stay(room_id, start, end, roster)
        if reject is not None:
            _log_reject("hold rejected", reject)
            return reject

        with self.store.transaction([room_id]) as tx:
            now = self.clock.now()
            for existing in active_session_holds(tx, session_id, now):
                if existing.bulk_group is not None:
                    reject = validation_error("session holds the whole property", room_id)
                    break
                if existing.room_id == room_id:
                    reject = validation_error("room already held by this session", room_id)
                    break
            else:
                result = self.resolver.check(room_id, start, end, session_id, tx=tx)
                if isinstance(result, Reject):
                    reject = result
            if reject is not None:
                _log_reject("hold rejected", reject)
                return reject

            hold = self._new_hold(session_id, room_id, start, end, roster, price)
            tx.insert_hold(hold)

        _schedule_expiry(hold)
        _log_hold("hold created", hold)
        return hold

    def create_bulk(
        self,
        session_id: str,
        start: date,
        end: date,
        roster: GuestRoster,
    ) -> list[Hold] | Reject:
        """Hold every room of the property under one bulk group.

        Each hold of the group carries the full roster and the bulk price;
        the group is consolidated as one whole-property booking. Rejected
        as a whole if any room conflicts.
        """
        reject = validate_stay(
            start,
            end,
            today=self.clock.today(),
            max_advance_days=self.policy.max_advance_days,
        )
        if reject is None and roster.adults < 1:
            reject = validation_error("at least one adult is required")
        if reject is None:
            try:
                price = self.pricing.price_bulk(nights_between(start, end), roster)
            except QuoteRejected as e:
                reject = e.reject
        if reject is not None:
            _log_reject("bulk hold rejected", reject)
            return reject

        room_ids = self.catalog.room_ids
        with self.store.transaction(room_ids) as tx:
            if active_session_holds(tx, session_id, self.clock.now()):
                reject = validation_error("session already holds rooms")
            else:
                result = self.resolver.check_many(
                    [(room_id, start, end) for room_id in room_ids],
                    session_id,
                    tx=tx,
                )
                if isinstance(result, Reject):
                    reject = result
            if reject is not None:
                _log_reject("bulk hold rejected", reject)
                return reject

            group = generate_group_id()
            holds = [
                self._new_hold(session_id, room_id, start, end, roster, price, group)
                for room_id in room_ids
            ]
            for hold in holds:
                tx.insert_hold(hold)

        for hold in holds:
            _schedule_expiry(hold)
        logger.info(
            "bulk hold created",
            extra={
                "extra_fields": {
                    "bulk_group": group,
                    "rooms": len(holds),
                    "start": start.isoformat(),
                    "end": end.isoformat(),
                },
            },
        )
        return holds

    def update(
        self,
        session_id: str,
        hold_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
        roster: GuestRoster | None = None,
    ) -> Hold | Reject:
        """Replace one of the session's holds with new dates and/or roster.

        The old hold is deleted and the new one created in the same
        transaction; on reject the old hold stays as it was. The new hold
        gets a fresh id and TTL.
        """
        with self.store.transaction() as tx:
            old = tx.get_hold(hold_id)
        if (
            old is None
            or old.session_id != session_id
            or not old.is_active(self.clock.now())
        ):
            return validation_error("hold not found")
        if old.bulk_group is not None:
            return validation_error("whole-property holds cannot be updated", old.room_id)

        start = start or old.start
        end = end or old.end
        roster = roster if roster is not None else old.roster

        price, reject = self._validate_room_stay(old.room_id, start, end, roster)
        if reject is not None:
            _log_reject("hold update rejected", reject)
            return reject

        with self.store.transaction([old.room_id]) as tx:
            current = tx.get_hold(hold_id)
            if current is None or not current.is_active(self.clock.now()):
                return validation_error("hold not found", old.room_id)
            result = self.resolver.check(
                old.room_id,
                start,
                end,
                session_id,
                tx=tx,
                exclude_hold_ids=frozenset({hold_id}),
            )
            if isinstance(result, Reject):
                _log_reject("hold update rejected", result)
                return result

            tx.delete_hold(hold_id)
            hold = self._new_hold(session_id, old.room_id, start, end, roster, price)
            tx.insert_hold(hold)

        _schedule_expiry(hold)
        _log_hold("hold updated", hold)
        return hold

    def delete(self, session_id: str, hold_id: str) -> bool:
        """Delete one of the session's holds. Idempotent.

        Deleting any hold of a bulk group releases the whole group. Holds
        of other sessions are never touched.

        Returns:
            True if something was deleted.
        """
        with self.store.transaction() as tx:
            hold = tx.get_hold(hold_id)
            if hold is None or hold.session_id != session_id:
                return False
            if hold.bulk_group is None:
                doomed = [hold]
            else:
                doomed = [
                    h for h in tx.session_holds(session_id)
                    if h.bulk_group == hold.bulk_group
                ]
            for h in doomed:
                tx.delete_hold(h.id)

        _log_hold("hold deleted", hold)
        return True

    def list_holds(self, session_id: str) -> list[Hold]:
        """The session's unexpired holds."""
        with self.store.transaction() as tx:
            return active_session_holds(tx, session_id, self.clock.now())
