"""Expire hold domain logic - removal of holds past their TTL.

Removal here is housekeeping: every read already treats a hold with
``expires_at <= now`` as absent. Both entry points are safe to repeat.
"""

from lodgekeeper.infra.store import Store
from lodgekeeper.infra.time import ClockPolicy
from lodgekeeper.observability.logging import get_logger

logger = get_logger(__name__)


def expire_hold(
    *,
    hold_id: str,
    store: Store,
    clock: ClockPolicy,
    task_id: str | None = None,
) -> dict:
    """Delete one hold if it has expired.

    Args:
        hold_id: Hold identifier.
        store: Authoritative store.
        clock: Clock deciding whether the hold has expired.
        task_id: Task identifier, for tracing only.

    Returns:
        Dict with result status:
        - {"status": "noop"} - hold not found (deleted, finalized or already expired)
        - {"status": "not_expired_yet"} - hold hasn't reached expires_at
        - {"status": "expired", "hold_id": str, "room_id": str}
    """
    with store.transaction() as tx:
        hold = tx.get_hold(hold_id)
        if hold is None:
            return {"status": "noop"}

        if hold.is_active(clock.now()):
            # Not expired yet - retry when time passes
            return {"status": "not_expired_yet"}

        tx.delete_hold(hold_id)

    logger.info(
        "hold expired",
        extra={
            "extra_fields": {
                "hold_id": hold_id,
                "room_id": hold.room_id,
                "task_id": task_id,
            },
        },
    )
    return {"status": "expired", "hold_id": hold_id, "room_id": hold.room_id}


def sweep_expired_holds(*, store: Store, clock: ClockPolicy) -> dict:
    """Delete every expired hold.

    Returns:
        {"status": "ok", "deleted": int}
    """
    with store.transaction() as tx:
        deleted = tx.delete_expired_holds(clock.now())

    if deleted:
        logger.info(
            "expired holds swept",
            extra={"extra_fields": {"deleted": deleted}},
        )
    return {"status": "ok", "deleted": deleted}
