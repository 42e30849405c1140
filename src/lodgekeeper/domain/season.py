"""Season gate - access rules for stays touching a restricted season period.

Before the period's cutoff (see ``ClockPolicy.cutoff_for``) every request
needs one of the period's access codes. From the cutoff on, single-room
requests are allowed without a code and whole-property requests are
refused outright.

When a range touches several periods the most restrictive outcome wins
(reject > require-code > allow).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from lodgekeeper.domain.models import RequestType, SeasonPeriod
from lodgekeeper.domain.results import ErrorKind, Reason, Reject, validation_error
from lodgekeeper.infra.settings import Policy
from lodgekeeper.infra.store import Store, StoreTxn
from lodgekeeper.infra.time import ClockPolicy
from lodgekeeper.observability.logging import get_logger

logger = get_logger(__name__)

SEASON_ROOM_LIMIT_DETAIL = "season-room-limit"


class Decision(str, Enum):
    ALLOW = "allow"
    REQUIRE_CODE = "require-code"
    REJECT = "reject"


_SEVERITY = {Decision.ALLOW: 0, Decision.REQUIRE_CODE: 1, Decision.REJECT: 2}


@dataclass(frozen=True)
class SeasonDecision:
    decision: Decision
    reason: Reason | None = None
    period_id: str | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOW

    def to_reject(self, room_id: str | None = None) -> Reject | None:
        """Reject equivalent of a non-allow decision.

        A missing code is reported as ``invalid-code`` at this point: the
        caller had its chance to supply one.
        """
        if self.allowed:
            return None
        return Reject(
            kind=ErrorKind.SEASON,
            reason=self.reason or Reason.INVALID_CODE,
            room_id=room_id,
            detail=self.decision.value,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"decision": self.decision.value}
        if self.reason is not None:
            data["reason"] = self.reason.value
        if self.period_id is not None:
            data["period_id"] = self.period_id
        return data


ALLOW = SeasonDecision(Decision.ALLOW)


class SeasonGate:
    def __init__(self, store: Store, clock: ClockPolicy, policy: Policy) -> None:
        self.store = store
        self.clock = clock
        self.policy = policy

    def periods(self, *, tx: StoreTxn | None = None) -> list[SeasonPeriod]:
        if tx is None:
            with self.store.transaction() as own_tx:
                return own_tx.season_periods()
        return tx.season_periods()

    def evaluate(
        self,
        start: date,
        end: date,
        request_type: RequestType,
        code: str | None = None,
        now: datetime | None = None,
        *,
        tx: StoreTxn | None = None,
    ) -> SeasonDecision:
        """Decide whether a stay may proceed with the given access code.

        Args:
            start: First day of the stay.
            end: Checkout day.
            request_type: single-room or bulk.
            code: Access code supplied by the caller, if any.
            now: Evaluation instant (defaults to the clock).
            tx: Open store transaction to read periods from.

        Returns:
            SeasonDecision with decision allow / require-code / reject.
        """
        if now is None:
            now = self.clock.now()

        result = ALLOW
        for period in self.periods(tx=tx):
            if not period.intersects(start, end):
                continue
            decision = self._evaluate_period(period, request_type, code, now)
            # The first intersecting period replaces the untouched ALLOW
            if (
                result.period_id is None
                or _SEVERITY[decision.decision] > _SEVERITY[result.decision]
            ):
                result = decision

        if not result.allowed:
            logger.info(
                "season gate decision",
                extra={
                    "extra_fields": {
                        "decision": result.decision.value,
                        "reason": result.reason.value if result.reason else None,
                        "period_id": result.period_id,
                        "request_type": request_type.value,
                        "code_supplied": bool(code),
                    },
                },
            )
        return result

    def _evaluate_period(
        self,
        period: SeasonPeriod,
        request_type: RequestType,
        code: str | None,
        now: datetime,
    ) -> SeasonDecision:
        if self.clock.is_before_cutoff(period.applicable_year, now):
            if not code:
                return SeasonDecision(Decision.REQUIRE_CODE, period_id=period.id)
            if period.accepts(code):
                return SeasonDecision(Decision.ALLOW, period_id=period.id)
            return SeasonDecision(
                Decision.REJECT, Reason.INVALID_CODE, period_id=period.id
            )

        if request_type is RequestType.BULK:
            return SeasonDecision(
                Decision.REJECT,
                Reason.BULK_RESTRICTED_AFTER_CUTOFF,
                period_id=period.id,
            )
        return SeasonDecision(Decision.ALLOW, period_id=period.id)

    def check_room_limit(
        self,
        stays: list[tuple[str, date, date]],
        tiers: set[str],
        now: datetime | None = None,
        *,
        tx: StoreTxn | None = None,
    ) -> Reject | None:
        """Limit rooms per booking for the limited tier before the cutoff.

        Counts, per period still before its cutoff, the rooms whose stay
        touches the period.
        """
        if self.policy.season_limited_tier not in tiers:
            return None
        if now is None:
            now = self.clock.now()

        limit = self.policy.season_room_limit
        for period in self.periods(tx=tx):
            if not self.clock.is_before_cutoff(period.applicable_year, now):
                continue
            rooms = {room_id for room_id, s, e in stays if period.intersects(s, e)}
            if len(rooms) > limit:
                logger.info(
                    "season room limit exceeded",
                    extra={
                        "extra_fields": {
                            "period_id": period.id,
                            "rooms": len(rooms),
                            "limit": limit,
                        },
                    },
                )
                return validation_error(SEASON_ROOM_LIMIT_DETAIL)
        return None
