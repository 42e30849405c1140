"""Tagged results shared by every core operation.

Operations return either ``ACCEPT`` (or their value) or a ``Reject``. A
``Reject`` carries an ``ErrorKind`` and a reason code from a closed set so
callers can match on it and serialize it without parsing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    SEASON = "season"
    CONSISTENCY = "consistency"


class Reason(str, Enum):
    OCCUPIED = "occupied"
    BLOCKED = "blocked"
    HELD_BY_OTHER = "held-by-other"
    INVALID_CODE = "invalid-code"
    BULK_RESTRICTED_AFTER_CUTOFF = "bulk-restricted-after-cutoff"
    CAPACITY_EXCEEDED = "capacity-exceeded"
    VALIDATION = "validation"


@dataclass(frozen=True)
class Accept:
    ok: bool = True


ACCEPT = Accept()


@dataclass(frozen=True)
class Reject:
    """A rejected request.

    ``rooms`` holds per-room rejects when a multi-room request (finalize,
    bulk hold) fails; the outer reject then summarizes the first of them.
    """

    kind: ErrorKind
    reason: Reason
    room_id: str | None = None
    detail: str | None = None
    conflicting_id: str | None = None
    rooms: tuple[Reject, ...] = ()

    ok = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ok": False,
            "kind": self.kind.value,
            "reason": self.reason.value,
        }
        if self.room_id is not None:
            data["room_id"] = self.room_id
        if self.detail is not None:
            data["detail"] = self.detail
        if self.rooms:
            data["rooms"] = [r.to_dict() for r in self.rooms]
        return data

    def as_consistency(self) -> Reject:
        """Re-tag a conflict found while re-validating an accepted hold."""
        return Reject(
            kind=ErrorKind.CONSISTENCY,
            reason=self.reason,
            room_id=self.room_id,
            detail=self.detail,
            conflicting_id=self.conflicting_id,
        )


def validation_error(detail: str, room_id: str | None = None) -> Reject:
    return Reject(
        kind=ErrorKind.VALIDATION,
        reason=Reason.VALIDATION,
        room_id=room_id,
        detail=detail,
    )


def capacity_exceeded(room_id: str | None, detail: str) -> Reject:
    return Reject(
        kind=ErrorKind.VALIDATION,
        reason=Reason.CAPACITY_EXCEEDED,
        room_id=room_id,
        detail=detail,
    )


def summarize(rejects: list[Reject]) -> Reject:
    """Fold per-room rejects into one reject listing all of them."""
    first = rejects[0]
    return Reject(
        kind=first.kind,
        reason=first.reason,
        room_id=first.room_id,
        detail=first.detail,
        rooms=tuple(rejects),
    )


class QuoteRejected(Exception):
    """Raised by the pricing engine; carries the ``Reject`` to return."""

    def __init__(self, reject: Reject) -> None:
        self.reject = reject
        super().__init__(f"Quote rejected: {reject.reason.value} ({reject.detail})")
