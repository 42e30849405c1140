"""Core data model for rooms, holds, bookings, blocks and season periods.

Dates are property-local calendar dates. Stay ranges are half-open
``[start, end)`` where ``end`` is the checkout day. Blocks and season
periods are inclusive on both ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterator, Mapping

ADULT = "adult"
CHILD = "child"
TODDLER = "toddler"

GUEST_CATEGORIES = (ADULT, CHILD, TODDLER)


class DayStatus(str, Enum):
    """Availability of one room on one date, as seen by one session."""

    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"
    HELD_SELF = "held-self"
    HELD_OTHER = "held-other"
    BOUNDARY = "boundary"


class RequestType(str, Enum):
    SINGLE_ROOM = "single-room"
    BULK = "bulk"


@dataclass(frozen=True)
class TierRate:
    """Per-night rates of one room for one guest classification tier."""

    base: int
    adult: int
    child: int


@dataclass(frozen=True)
class BulkRate:
    """Per-night, per-guest rates used for whole-property bookings."""

    adult: int
    child: int


@dataclass(frozen=True)
class Room:
    id: str
    capacity: int
    rates: Mapping[str, TierRate]
    name: str = ""


@dataclass(frozen=True)
class Guest:
    category: str
    tier: str
    name: str | None = None


@dataclass(frozen=True)
class GuestRoster:
    """Guests staying in one room (or the whole property for bulk)."""

    guests: tuple[Guest, ...] = ()

    @classmethod
    def of(
        cls,
        *,
        adults: int = 0,
        children: int = 0,
        toddlers: int = 0,
        tier: str = "external",
    ) -> GuestRoster:
        """Build a roster where every guest shares one tier."""
        guests = (
            [Guest(ADULT, tier)] * adults
            + [Guest(CHILD, tier)] * children
            + [Guest(TODDLER, tier)] * toddlers
        )
        return cls(tuple(guests))

    def __iter__(self) -> Iterator[Guest]:
        return iter(self.guests)

    def __len__(self) -> int:
        return len(self.guests)

    def count(self, category: str, tier: str | None = None) -> int:
        return sum(
            1
            for g in self.guests
            if g.category == category and (tier is None or g.tier == tier)
        )

    @property
    def adults(self) -> int:
        return self.count(ADULT)

    @property
    def children(self) -> int:
        return self.count(CHILD)

    @property
    def toddlers(self) -> int:
        return self.count(TODDLER)

    @property
    def beds(self) -> int:
        """Guests that occupy a bed. Toddlers share with their parents."""
        return self.adults + self.children

    def tiers(self) -> set[str]:
        return {g.tier for g in self.guests}

    def merged(self, other: GuestRoster) -> GuestRoster:
        return GuestRoster(self.guests + other.guests)

    def to_list(self) -> list[dict]:
        return [
            {"category": g.category, "tier": g.tier, "name": g.name}
            for g in self.guests
        ]

    @classmethod
    def from_list(cls, items: list[dict] | None) -> GuestRoster:
        return cls(
            tuple(
                Guest(item["category"], item["tier"], item.get("name"))
                for item in items or []
            )
        )


def nights_between(start: date, end: date) -> int:
    return (end - start).days


def iter_nights(start: date, end: date) -> Iterator[date]:
    """Yield each occupied night of ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


@dataclass(frozen=True)
class Hold:
    """Short-lived provisional reservation of one room, owned by a session."""

    id: str
    session_id: str
    room_id: str
    start: date
    end: date
    roster: GuestRoster
    created_at: datetime
    expires_at: datetime
    quoted_price: int = 0
    bulk_group: str | None = None

    @property
    def nights(self) -> int:
        return nights_between(self.start, self.end)

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now


@dataclass(frozen=True)
class BookingEntry:
    """One room of a booking. Rooms of one booking may have different dates."""

    room_id: str
    start: date
    end: date
    roster: GuestRoster = field(default_factory=GuestRoster)
    booking_id: str = ""

    @property
    def nights(self) -> int:
        return nights_between(self.start, self.end)


@dataclass(frozen=True)
class ContactInfo:
    name: str
    email: str
    phone: str = ""
    address: str = ""
    company: str = ""
    notes: str = ""


@dataclass(frozen=True)
class BookingRecord:
    """A confirmed booking.

    ``capability_token`` is only populated on the record returned right
    after creation; stores keep ``token_hash`` only.
    """

    id: str
    entries: tuple[BookingEntry, ...]
    total_price: int
    token_hash: str
    contact: ContactInfo
    created_at: datetime
    updated_at: datetime
    paid: bool = False
    whole_property: bool = False
    bulk_roster: GuestRoster | None = None
    capability_token: str | None = None

    @property
    def roster(self) -> GuestRoster:
        """Aggregate roster across all rooms."""
        if self.bulk_roster is not None:
            return self.bulk_roster
        merged = GuestRoster()
        for entry in self.entries:
            merged = merged.merged(entry.roster)
        return merged

    @property
    def room_ids(self) -> list[str]:
        return [e.room_id for e in self.entries]

    def entry_for(self, room_id: str) -> BookingEntry | None:
        for entry in self.entries:
            if entry.room_id == room_id:
                return entry
        return None


@dataclass(frozen=True)
class BlockedRange:
    """Administrative block. ``room_id=None`` blocks every room."""

    id: str
    room_id: str | None
    start: date
    end: date
    reason: str = ""

    def applies_to(self, room_id: str) -> bool:
        return self.room_id is None or self.room_id == room_id

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class SeasonPeriod:
    """Restricted holiday period with its access codes (inclusive dates)."""

    id: str
    start: date
    end: date
    codes: frozenset[str] = frozenset()
    year: int | None = None
    name: str = ""

    @property
    def applicable_year(self) -> int:
        return self.year if self.year is not None else self.start.year

    def intersects(self, start: date, end: date) -> bool:
        # Inclusive of the checkout day
        return start <= self.end and end >= self.start

    def accepts(self, code: str | None) -> bool:
        return bool(code) and code.strip() in self.codes
