"""Property configuration: policy constants and the room/rate catalog.

Provides functions to load the policy from environment variables and the
catalog from a JSON file, falling back to built-in defaults.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from lodgekeeper.domain.models import BulkRate, Room, TierRate

INTERNAL = "internal"
EXTERNAL = "external"


@dataclass(frozen=True)
class Policy:
    """Policy constants consumed by the reservation core.

    Attributes:
        hold_ttl_minutes: Lifetime of a hold.
        bulk_min_guests: Minimum bed-occupying guests for a bulk booking.
        bulk_max_guests: Maximum bed-occupying guests for a bulk booking.
        bulk_base_fee: Flat per-night fee of a bulk booking.
        cutoff_month: Month of the yearly season cutoff.
        cutoff_day: Day of the yearly season cutoff.
        base_fee_tier: "cheapest" or a tier name that supplies a room's base
                       fee whenever one of the room's guests carries it.
        default_tier: Tier whose base fee applies to a room without guests.
        season_room_limit: Max rooms per booking for the limited tier
                           inside a season period before the cutoff.
        season_limited_tier: Tier subject to season_room_limit.
        max_advance_days: How far ahead a stay may start.
        timezone: Property timezone (defines "today").
        currency: Currency of all amounts.
    """

    hold_ttl_minutes: int = 15
    bulk_min_guests: int = 1
    bulk_max_guests: int = 26
    bulk_base_fee: int = 2000
    cutoff_month: int = 10
    cutoff_day: int = 1
    base_fee_tier: str = "cheapest"
    default_tier: str = EXTERNAL
    season_room_limit: int = 2
    season_limited_tier: str = INTERNAL
    max_advance_days: int = 730
    timezone: str = "Europe/Prague"
    currency: str = "CZK"


@dataclass(frozen=True)
class PropertyCatalog:
    """Static room catalog and bulk rate table."""

    rooms: tuple[Room, ...]
    bulk_rates: Mapping[str, BulkRate] = field(default_factory=dict)

    def room(self, room_id: str) -> Room | None:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    @property
    def room_ids(self) -> list[str]:
        return [r.id for r in self.rooms]

    @property
    def total_capacity(self) -> int:
        return sum(r.capacity for r in self.rooms)


_DEFAULT_RATES = {
    INTERNAL: TierRate(base=298, adult=49, child=24),
    EXTERNAL: TierRate(base=499, adult=99, child=49),
}

_DEFAULT_ROOMS = (
    ("12", 2),
    ("13", 3),
    ("14", 4),
    ("22", 2),
    ("23", 3),
    ("24", 4),
    ("42", 2),
    ("43", 2),
    ("44", 4),
)

DEFAULT_CATALOG = PropertyCatalog(
    rooms=tuple(
        Room(id=rid, capacity=beds, rates=_DEFAULT_RATES, name=f"Room {rid}")
        for rid, beds in _DEFAULT_ROOMS
    ),
    bulk_rates={
        INTERNAL: BulkRate(adult=100, child=0),
        EXTERNAL: BulkRate(adult=250, child=50),
    },
)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def load_policy() -> Policy:
    """Load policy constants, environment variables overriding defaults."""
    defaults = Policy()
    return Policy(
        hold_ttl_minutes=_env_int("HOLD_TTL_MINUTES", defaults.hold_ttl_minutes),
        bulk_min_guests=_env_int("BULK_MIN_GUESTS", defaults.bulk_min_guests),
        bulk_max_guests=_env_int("BULK_MAX_GUESTS", defaults.bulk_max_guests),
        bulk_base_fee=_env_int("BULK_BASE_FEE", defaults.bulk_base_fee),
        cutoff_month=_env_int("SEASON_CUTOFF_MONTH", defaults.cutoff_month),
        cutoff_day=_env_int("SEASON_CUTOFF_DAY", defaults.cutoff_day),
        base_fee_tier=os.environ.get("BASE_FEE_TIER") or defaults.base_fee_tier,
        default_tier=os.environ.get("DEFAULT_TIER") or defaults.default_tier,
        season_room_limit=_env_int("SEASON_ROOM_LIMIT", defaults.season_room_limit),
        season_limited_tier=(
            os.environ.get("SEASON_LIMITED_TIER") or defaults.season_limited_tier
        ),
        max_advance_days=_env_int("MAX_ADVANCE_DAYS", defaults.max_advance_days),
        timezone=os.environ.get("PROPERTY_TIMEZONE") or defaults.timezone,
        currency=os.environ.get("CURRENCY") or defaults.currency,
    )


def load_catalog(path: str | os.PathLike | None = None) -> PropertyCatalog:
    """Load the room catalog.

    Priority:
    1. Explicit path argument
    2. PROPERTY_CATALOG_PATH environment variable
    3. Built-in default catalog

    Raises:
        ValueError: If the file does not describe at least one room.
    """
    if path is None:
        path = os.environ.get("PROPERTY_CATALOG_PATH") or None
    if path is None:
        return DEFAULT_CATALOG
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_catalog(raw)


def parse_catalog(raw: dict[str, Any]) -> PropertyCatalog:
    """Build a catalog from its JSON form.

    Expected shape::

        {
          "rates": {"internal": {"base": 298, "adult": 49, "child": 24}, ...},
          "rooms": [{"id": "12", "capacity": 2, "rates": {...optional}}],
          "bulk_rates": {"internal": {"adult": 100, "child": 0}, ...}
        }
    """
    shared = _parse_rates(raw.get("rates", {}))
    rooms = []
    for item in raw.get("rooms", []):
        rates = _parse_rates(item["rates"]) if item.get("rates") else shared
        if not rates:
            raise ValueError(f"room {item.get('id')} has no rates")
        rooms.append(
            Room(
                id=str(item["id"]),
                capacity=int(item["capacity"]),
                rates=rates,
                name=item.get("name", ""),
            )
        )
    if not rooms:
        raise ValueError("catalog must define at least one room")

    bulk_rates = {
        tier: BulkRate(adult=int(r["adult"]), child=int(r["child"]))
        for tier, r in raw.get("bulk_rates", {}).items()
    }
    return PropertyCatalog(rooms=tuple(rooms), bulk_rates=bulk_rates)


def _parse_rates(raw: dict[str, Any]) -> dict[str, TierRate]:
    return {
        tier: TierRate(base=int(r["base"]), adult=int(r["adult"]), child=int(r["child"]))
        for tier, r in raw.items()
    }
