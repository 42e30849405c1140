"""Wiring of the reservation core for the HTTP layer.

One ``Core`` per process, built lazily from the environment:
STORE_BACKEND selects the store ("memory" by default, or "postgres" using
DATABASE_URL). Tests replace it via ``app.dependency_overrides[get_core]``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from lodgekeeper.domain.availability import AvailabilityIndex
from lodgekeeper.domain.bookings import BookingService
from lodgekeeper.domain.finalize import BookingConsolidator
from lodgekeeper.domain.holds import HoldStore
from lodgekeeper.domain.pricing import PricingEngine
from lodgekeeper.domain.room_conflict import ConflictResolver
from lodgekeeper.domain.season import SeasonGate
from lodgekeeper.infra.settings import Policy, PropertyCatalog, load_catalog, load_policy
from lodgekeeper.infra.store import Store
from lodgekeeper.infra.time import ClockPolicy


@dataclass
class Core:
    store: Store
    clock: ClockPolicy
    policy: Policy
    catalog: PropertyCatalog
    resolver: ConflictResolver
    availability: AvailabilityIndex
    pricing: PricingEngine
    season: SeasonGate
    holds: HoldStore
    consolidator: BookingConsolidator
    bookings: BookingService


def build_core(
    store: Store,
    *,
    clock: ClockPolicy | None = None,
    policy: Policy | None = None,
    catalog: PropertyCatalog | None = None,
) -> Core:
    """Assemble every component around one store handle."""
    if policy is None:
        policy = load_policy()
    if catalog is None:
        catalog = load_catalog()
    if clock is None:
        clock = ClockPolicy(
            tz=policy.timezone,
            cutoff_month=policy.cutoff_month,
            cutoff_day=policy.cutoff_day,
        )

    resolver = ConflictResolver(store, clock)
    pricing = PricingEngine(policy, catalog)
    season = SeasonGate(store, clock, policy)
    return Core(
        store=store,
        clock=clock,
        policy=policy,
        catalog=catalog,
        resolver=resolver,
        availability=AvailabilityIndex(store, clock, catalog),
        pricing=pricing,
        season=season,
        holds=HoldStore(store, clock, policy, catalog, resolver, pricing),
        consolidator=BookingConsolidator(
            store, clock, catalog, resolver, season, pricing
        ),
        bookings=BookingService(
            store, clock, policy, catalog, resolver, season, pricing
        ),
    )


def _store_from_env() -> Store:
    backend = os.environ.get("STORE_BACKEND", "memory")
    if backend == "memory":
        from lodgekeeper.infra.memory_store import MemoryStore

        return MemoryStore()
    if backend == "postgres":
        from lodgekeeper.infra.pg_store import PgStore

        return PgStore()
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")


_core: Core | None = None


def get_core() -> Core:
    """FastAPI dependency returning the process-wide core."""
    global _core
    if _core is None:
        _core = build_core(_store_from_env())
    return _core
