"""Tests for wiring the reservation core."""

import pytest

from lodgekeeper.api import dependencies
from lodgekeeper.api.dependencies import build_core
from lodgekeeper.infra.memory_store import MemoryStore
from lodgekeeper.infra.pg_store import PgStore
from lodgekeeper.infra.time import ClockPolicy


class TestStoreFromEnv:
    def test_memory_by_default(self, monkeypatch):
        monkeypatch.delenv("STORE_BACKEND", raising=False)
        assert isinstance(dependencies._store_from_env(), MemoryStore)

    def test_postgres(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "postgres")
        assert isinstance(dependencies._store_from_env(), PgStore)

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "redis")
        with pytest.raises(ValueError, match="Unknown STORE_BACKEND"):
            dependencies._store_from_env()


class TestBuildCore:
    def test_components_share_store_and_clock(self, store, clock):
        core = build_core(store, clock=clock)

        assert core.holds.store is store
        assert core.consolidator.clock is clock
        assert core.season.clock is clock
        assert core.holds.resolver is core.resolver

    def test_clock_follows_policy(self, store, monkeypatch):
        monkeypatch.setenv("SEASON_CUTOFF_MONTH", "9")

        core = build_core(store)

        assert isinstance(core.clock, ClockPolicy)
        assert core.clock.cutoff_month == 9

    def test_get_core_is_cached(self, monkeypatch):
        monkeypatch.setattr(dependencies, "_core", None)
        monkeypatch.delenv("STORE_BACKEND", raising=False)

        assert dependencies.get_core() is dependencies.get_core()
