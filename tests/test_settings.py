"""Tests for policy and catalog configuration."""

import json

import pytest

from lodgekeeper.infra.settings import (
    DEFAULT_CATALOG,
    Policy,
    load_catalog,
    load_policy,
    parse_catalog,
)

POLICY_ENV = (
    "HOLD_TTL_MINUTES", "BULK_MIN_GUESTS", "BULK_MAX_GUESTS", "BULK_BASE_FEE",
    "SEASON_CUTOFF_MONTH", "SEASON_CUTOFF_DAY", "BASE_FEE_TIER", "DEFAULT_TIER",
    "SEASON_ROOM_LIMIT", "SEASON_LIMITED_TIER", "MAX_ADVANCE_DAYS",
    "PROPERTY_TIMEZONE", "CURRENCY",
)


class TestLoadPolicy:
    def test_defaults(self, monkeypatch):
        for name in POLICY_ENV:
            monkeypatch.delenv(name, raising=False)

        assert load_policy() == Policy()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("HOLD_TTL_MINUTES", "20")
        monkeypatch.setenv("BULK_MAX_GUESTS", "30")
        monkeypatch.setenv("BASE_FEE_TIER", "external")
        monkeypatch.setenv("SEASON_CUTOFF_MONTH", "9")

        policy = load_policy()

        assert policy.hold_ttl_minutes == 20
        assert policy.bulk_max_guests == 30
        assert policy.base_fee_tier == "external"
        assert policy.cutoff_month == 9

    def test_blank_env_uses_default(self, monkeypatch):
        monkeypatch.setenv("HOLD_TTL_MINUTES", "  ")

        assert load_policy().hold_ttl_minutes == 15

    def test_invalid_int_raises(self, monkeypatch):
        monkeypatch.setenv("HOLD_TTL_MINUTES", "soon")

        with pytest.raises(ValueError):
            load_policy()


class TestDefaultCatalog:
    def test_nine_rooms_26_beds(self):
        assert len(DEFAULT_CATALOG.rooms) == 9
        assert DEFAULT_CATALOG.total_capacity == 26

    def test_room_lookup(self):
        assert DEFAULT_CATALOG.room("44").capacity == 4
        assert DEFAULT_CATALOG.room("99") is None

    def test_tier_rates(self):
        rates = DEFAULT_CATALOG.room("12").rates
        assert (rates["internal"].base, rates["internal"].adult, rates["internal"].child) == (298, 49, 24)
        assert (rates["external"].base, rates["external"].adult, rates["external"].child) == (499, 99, 49)


class TestParseCatalog:
    RAW = {
        "rates": {"standard": {"base": 100, "adult": 10, "child": 5}},
        "rooms": [
            {"id": 1, "capacity": 2},
            {"id": "suite", "capacity": 4, "rates": {"vip": {"base": 900, "adult": 0, "child": 0}}},
        ],
        "bulk_rates": {"standard": {"adult": 50, "child": 25}},
    }

    def test_shared_and_room_rates(self):
        catalog = parse_catalog(self.RAW)

        assert catalog.room_ids == ["1", "suite"]
        assert set(catalog.room("1").rates) == {"standard"}
        assert set(catalog.room("suite").rates) == {"vip"}
        assert catalog.bulk_rates["standard"].adult == 50

    def test_no_rooms_rejected(self):
        with pytest.raises(ValueError):
            parse_catalog({"rates": self.RAW["rates"], "rooms": []})

    def test_room_without_rates_rejected(self):
        with pytest.raises(ValueError):
            parse_catalog({"rooms": [{"id": "1", "capacity": 2}]})

    def test_load_from_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(self.RAW), encoding="utf-8")
        monkeypatch.setenv("PROPERTY_CATALOG_PATH", str(path))

        assert load_catalog().room_ids == ["1", "suite"]

    def test_load_defaults_without_path(self, monkeypatch):
        monkeypatch.delenv("PROPERTY_CATALOG_PATH", raising=False)

        assert load_catalog() is DEFAULT_CATALOG
