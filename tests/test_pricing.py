"""Tests for the pricing engine."""

from dataclasses import replace
from datetime import date

import pytest

from lodgekeeper.domain.models import ADULT, CHILD, TODDLER, Guest, GuestRoster, TierRate
from lodgekeeper.domain.pricing import PricingEngine, base_fee_tier, nightly_rate
from lodgekeeper.domain.results import QuoteRejected, Reason
from lodgekeeper.infra.settings import DEFAULT_CATALOG, Policy

RATES = {
    "internal": TierRate(base=298, adult=49, child=24),
    "external": TierRate(base=499, adult=99, child=49),
}


@pytest.fixture
def engine():
    return PricingEngine(Policy(), DEFAULT_CATALOG)


class TestRoomPrice:
    def test_internal_tier_example(self, engine):
        roster = GuestRoster.of(adults=2, children=1, tier="internal")

        assert engine.price(2, roster, RATES) == 840

    def test_external_tier_example(self, engine):
        roster = GuestRoster.of(adults=2, tier="external")

        assert engine.price(2, roster, RATES) == 1394

    @pytest.mark.parametrize("toddlers", [1, 2, 5])
    def test_toddlers_never_change_price(self, engine, toddlers):
        without = GuestRoster.of(adults=2, children=1, tier="internal")
        with_toddlers = GuestRoster.of(
            adults=2, children=1, toddlers=toddlers, tier="internal"
        )

        assert engine.price(3, with_toddlers, RATES) == engine.price(3, without, RATES)

    def test_price_scales_with_nights(self, engine):
        roster = GuestRoster.of(adults=1, tier="external")

        assert engine.price(5, roster, RATES) == 5 * engine.price(1, roster, RATES)

    def test_zero_nights_rejected(self, engine):
        with pytest.raises(QuoteRejected) as exc_info:
            engine.price(0, GuestRoster.of(adults=1), RATES)

        assert exc_info.value.reject.reason is Reason.VALIDATION

    def test_unknown_tier_rejected(self, engine):
        roster = GuestRoster((Guest(ADULT, "vip"),))

        with pytest.raises(QuoteRejected):
            engine.price(1, roster, RATES)


class TestMixedTiers:
    """Each guest pays its own surcharge; the base fee is charged once."""

    def _mixed(self):
        return GuestRoster((Guest(ADULT, "internal"), Guest(ADULT, "external")))

    def test_cheapest_base_by_default(self, engine):
        # 298 (internal base) + 49 + 99
        assert engine.price(1, self._mixed(), RATES) == 446

    def test_designated_tier_supplies_base(self):
        engine = PricingEngine(Policy(base_fee_tier="external"), DEFAULT_CATALOG)

        # 499 (external base) + 49 + 99
        assert engine.price(1, self._mixed(), RATES) == 647

    def test_designated_tier_absent_falls_back_to_cheapest(self):
        engine = PricingEngine(Policy(base_fee_tier="external"), DEFAULT_CATALOG)
        roster = GuestRoster.of(adults=2, tier="internal")

        assert engine.price(1, roster, RATES) == 298 + 2 * 49

    def test_toddler_tier_ignored_for_base(self):
        roster = GuestRoster((Guest(ADULT, "external"), Guest(TODDLER, "internal")))

        assert base_fee_tier(roster, RATES) == "external"

    def test_empty_room_uses_default_tier(self):
        assert base_fee_tier(GuestRoster(), RATES, default_tier="external") == "external"
        assert nightly_rate(GuestRoster(), RATES, default_tier="internal") == 298

    def test_child_surcharge_per_tier(self):
        roster = GuestRoster((Guest(ADULT, "internal"), Guest(CHILD, "external")))

        assert nightly_rate(roster, RATES) == 298 + 49 + 49


class TestBulkPrice:
    def test_flat_fee_plus_guest_rates(self, engine):
        roster = GuestRoster.of(adults=10, children=4, tier="external")

        # (2000 + 10*250 + 4*50) * 2
        assert engine.price_bulk(2, roster) == 9400

    def test_internal_bulk_rates(self, engine):
        roster = GuestRoster.of(adults=3, children=2, tier="internal")

        assert engine.price_bulk(1, roster) == 2000 + 3 * 100

    def test_explicit_base_fee_and_rates(self, engine):
        roster = GuestRoster.of(adults=2, tier="external")

        assert engine.price_bulk(1, roster, base_fee=100) == 100 + 2 * 250

    def test_toddlers_free_and_not_counted(self, engine):
        roster = GuestRoster.of(adults=26, toddlers=3, tier="external")

        assert engine.price_bulk(1, roster) == 2000 + 26 * 250

    def test_above_ceiling_rejected(self, engine):
        roster = GuestRoster.of(adults=20, children=7)

        with pytest.raises(QuoteRejected) as exc_info:
            engine.price_bulk(1, roster)

        assert exc_info.value.reject.reason is Reason.VALIDATION
        assert "27" in exc_info.value.reject.detail

    def test_unknown_category_rejected(self, engine):
        roster = GuestRoster((Guest(ADULT, "external"), Guest("senior", "external")))

        with pytest.raises(QuoteRejected) as exc_info:
            engine.price_bulk(1, roster)

        assert "senior" in exc_info.value.reject.detail

    def test_below_floor_rejected(self):
        engine = PricingEngine(Policy(bulk_min_guests=10), DEFAULT_CATALOG)

        with pytest.raises(QuoteRejected):
            engine.price_bulk(1, GuestRoster.of(adults=9))

    def test_independent_of_room_count(self, engine):
        small = replace(DEFAULT_CATALOG, rooms=DEFAULT_CATALOG.rooms[:2])
        other = PricingEngine(Policy(), small)
        roster = GuestRoster.of(adults=4)

        assert other.price_bulk(3, roster) == engine.price_bulk(3, roster)


class TestQuotes:
    def test_quote_rooms_with_different_ranges(self, engine):
        result = engine.quote_rooms(
            [
                ("12", date(2025, 11, 1), date(2025, 11, 3), GuestRoster.of(adults=2, tier="external")),
                ("13", date(2025, 11, 2), date(2025, 11, 3), GuestRoster.of(adults=1, tier="internal")),
            ]
        )

        assert result["rooms"] == [
            {"room_id": "12", "nights": 2, "price": 1394},
            {"room_id": "13", "nights": 1, "price": 347},
        ]
        assert result["total"] == 1741
        assert result["currency"] == "CZK"

    def test_quote_unknown_room(self, engine):
        with pytest.raises(QuoteRejected) as exc_info:
            engine.quote_rooms(
                [("99", date(2025, 11, 1), date(2025, 11, 2), GuestRoster.of(adults=1))]
            )

        assert exc_info.value.reject.room_id == "99"

    def test_quote_over_capacity(self, engine):
        with pytest.raises(QuoteRejected) as exc_info:
            engine.quote_rooms(
                [("12", date(2025, 11, 1), date(2025, 11, 2), GuestRoster.of(adults=3))]
            )

        assert exc_info.value.reject.reason is Reason.CAPACITY_EXCEEDED

    def test_quote_empty_selection(self, engine):
        with pytest.raises(QuoteRejected):
            engine.quote_rooms([])

    def test_quote_bulk(self, engine):
        result = engine.quote_bulk(
            date(2025, 11, 1), date(2025, 11, 2), GuestRoster.of(adults=2)
        )

        assert result == {"nights": 1, "total": 2500, "currency": "CZK"}
