"""Pricing engine - per-room and whole-property prices.

Per room and night the charge is one room base fee plus each guest's own
surcharge at that guest's tier. Toddlers are never charged. The base fee
is taken once per room from a single tier chosen by ``Policy.base_fee_tier``:

- ``"cheapest"``: the lowest base among the tiers of the paying guests
- a tier name: that tier's base whenever one paying guest carries it,
  otherwise the cheapest present tier

A room without paying guests uses ``Policy.default_tier``.

Whole-property (bulk) pricing replaces room base fees with one flat fee
per night plus per-guest bulk rates, independent of room count.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping

from lodgekeeper.domain.models import (
    ADULT,
    CHILD,
    TODDLER,
    BulkRate,
    GuestRoster,
    TierRate,
    nights_between,
)
from lodgekeeper.domain.results import QuoteRejected, validation_error
from lodgekeeper.domain.validation import validate_roster
from lodgekeeper.infra.settings import Policy, PropertyCatalog


def base_fee_tier(
    roster: GuestRoster,
    rates: Mapping[str, TierRate],
    *,
    policy_tier: str = "cheapest",
    default_tier: str = "external",
) -> str:
    """Return the tier whose base fee a room with this roster pays."""
    paying = {g.tier for g in roster if g.category != TODDLER}
    if not paying:
        return default_tier
    for tier in paying:
        if tier not in rates:
            raise QuoteRejected(validation_error(f"no rates for tier {tier!r}"))
    if policy_tier != "cheapest" and policy_tier in paying:
        return policy_tier
    # Sorted first so equal bases resolve the same way on every call
    return min(sorted(paying), key=lambda t: rates[t].base)


def nightly_rate(
    roster: GuestRoster,
    rates: Mapping[str, TierRate],
    *,
    policy_tier: str = "cheapest",
    default_tier: str = "external",
) -> int:
    """Charge for one room and one night."""
    tier = base_fee_tier(
        roster, rates, policy_tier=policy_tier, default_tier=default_tier
    )
    if tier not in rates:
        raise QuoteRejected(validation_error(f"no rates for tier {tier!r}"))
    total = rates[tier].base
    for guest in roster:
        if guest.category == ADULT:
            total += rates[guest.tier].adult
        elif guest.category == CHILD:
            total += rates[guest.tier].child
        elif guest.category != TODDLER:
            raise QuoteRejected(
                validation_error(f"unknown guest category {guest.category!r}")
            )
    return total


class PricingEngine:
    """Computes integer prices in the property currency."""

    def __init__(self, policy: Policy, catalog: PropertyCatalog) -> None:
        self.policy = policy
        self.catalog = catalog

    def price(
        self,
        nights: int,
        roster: GuestRoster,
        rates: Mapping[str, TierRate],
    ) -> int:
        """Price of one room for ``nights`` nights.

        Raises:
            QuoteRejected: On a non-positive night count or unknown tier.
        """
        if nights < 1:
            raise QuoteRejected(validation_error("stay must be at least one night"))
        return nights * nightly_rate(
            roster,
            rates,
            policy_tier=self.policy.base_fee_tier,
            default_tier=self.policy.default_tier,
        )

    def price_bulk(
        self,
        nights: int,
        roster: GuestRoster,
        base_fee: int | None = None,
        rates: Mapping[str, BulkRate] | None = None,
    ) -> int:
        """Price of a whole-property booking.

        The bed-occupying guest count must lie within the policy floor and
        ceiling; out-of-range counts are rejected, never clamped.

        Raises:
            QuoteRejected: On an out-of-range guest count, a non-positive
                night count or a tier without bulk rates.
        """
        if base_fee is None:
            base_fee = self.policy.bulk_base_fee
        if rates is None:
            rates = self.catalog.bulk_rates

        if nights < 1:
            raise QuoteRejected(validation_error("stay must be at least one night"))
        floor, ceiling = self.policy.bulk_min_guests, self.policy.bulk_max_guests
        if not floor <= roster.beds <= ceiling:
            raise QuoteRejected(
                validation_error(
                    f"bulk guest count {roster.beds} outside {floor}..{ceiling}"
                )
            )

        nightly = base_fee
        for guest in roster:
            if guest.category == TODDLER:
                continue
            rate = rates.get(guest.tier)
            if rate is None:
                raise QuoteRejected(
                    validation_error(f"no bulk rates for tier {guest.tier!r}")
                )
            if guest.category == ADULT:
                nightly += rate.adult
            elif guest.category == CHILD:
                nightly += rate.child
            else:
                raise QuoteRejected(
                    validation_error(f"unknown guest category {guest.category!r}")
                )
        return nightly * nights

    def quote_rooms(
        self,
        stays: list[tuple[str, date, date, GuestRoster]],
    ) -> dict:
        """Preview prices for a selection of (room_id, start, end, roster).

        Each room may have its own date range. Nothing is held.

        Returns:
            {"rooms": [{"room_id", "nights", "price"}], "total", "currency"}

        Raises:
            QuoteRejected: If the selection is empty, names an unknown or
                repeated room, or any room cannot be priced.
        """
        if not stays:
            raise QuoteRejected(validation_error("no rooms selected"))

        rooms = []
        seen: set[str] = set()
        for room_id, start, end, roster in stays:
            room = self.catalog.room(room_id)
            if room is None:
                raise QuoteRejected(validation_error("unknown room", room_id))
            if room_id in seen:
                raise QuoteRejected(validation_error("room selected twice", room_id))
            seen.add(room_id)
            reject = validate_roster(room, roster)
            if reject is not None:
                raise QuoteRejected(reject)
            nights = nights_between(start, end)
            rooms.append(
                {
                    "room_id": room_id,
                    "nights": nights,
                    "price": self.price(nights, roster, room.rates),
                }
            )

        return {
            "rooms": rooms,
            "total": sum(r["price"] for r in rooms),
            "currency": self.policy.currency,
        }

    def quote_bulk(self, start: date, end: date, roster: GuestRoster) -> dict:
        """Preview the price of booking the whole property."""
        nights = nights_between(start, end)
        return {
            "nights": nights,
            "total": self.price_bulk(nights, roster),
            "currency": self.policy.currency,
        }
