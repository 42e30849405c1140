"""Input validation shared by holds, finalize and self-service edits.

Each check returns a ``Reject`` describing the first problem, or None.
"""

from __future__ import annotations

import re
from datetime import date, timedelta

from lodgekeeper.domain.models import GUEST_CATEGORIES, ContactInfo, GuestRoster, Room
from lodgekeeper.domain.results import Reject, capacity_exceeded, validation_error

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_PATTERN = re.compile(r"^\+?\d{9,15}$")


def validate_stay(
    start: date,
    end: date,
    *,
    today: date,
    max_advance_days: int,
    room_id: str | None = None,
) -> Reject | None:
    """Check a stay range: at least one night, not in the past, not too far ahead."""
    if start >= end:
        return validation_error("end must be after start", room_id)
    if start < today:
        return validation_error("start is in the past", room_id)
    if start > today + timedelta(days=max_advance_days):
        return validation_error("start is too far in the future", room_id)
    return None


def validate_roster(room: Room, roster: GuestRoster) -> Reject | None:
    """Check a single room's roster against the room's capacity and tiers."""
    for guest in roster:
        if guest.category not in GUEST_CATEGORIES:
            return validation_error(f"unknown guest category {guest.category!r}", room.id)
        if guest.tier not in room.rates:
            return validation_error(f"unknown guest tier {guest.tier!r}", room.id)
    if roster.adults < 1:
        return validation_error("at least one adult is required", room.id)
    if roster.beds > room.capacity:
        return capacity_exceeded(
            room.id, f"{roster.beds} guests exceed capacity {room.capacity}"
        )
    return None


def validate_contact(contact: ContactInfo) -> Reject | None:
    if not contact.name.strip():
        return validation_error("contact name is required")
    if not _EMAIL_PATTERN.match(contact.email.strip()):
        return validation_error("invalid email format")
    if contact.phone:
        digits = re.sub(r"[\s\-()]", "", contact.phone)
        if not _PHONE_PATTERN.match(digits):
            return validation_error("invalid phone format")
    return None
