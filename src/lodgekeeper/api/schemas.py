"""Request models and response helpers shared by the public routes."""

from __future__ import annotations

from datetime import date
from typing import Literal

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from lodgekeeper.domain.models import (
    BookingRecord,
    ContactInfo,
    Guest,
    GuestRoster,
    Hold,
)
from lodgekeeper.domain.results import ErrorKind, Reject

# ── Schemas ───────────────────────────────────────────────────────────────────


class GuestIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: Literal["adult", "child", "toddler"]
    tier: str
    name: str | None = Field(default=None, max_length=120)


class RoomStayIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_id: str
    start: date
    end: date
    guests: list[GuestIn]


class StayIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: date
    end: date
    guests: list[GuestIn]


class ContactIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    email: str = Field(max_length=254)
    phone: str = Field(default="", max_length=40)
    address: str = Field(default="", max_length=500)
    company: str = Field(default="", max_length=200)
    notes: str = Field(default="", max_length=2000)

    def to_contact(self) -> ContactInfo:
        return ContactInfo(**self.model_dump())


def to_roster(guests: list[GuestIn]) -> GuestRoster:
    return GuestRoster(tuple(Guest(g.category, g.tier, g.name) for g in guests))


# ── Serializers ───────────────────────────────────────────────────────────────


def roster_to_dict(roster: GuestRoster) -> dict:
    return {
        "adults": roster.adults,
        "children": roster.children,
        "toddlers": roster.toddlers,
        "guests": roster.to_list(),
    }


def hold_to_dict(hold: Hold) -> dict:
    return {
        "id": hold.id,
        "room_id": hold.room_id,
        "start": hold.start.isoformat(),
        "end": hold.end.isoformat(),
        "nights": hold.nights,
        "guests": roster_to_dict(hold.roster),
        "quoted_price": hold.quoted_price,
        "bulk_group": hold.bulk_group,
        "expires_at": hold.expires_at.isoformat(),
    }


def booking_to_dict(record: BookingRecord, currency: str) -> dict:
    return {
        "id": record.id,
        "rooms": [
            {
                "room_id": e.room_id,
                "start": e.start.isoformat(),
                "end": e.end.isoformat(),
                "nights": e.nights,
                "guests": roster_to_dict(e.roster),
            }
            for e in record.entries
        ],
        "guests": roster_to_dict(record.roster),
        "total_price": record.total_price,
        "currency": currency,
        "paid": record.paid,
        "whole_property": record.whole_property,
        "contact": {
            "name": record.contact.name,
            "email": record.contact.email,
            "phone": record.contact.phone,
            "address": record.contact.address,
            "company": record.contact.company,
            "notes": record.contact.notes,
        },
        "created_at": record.created_at.isoformat(),
        "updated_at": record.updated_at.isoformat(),
    }


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.CONFLICT: 409,
    ErrorKind.CONSISTENCY: 409,
    ErrorKind.SEASON: 403,
}


def reject_response(reject: Reject) -> JSONResponse:
    """Map a Reject to its HTTP status and JSON body."""
    return JSONResponse(
        status_code=_STATUS_BY_KIND[reject.kind], content=reject.to_dict()
    )


def not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"ok": False, "error": "not found"})
