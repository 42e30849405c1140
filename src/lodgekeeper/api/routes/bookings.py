"""Booking endpoints.

POST   /bookings/finalize                 → consolidate the session's holds
GET    /bookings/{id}                     → read (X-Capability-Token)
DELETE /bookings/{id}                     → cancel (X-Capability-Token)
PATCH  /bookings/{id}/rooms/{room_id}     → move one room's dates (X-Capability-Token)

An unknown booking and a wrong token both answer 404.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from lodgekeeper.api.dependencies import Core, get_core
from lodgekeeper.api.schemas import (
    ContactIn,
    booking_to_dict,
    not_found,
    reject_response,
)
from lodgekeeper.domain.results import Reject
from lodgekeeper.observability.logging import get_logger
from lodgekeeper.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


class FinalizeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    contact: ContactIn
    access_code: str | None = Field(default=None, max_length=64)


class ChangeDatesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: date
    end: date
    access_code: str | None = Field(default=None, max_length=64)


@router.post("/finalize")
def finalize_booking(
    body: FinalizeRequest,
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    """Turn the session's holds into one booking.

    Returns 201 with the booking and its capability token (shown only
    here), or the reject listing each failing room.
    """
    result = core.consolidator.finalize(
        session_id, body.contact.to_contact(), body.access_code
    )
    if isinstance(result, Reject):
        return reject_response(result)

    return JSONResponse(
        status_code=201,
        content={
            "ok": True,
            "booking": booking_to_dict(result, core.policy.currency),
            "capability_token": result.capability_token,
        },
    )


@router.get("/{booking_id}")
def get_booking(
    booking_id: str = Path(...),
    token: str | None = Header(default=None, alias="X-Capability-Token"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    record = core.bookings.get_booking(booking_id, token)
    if record is None:
        return not_found()
    return JSONResponse(
        status_code=200,
        content={"ok": True, "booking": booking_to_dict(record, core.policy.currency)},
    )


@router.delete("/{booking_id}")
def cancel_booking(
    booking_id: str = Path(...),
    token: str | None = Header(default=None, alias="X-Capability-Token"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    if not core.bookings.cancel_booking(booking_id, token):
        logger.info(
            "booking cancel refused",
            extra={"extra_fields": safe_log_context(booking_id=booking_id, token=token)},
        )
        return not_found()
    return JSONResponse(status_code=200, content={"ok": True, "cancelled": True})


@router.patch("/{booking_id}/rooms/{room_id}")
def change_room_dates(
    body: ChangeDatesRequest,
    booking_id: str = Path(...),
    room_id: str = Path(...),
    token: str | None = Header(default=None, alias="X-Capability-Token"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    result = core.bookings.change_room_dates(
        booking_id, token, room_id, body.start, body.end, body.access_code
    )
    if result is None:
        return not_found()
    if isinstance(result, Reject):
        return reject_response(result)
    return JSONResponse(
        status_code=200,
        content={"ok": True, "booking": booking_to_dict(result, core.policy.currency)},
    )
