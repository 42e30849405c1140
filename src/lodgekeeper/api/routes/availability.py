"""Availability endpoint.

GET /availability?date_from=...&date_to=...[&room_id=...]
    → per-room, per-date status map as seen by the calling session
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse

from lodgekeeper.api.dependencies import Core, get_core
from lodgekeeper.api.schemas import reject_response
from lodgekeeper.domain.results import validation_error

router = APIRouter(tags=["availability"])

# Widest range one request may ask for
MAX_RANGE_DAYS = 400


@router.get("/availability")
def get_availability(
    date_from: date = Query(...),
    date_to: date = Query(...),
    room_id: str | None = Query(default=None),
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    """Status of each room for each date of [date_from, date_to].

    Statuses: available, booked, blocked, held-self, held-other, boundary.
    """
    if date_to < date_from:
        return reject_response(validation_error("date_to must not be before date_from"))
    if (date_to - date_from).days >= MAX_RANGE_DAYS:
        return reject_response(validation_error("date range too long"))

    if room_id is not None:
        if core.catalog.room(room_id) is None:
            return reject_response(validation_error("unknown room", room_id))
        room_ids = [room_id]
    else:
        room_ids = core.catalog.room_ids

    grid = core.availability.grid(date_from, date_to, session_id, room_ids)
    return JSONResponse(
        status_code=200,
        content={
            "ok": True,
            "rooms": {
                rid: {day.isoformat(): status.value for day, status in days.items()}
                for rid, days in grid.items()
            },
        },
    )
