"""Hold endpoints, scoped to the session in the X-Session-Id header.

GET    /holds            → the session's unexpired holds
POST   /holds            → hold one room
POST   /holds/bulk       → hold the whole property
PATCH  /holds/{id}       → change dates and/or guests of a hold
DELETE /holds/{id}       → release a hold (idempotent)
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from lodgekeeper.api.dependencies import Core, get_core
from lodgekeeper.api.schemas import (
    GuestIn,
    RoomStayIn,
    StayIn,
    hold_to_dict,
    reject_response,
    to_roster,
)
from lodgekeeper.domain.results import Reject

router = APIRouter(prefix="/holds", tags=["holds"])


class UpdateHoldRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: date | None = None
    end: date | None = None
    guests: list[GuestIn] | None = None


@router.get("")
def list_holds(
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> dict:
    holds = core.holds.list_holds(session_id)
    return {"ok": True, "holds": [hold_to_dict(h) for h in holds]}


@router.post("")
def create_hold(
    body: RoomStayIn,
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    """Hold one room for [start, end).

    Returns 201 with the hold, or the reject (409 conflict, 422 validation).
    """
    result = core.holds.create(
        session_id, body.room_id, body.start, body.end, to_roster(body.guests)
    )
    if isinstance(result, Reject):
        return reject_response(result)
    return JSONResponse(status_code=201, content={"ok": True, "hold": hold_to_dict(result)})


@router.post("/bulk")
def create_bulk_hold(
    body: StayIn,
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    """Hold every room for [start, end) as one whole-property selection."""
    result = core.holds.create_bulk(
        session_id, body.start, body.end, to_roster(body.guests)
    )
    if isinstance(result, Reject):
        return reject_response(result)
    return JSONResponse(
        status_code=201,
        content={"ok": True, "holds": [hold_to_dict(h) for h in result]},
    )


@router.patch("/{hold_id}")
def update_hold(
    body: UpdateHoldRequest,
    hold_id: str = Path(...),
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> JSONResponse:
    """Replace a hold; on reject the original hold stays untouched."""
    result = core.holds.update(
        session_id,
        hold_id,
        start=body.start,
        end=body.end,
        roster=to_roster(body.guests) if body.guests is not None else None,
    )
    if isinstance(result, Reject):
        return reject_response(result)
    return JSONResponse(status_code=200, content={"ok": True, "hold": hold_to_dict(result)})


@router.delete("/{hold_id}")
def delete_hold(
    hold_id: str = Path(...),
    session_id: str = Header(..., alias="X-Session-Id"),
    core: Core = Depends(get_core),
) -> dict:
    deleted = core.holds.delete(session_id, hold_id)
    return {"ok": True, "deleted": deleted}
