"""Season check and price quote endpoints.

POST /season-check   → allow / require-code / reject for a stay
POST /quote          → price preview for rooms or the whole property
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from lodgekeeper.api.dependencies import Core, get_core
from lodgekeeper.api.schemas import RoomStayIn, StayIn, reject_response, to_roster
from lodgekeeper.domain.models import RequestType
from lodgekeeper.domain.results import QuoteRejected, validation_error

router = APIRouter(tags=["season"])


class SeasonCheckRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: date
    end: date
    request_type: RequestType = RequestType.SINGLE_ROOM
    code: str | None = Field(default=None, max_length=64)


class QuoteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rooms: list[RoomStayIn] = Field(default_factory=list)
    whole_property: StayIn | None = None


@router.post("/season-check")
def season_check(body: SeasonCheckRequest, core: Core = Depends(get_core)) -> JSONResponse:
    """Evaluate the season gate for a stay. Always 200; the decision is in the body."""
    if body.start >= body.end:
        return reject_response(validation_error("end must be after start"))
    decision = core.season.evaluate(body.start, body.end, body.request_type, body.code)
    return JSONResponse(status_code=200, content={"ok": True, **decision.to_dict()})


@router.post("/quote")
def quote(body: QuoteRequest, core: Core = Depends(get_core)) -> JSONResponse:
    """Price a selection without holding anything."""
    if bool(body.rooms) == (body.whole_property is not None):
        return reject_response(
            validation_error("give either rooms or whole_property")
        )
    try:
        if body.whole_property is not None:
            stay = body.whole_property
            result = core.pricing.quote_bulk(stay.start, stay.end, to_roster(stay.guests))
        else:
            result = core.pricing.quote_rooms(
                [(r.room_id, r.start, r.end, to_roster(r.guests)) for r in body.rooms]
            )
    except QuoteRejected as e:
        return reject_response(e.reject)
    return JSONResponse(status_code=200, content={"ok": True, **result})
