"""Worker routes for hold task handling."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from lodgekeeper.api.dependencies import Core, get_core
from lodgekeeper.api.task_auth import verify_task_auth
from lodgekeeper.domain.expire_hold import expire_hold, sweep_expired_holds
from lodgekeeper.observability.correlation import get_correlation_id
from lodgekeeper.observability.logging import get_logger
from lodgekeeper.observability.redaction import safe_log_context

router = APIRouter(prefix="/tasks/holds", tags=["tasks"])

logger = get_logger(__name__)


def _require_task_auth(request: Request) -> None:
    if not verify_task_auth(request):
        logger.warning(
            "task auth failed",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/expire")
async def handle_expire(request: Request, core: Core = Depends(get_core)) -> JSONResponse:
    """Handle hold expiration task.

    - If hold not found: return 200 "noop"
    - If hold not expired yet: return 200 "not_expired_yet"
    - If expired: return 200 "expired"

    Expected payload:
    - task_id: Unique task identifier (required)
    - hold_id: Hold identifier (required)
    """
    correlation_id = get_correlation_id()
    _require_task_auth(request)

    try:
        payload: dict[str, Any] = await request.json()
    except ValueError:
        logger.warning(
            "invalid json body",
            extra={"extra_fields": safe_log_context(correlationId=correlation_id)},
        )
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": "invalid json"},
        )

    task_id = payload.get("task_id", "") if isinstance(payload, dict) else ""
    hold_id = payload.get("hold_id", "") if isinstance(payload, dict) else ""

    if not task_id or not hold_id:
        logger.warning(
            "missing required fields",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id,
                    has_task_id=bool(task_id),
                    has_hold_id=bool(hold_id),
                )
            },
        )
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": "missing required fields"},
        )

    logger.info(
        "expire-hold task received",
        extra={
            "extra_fields": safe_log_context(
                correlationId=correlation_id,
                task_id=task_id,
                hold_id=hold_id,
            )
        },
    )

    result = expire_hold(
        hold_id=hold_id,
        store=core.store,
        clock=core.clock,
        task_id=task_id,
    )

    logger.info(
        "expire-hold task completed",
        extra={
            "extra_fields": safe_log_context(
                correlationId=correlation_id,
                status=result.get("status"),
            )
        },
    )
    return JSONResponse(status_code=200, content={"ok": True, **result})


@router.post("/sweep")
async def handle_sweep(request: Request, core: Core = Depends(get_core)) -> JSONResponse:
    """Delete every expired hold (periodic housekeeping)."""
    _require_task_auth(request)
    result = sweep_expired_holds(store=core.store, clock=core.clock)
    return JSONResponse(status_code=200, content={"ok": True, **result})
