"""Worker/internal routes (APP_ROLE=worker)."""

from fastapi import APIRouter

from lodgekeeper.api.routes import tasks_holds

router = APIRouter()


@router.get("/tasks/health")
def tasks_health() -> dict:
    """Tasks subsystem health check."""
    return {"status": "ok", "subsystem": "tasks"}


router.include_router(tasks_holds.router)
