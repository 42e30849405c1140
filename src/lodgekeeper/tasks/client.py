"""Deferred work for the worker role, idempotent by task id.

TASKS_BACKEND picks where tasks go:
- inline (default): kept in memory on the client; nothing is sent. The
  periodic sweep and lazy expiry cover the work.
- http: POSTed to the worker (see ``tasks.http_backend``).
"""

import os
from dataclasses import dataclass, field
from datetime import datetime

from lodgekeeper.observability.correlation import get_correlation_id

TASKS_BACKEND = os.environ.get("TASKS_BACKEND", "inline")


@dataclass(frozen=True)
class ScheduledTask:
    task_id: str
    url_path: str
    payload: dict = field(default_factory=dict)
    correlation_id: str | None = None
    schedule_time: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        return self.schedule_time is None or self.schedule_time <= now


class TasksClient:
    """Enqueues worker tasks; a task id already seen is a no-op."""

    def __init__(self, backend: str | None = None) -> None:
        self._backend = backend or TASKS_BACKEND
        self._seen: set[str] = set()
        self._tasks: list[ScheduledTask] = []

    def enqueue(
        self,
        task_id: str,
        url_path: str,
        payload: dict,
        *,
        schedule_time: datetime | None = None,
    ) -> bool:
        """Enqueue a task for the worker endpoint ``url_path``.

        The payload must be free of contact details. The current
        correlation id travels with the task.

        Returns:
            True if enqueued, False if ``task_id`` was seen before or the
            http backend could not deliver it.

        Raises:
            ValueError: If TASKS_BACKEND is unknown.
        """
        if self._backend not in ("inline", "http"):
            raise ValueError(f"Unknown TASKS_BACKEND: {self._backend}")
        if task_id in self._seen:
            return False
        self._seen.add(task_id)

        task = ScheduledTask(
            task_id=task_id,
            url_path=url_path,
            payload=payload,
            correlation_id=get_correlation_id() or None,
            schedule_time=schedule_time,
        )
        if self._backend == "http":
            from lodgekeeper.tasks.http_backend import send_task

            return send_task(task)

        self._tasks.append(task)
        return True

    def seen(self, task_id: str) -> bool:
        return task_id in self._seen

    def scheduled(self) -> list[ScheduledTask]:
        """Tasks held by the inline backend, in enqueue order."""
        return list(self._tasks)

    def due(self, now: datetime) -> list[ScheduledTask]:
        return [t for t in self._tasks if t.is_due(now)]

    def reset(self) -> None:
        self._seen.clear()
        self._tasks.clear()
