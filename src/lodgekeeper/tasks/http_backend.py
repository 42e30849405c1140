"""HTTP delivery of worker tasks.

Used where the public api and the worker run as separate processes. The
worker authenticates calls by the shared ``X-Internal-Task-Secret``.
Delayed tasks are not delivered: hold expiry is picked up by the periodic
sweep and by lazy expiry on read.
"""

import os

import requests

from lodgekeeper.observability.correlation import CORRELATION_ID_HEADER
from lodgekeeper.observability.logging import get_logger
from lodgekeeper.tasks.client import ScheduledTask

logger = get_logger(__name__)

WORKER_BASE_URL = os.environ.get("WORKER_BASE_URL", "http://worker:8000")
INTERNAL_TASK_SECRET = os.environ.get("INTERNAL_TASK_SECRET", "")
HTTP_TIMEOUT = int(os.environ.get("TASKS_HTTP_TIMEOUT", "30"))


def send_task(task: ScheduledTask) -> bool:
    """POST ``task`` to the worker.

    Returns:
        True on a 2xx answer or when the task is delayed and skipped,
        False when delivery failed.
    """
    if task.schedule_time is not None:
        logger.info(
            "delayed task left to sweep",
            extra={"extra_fields": {"task_id": task.task_id}},
        )
        return True

    url = f"{WORKER_BASE_URL}{task.url_path}"
    headers = {"X-Task-Id": task.task_id}
    if task.correlation_id:
        headers[CORRELATION_ID_HEADER] = task.correlation_id
    if INTERNAL_TASK_SECRET:
        headers["X-Internal-Task-Secret"] = INTERNAL_TASK_SECRET

    try:
        response = requests.post(
            url, json=task.payload, headers=headers, timeout=HTTP_TIMEOUT
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(
            "task delivery failed",
            extra={
                "extra_fields": {
                    "task_id": task.task_id,
                    "url_path": task.url_path,
                    "error": type(e).__name__,
                },
            },
        )
        return False

    logger.info(
        "task delivered",
        extra={"extra_fields": {"task_id": task.task_id, "url_path": task.url_path}},
    )
    return True
