"""Authentication for worker task endpoints.

Task requests carry the shared INTERNAL_TASK_SECRET in the
X-Internal-Task-Secret header. Fail closed when the secret is unset.
"""

from __future__ import annotations

import hmac
import os

from fastapi import Request

from lodgekeeper.observability.logging import get_logger
from lodgekeeper.observability.redaction import safe_log_context

logger = get_logger(__name__)

TASK_SECRET_HEADER = "X-Internal-Task-Secret"


def verify_task_auth(request: Request) -> bool:
    """Verify the internal task secret.

    Args:
        request: FastAPI request object.

    Returns:
        True if authenticated, False otherwise.
    """
    internal_secret = os.environ.get("INTERNAL_TASK_SECRET", "")
    if not internal_secret:
        logger.error(
            "INTERNAL_TASK_SECRET not configured - fail closed",
            extra={"extra_fields": safe_log_context(reason="missing_secret_env")},
        )
        return False

    request_secret = request.headers.get(TASK_SECRET_HEADER, "")
    if not request_secret:
        logger.warning(
            "task auth failed: missing secret header",
            extra={"extra_fields": safe_log_context(reason="missing_secret_header")},
        )
        return False

    if not hmac.compare_digest(request_secret, internal_secret):
        logger.warning(
            "task auth failed: secret mismatch",
            extra={"extra_fields": safe_log_context(reason="secret_mismatch")},
        )
        return False

    return True
