"""Redaction for log context built from request or booking data.

Contact details, capability tokens and season access codes never reach
the logs. Guest rosters are reduced to head counts so guest names stay
out as well.
"""

import re
from datetime import date
from enum import Enum
from typing import Any

from lodgekeeper.domain.models import GuestRoster

_PHONE_PATTERN = re.compile(r"\+?\d[\d\s\-()]{8,}\d")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
# Capability tokens: 30 lowercase alphanumerics
_TOKEN_PATTERN = re.compile(r"\b[a-z0-9]{30}\b")

# Keys whose values are secrets whatever their shape
_SECRET_KEYS = {"token", "capability_token", "access_code", "code"}

_REDACTED = "[REDACTED]"


def redact_string(value: str) -> str:
    """Mask capability tokens, phone numbers and e-mail addresses."""
    for pattern in (_TOKEN_PATTERN, _PHONE_PATTERN, _EMAIL_PATTERN):
        value = pattern.sub(_REDACTED, value)
    return value


def redact_value(value: Any) -> str:
    """String form of ``value`` that is safe to log."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, GuestRoster):
        return (
            f"roster(adults={value.adults}, children={value.children}, "
            f"toddlers={value.toddlers})"
        )
    if isinstance(value, dict):
        # Keys only
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Redacted ``extra_fields`` for a log call."""
    return {
        k: _REDACTED if k in _SECRET_KEYS and v else redact_value(v)
        for k, v in kwargs.items()
    }
