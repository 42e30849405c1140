"""Correlation id carried through a request and the tasks it enqueues.

The public api accepts a caller-supplied ``X-Correlation-ID`` only when it
looks like an id; anything else (too long, odd characters) is replaced by
a fresh one.
"""

import re
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

_VALID_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def generate_correlation_id() -> str:
    return uuid.uuid4().hex


def accept_correlation_id(incoming: str | None) -> str:
    """Return ``incoming`` if it is a usable id, else a new one."""
    if incoming and _VALID_ID.fullmatch(incoming):
        return incoming
    return generate_correlation_id()


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    correlation_id_var.reset(token)


@contextmanager
def correlation_scope(incoming: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block."""
    cid = accept_correlation_id(incoming)
    token = set_correlation_id(cid)
    try:
        yield cid
    finally:
        reset_correlation_id(token)
