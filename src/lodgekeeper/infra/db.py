"""Database access layer using psycopg2.

Provides:
- get_conn(): Get a database connection from DATABASE_URL
- txn(): Context manager for short, safe transactions
- sqlalchemy_url(): DATABASE_URL normalized for Alembic
- lock_rooms(): Transaction-scoped advisory locks, one per room
"""

import os
from contextlib import contextmanager
from typing import Iterable, Iterator

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor

# Namespace for room advisory locks (first key of the two-key form).
ROOM_LOCK_NAMESPACE = 7310


def get_conn(dsn: str | None = None) -> PgConnection:
    """Get a new database connection.

    Args:
        dsn: Explicit DSN. Defaults to the DATABASE_URL environment variable.

    Returns:
        psycopg2 connection object.

    Raises:
        RuntimeError: If no DSN is given and DATABASE_URL is not set.
        psycopg2.Error: On connection failure.
    """
    dsn = dsn or os.environ.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL environment variable not set")
    return psycopg2.connect(dsn)


@contextmanager
def txn(conn: PgConnection | None = None, dsn: str | None = None) -> Iterator[PgCursor]:
    """Context manager for a short, safe transaction.

    If conn is None, creates a new connection that is closed on exit.
    Commits on successful exit, rolls back on exception.

    Args:
        conn: Optional existing connection. If None, creates new one.
        dsn: DSN used when a new connection is created.

    Yields:
        Cursor for executing queries within the transaction.

    Example:
        with txn() as cur:
            cur.execute("DELETE FROM holds WHERE id = %s", (hold_id,))
    """
    owns_conn = conn is None
    if owns_conn:
        conn = get_conn(dsn)

    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if owns_conn:
            conn.close()


def lock_rooms(cur: PgCursor, room_ids: Iterable[str]) -> None:
    """Take transaction-scoped advisory locks for the given rooms.

    Locks are acquired in sorted order so two transactions naming the same
    rooms cannot deadlock. They are released at commit/rollback.

    Args:
        cur: Database cursor (within transaction).
        room_ids: Room identifiers to serialize on.
    """
    for room_id in sorted(set(room_ids)):
        cur.execute(
            "SELECT pg_advisory_xact_lock(%s, hashtext(%s))",
            (ROOM_LOCK_NAMESPACE, room_id),
        )


def sqlalchemy_url(dsn: str | None = None) -> str:
    """DATABASE_URL rewritten for SQLAlchemy's psycopg2 dialect.

    Raises:
        RuntimeError: If no DSN is given and DATABASE_URL is not set.
        ValueError: If the DSN is not a postgres URL.
    """
    url = dsn or os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is required to run migrations")
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg2://" + url[len(prefix):]
    if url.startswith("postgresql+psycopg2://"):
        return url
    raise ValueError("DATABASE_URL must be a postgres:// or postgresql:// URL")
