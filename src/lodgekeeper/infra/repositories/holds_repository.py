"""Holds repository - persistence for provisional room holds.

Uses raw SQL with psycopg2 (no ORM).
Expired rows are returned as-is; callers apply lazy expiry.
"""

import json
from datetime import date, datetime

from psycopg2.extensions import cursor as PgCursor

from lodgekeeper.domain.models import GuestRoster, Hold

_COLUMNS = """
    id, session_id, room_id, start_date, end_date, roster,
    created_at, expires_at, quoted_price, bulk_group
"""


def _row_to_hold(row: tuple) -> Hold:
    roster = row[5] if isinstance(row[5], list) else json.loads(row[5] or "[]")
    return Hold(
        id=row[0],
        session_id=row[1],
        room_id=row[2],
        start=row[3],
        end=row[4],
        roster=GuestRoster.from_list(roster),
        created_at=row[6],
        expires_at=row[7],
        quoted_price=row[8],
        bulk_group=row[9],
    )


def insert_hold(cur: PgCursor, hold: Hold) -> None:
    """Insert a hold.

    Args:
        cur: Database cursor (within transaction).
        hold: Hold to persist.
    """
    cur.execute(
        """
        INSERT INTO holds (
            id, session_id, room_id, start_date, end_date, roster,
            created_at, expires_at, quoted_price, bulk_group
        )
        VALUES (%s, %s, %s, %s, %s, %s::jsonb, %s, %s, %s, %s)
        """,
        (
            hold.id,
            hold.session_id,
            hold.room_id,
            hold.start,
            hold.end,
            json.dumps(hold.roster.to_list()),
            hold.created_at,
            hold.expires_at,
            hold.quoted_price,
            hold.bulk_group,
        ),
    )


def get_hold(cur: PgCursor, hold_id: str) -> Hold | None:
    """Retrieve a hold by ID, or None if not found."""
    cur.execute(f"SELECT {_COLUMNS} FROM holds WHERE id = %s", (hold_id,))
    row = cur.fetchone()
    return _row_to_hold(row) if row is not None else None


def list_holds_for_room(
    cur: PgCursor,
    *,
    room_id: str,
    start: date,
    end: date,
) -> list[Hold]:
    """List holds on a room touching the closed range [start, end]."""
    cur.execute(
        f"""
        SELECT {_COLUMNS}
        FROM holds
        WHERE room_id = %s
          AND start_date <= %s
          AND end_date >= %s
        ORDER BY start_date
        """,
        (room_id, end, start),
    )
    return [_row_to_hold(row) for row in cur.fetchall()]


def list_session_holds(cur: PgCursor, session_id: str) -> list[Hold]:
    cur.execute(
        f"""
        SELECT {_COLUMNS}
        FROM holds
        WHERE session_id = %s
        ORDER BY created_at, room_id
        """,
        (session_id,),
    )
    return [_row_to_hold(row) for row in cur.fetchall()]


def delete_hold(cur: PgCursor, hold_id: str) -> bool:
    """Delete a hold. Returns True if a row was removed."""
    cur.execute("DELETE FROM holds WHERE id = %s", (hold_id,))
    return cur.rowcount > 0


def delete_expired_holds(cur: PgCursor, now: datetime) -> int:
    """Delete every hold with expires_at <= now. Returns rows removed."""
    cur.execute("DELETE FROM holds WHERE expires_at <= %s", (now,))
    return cur.rowcount
