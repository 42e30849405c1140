"""Bookings repository - persistence for confirmed bookings.

Uses raw SQL with psycopg2 (no ORM). A booking is one ``bookings`` row
plus one ``booking_rooms`` row per room; the ``no_room_overlap`` exclusion
constraint on ``booking_rooms`` rejects double bookings at the database
level even if application checks are bypassed.
"""

import json
from dataclasses import asdict
from datetime import date

from psycopg2.extensions import cursor as PgCursor

from lodgekeeper.domain.models import (
    BookingEntry,
    BookingRecord,
    ContactInfo,
    GuestRoster,
)


def _load_json(value):
    if value is None or isinstance(value, (dict, list)):
        return value
    return json.loads(value)


def _insert_entries(cur: PgCursor, record: BookingRecord) -> None:
    for entry in record.entries:
        cur.execute(
            """
            INSERT INTO booking_rooms (booking_id, room_id, start_date, end_date, roster)
            VALUES (%s, %s, %s, %s, %s::jsonb)
            """,
            (
                record.id,
                entry.room_id,
                entry.start,
                entry.end,
                json.dumps(entry.roster.to_list()),
            ),
        )


def insert_booking(cur: PgCursor, record: BookingRecord) -> None:
    """Insert a booking and its room entries.

    Args:
        cur: Database cursor (within transaction).
        record: Booking to persist. Its capability_token is never stored.

    Raises:
        psycopg2.errors.ExclusionViolation: If a room range overlaps an
            existing booking.
    """
    cur.execute(
        """
        INSERT INTO bookings (
            id, total_price, token_hash, contact, paid, whole_property,
            bulk_roster, created_at, updated_at
        )
        VALUES (%s, %s, %s, %s::jsonb, %s, %s, %s::jsonb, %s, %s)
        """,
        (
            record.id,
            record.total_price,
            record.token_hash,
            json.dumps(asdict(record.contact)),
            record.paid,
            record.whole_property,
            (
                json.dumps(record.bulk_roster.to_list())
                if record.bulk_roster is not None
                else None
            ),
            record.created_at,
            record.updated_at,
        ),
    )
    _insert_entries(cur, record)


def get_booking(cur: PgCursor, booking_id: str) -> BookingRecord | None:
    """Retrieve a booking with its room entries, or None if not found."""
    cur.execute(
        """
        SELECT id, total_price, token_hash, contact, paid, whole_property,
               bulk_roster, created_at, updated_at
        FROM bookings
        WHERE id = %s
        """,
        (booking_id,),
    )
    row = cur.fetchone()
    if row is None:
        return None

    cur.execute(
        """
        SELECT room_id, start_date, end_date, roster
        FROM booking_rooms
        WHERE booking_id = %s
        ORDER BY room_id
        """,
        (booking_id,),
    )
    entries = tuple(
        BookingEntry(
            room_id=r[0],
            start=r[1],
            end=r[2],
            roster=GuestRoster.from_list(_load_json(r[3])),
            booking_id=booking_id,
        )
        for r in cur.fetchall()
    )
    bulk_roster = _load_json(row[6])

    return BookingRecord(
        id=row[0],
        entries=entries,
        total_price=row[1],
        token_hash=row[2],
        contact=ContactInfo(**_load_json(row[3])),
        paid=row[4],
        whole_property=row[5],
        bulk_roster=GuestRoster.from_list(bulk_roster) if bulk_roster is not None else None,
        created_at=row[7],
        updated_at=row[8],
    )


def list_entries_for_room(
    cur: PgCursor,
    *,
    room_id: str,
    start: date,
    end: date,
    exclude_booking_id: str | None = None,
) -> list[BookingEntry]:
    """List booked ranges on a room touching the closed range [start, end]."""
    conditions = [
        "room_id = %s",
        "start_date <= %s",
        "end_date >= %s",
    ]
    params: list = [room_id, end, start]

    if exclude_booking_id is not None:
        conditions.append("booking_id != %s")
        params.append(exclude_booking_id)

    where = " AND ".join(conditions)
    cur.execute(
        f"""
        SELECT booking_id, room_id, start_date, end_date, roster
        FROM booking_rooms
        WHERE {where}
        ORDER BY start_date
        """,
        params,
    )
    return [
        BookingEntry(
            room_id=r[1],
            start=r[2],
            end=r[3],
            roster=GuestRoster.from_list(_load_json(r[4])),
            booking_id=r[0],
        )
        for r in cur.fetchall()
    ]


def update_booking(cur: PgCursor, record: BookingRecord) -> None:
    """Overwrite a booking's price, flags and room entries."""
    cur.execute(
        """
        UPDATE bookings
        SET total_price = %s, paid = %s, updated_at = %s
        WHERE id = %s
        """,
        (record.total_price, record.paid, record.updated_at, record.id),
    )
    cur.execute("DELETE FROM booking_rooms WHERE booking_id = %s", (record.id,))
    _insert_entries(cur, record)


def delete_booking(cur: PgCursor, booking_id: str) -> bool:
    """Delete a booking (room entries cascade). Returns True if removed."""
    cur.execute("DELETE FROM bookings WHERE id = %s", (booking_id,))
    return cur.rowcount > 0
