"""Calendar repository - administrative blocks and season periods.

Uses raw SQL with psycopg2 (no ORM). The core only reads these tables;
the insert helpers exist for administrative seeding.
"""

from datetime import date

from psycopg2.extensions import cursor as PgCursor

from lodgekeeper.domain.models import BlockedRange, SeasonPeriod


def list_blocks_for_room(
    cur: PgCursor,
    *,
    room_id: str,
    start: date,
    end: date,
) -> list[BlockedRange]:
    """List blocks for a room (or all rooms) touching [start, end]."""
    cur.execute(
        """
        SELECT id, room_id, start_date, end_date, reason
        FROM blocked_ranges
        WHERE (room_id = %s OR room_id IS NULL)
          AND start_date <= %s
          AND end_date >= %s
        ORDER BY start_date
        """,
        (room_id, end, start),
    )
    return [
        BlockedRange(id=r[0], room_id=r[1], start=r[2], end=r[3], reason=r[4] or "")
        for r in cur.fetchall()
    ]


def insert_block(cur: PgCursor, block: BlockedRange) -> None:
    cur.execute(
        """
        INSERT INTO blocked_ranges (id, room_id, start_date, end_date, reason)
        VALUES (%s, %s, %s, %s, %s)
        """,
        (block.id, block.room_id, block.start, block.end, block.reason),
    )


def list_season_periods(cur: PgCursor) -> list[SeasonPeriod]:
    """List season periods with their access codes, ordered by start."""
    cur.execute(
        """
        SELECT p.id, p.name, p.start_date, p.end_date, p.year,
               COALESCE(array_agg(c.code) FILTER (WHERE c.code IS NOT NULL), '{}')
        FROM season_periods p
        LEFT JOIN season_codes c ON c.period_id = p.id
        GROUP BY p.id, p.name, p.start_date, p.end_date, p.year
        ORDER BY p.start_date
        """
    )
    return [
        SeasonPeriod(
            id=r[0],
            name=r[1] or "",
            start=r[2],
            end=r[3],
            year=r[4],
            codes=frozenset(r[5] or ()),
        )
        for r in cur.fetchall()
    ]


def insert_season_period(cur: PgCursor, period: SeasonPeriod) -> None:
    cur.execute(
        """
        INSERT INTO season_periods (id, name, start_date, end_date, year)
        VALUES (%s, %s, %s, %s, %s)
        """,
        (period.id, period.name, period.start, period.end, period.year),
    )
    for code in sorted(period.codes):
        cur.execute(
            "INSERT INTO season_codes (period_id, code) VALUES (%s, %s)",
            (period.id, code),
        )
