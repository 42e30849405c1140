"""Initial schema (SQL-only).

Bookings with per-room entries guarded by the no_room_overlap exclusion
constraint, session holds, administrative blocks and season periods.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from pathlib import Path

from alembic import op


# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _read_sql() -> str:
    sql_path = Path(__file__).resolve().parents[1] / "sql" / "001_initial.sql"
    return sql_path.read_text(encoding="utf-8")


def upgrade() -> None:
    conn = op.get_bind()
    conn.exec_driver_sql(_read_sql())


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS season_codes")
    op.execute("DROP TABLE IF EXISTS season_periods")
    op.execute("DROP TABLE IF EXISTS blocked_ranges")
    op.execute("DROP TABLE IF EXISTS holds")
    op.execute("DROP TABLE IF EXISTS booking_rooms")
    op.execute("DROP TABLE IF EXISTS bookings")
    # btree_gist is intentionally kept: other indexes may depend on it.
