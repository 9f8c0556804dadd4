"""Tests for the showtime table DDL rendered for PostgreSQL."""

import re

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from app.models import Showtime


def _showtime_ddl() -> str:
    ddl = CreateTable(Showtime.__table__).compile(
        dialect=postgresql.dialect(),
    )
    return re.sub(r'\s+', ' ', str(ddl))


def test_no_overlap_exclusion_constraint():
    """Same room and intersecting half-open ranges are excluded."""
    ddl = _showtime_ddl()
    assert 'CONSTRAINT showtime_no_overlap EXCLUDE USING gist' in ddl
    assert 'room_id WITH =' in ddl
    assert "tstzrange(start_at, end_at, '[)') WITH &&" in ddl


def test_exclusion_ignores_cancelled_and_deleted_rows():
    ddl = _showtime_ddl()
    assert "WHERE (status <> 'CANCELLED' AND deleted_at IS NULL)" in ddl


def test_interval_and_capacity_checks():
    ddl = _showtime_ddl()
    assert 'CONSTRAINT ck_showtime_interval CHECK (end_at > start_at)' in ddl
    assert 'CONSTRAINT ck_showtime_capacity CHECK (capacity > 0)' in ddl
