"""Tests for the log sinks setup."""

from app.core.config import settings
from app.core.logging import (
    _ensure_defaults,
    _is_scheduling_record,
    _log_header,
)


def test_scheduling_sink_keeps_service_records():
    assert _is_scheduling_record({'name': 'app.services.overlap'})
    assert not _is_scheduling_record({'name': 'app.middleware.http_logging'})
    assert not _is_scheduling_record({'name': None})


def test_header_lists_scheduling_rules():
    header = _log_header()
    assert 'CINEMA_SHOWTIMES' in header
    assert f'Buffer: {settings.SHOWTIME_BUFFER_MINUTES} min' in header
    assert f'batch limit: {settings.BATCH_MAX_SIZE}' in header


def test_records_outside_requests_get_defaults():
    record = _ensure_defaults({'extra': {}})
    assert record['extra'] == {'username': 'SYSTEM', 'request_id': '-'}
