"""Tests for creating, updating and deleting showtimes."""

import asyncio
import uuid
from datetime import timedelta

import pytest

from app.core.exceptions import (
    NotFoundError,
    ScheduleConflictError,
    TransientStorageError,
    ValidationError,
)
from app.schemas.showtime import ShowtimeCreate, ShowtimeUpdate
from app.utils.enums import (
    SchedulingErrorKind,
    ShowtimeFormat,
    ShowtimeLanguage,
    ShowtimeStatus,
)
from tests.fakes import (
    FAIL_AFTER_COMMIT,
    FAIL_BEFORE_COMMIT,
    NOW,
    at,
    make_movie,
)


def _create(movie, start, end=None, room_id='A1', **extra):
    return ShowtimeCreate(
        movie_id=movie.id,
        room_id=room_id,
        start_at=start,
        end_at=end,
        language=ShowtimeLanguage.SUBTITLED,
        format=ShowtimeFormat.TWO_D,
        capacity=120,
        **extra,
    )


async def test_create_computes_end_from_movie(
    service,
    movie_90,
    showtime_repo,
):
    """The stored end is start + movie + buffer, not the caller's end."""
    showtime = await service.create_showtime(
        _create(movie_90, at(10), at(12)),
        'cashier',
    )
    assert showtime.end_at == at(11, 45)
    assert showtime.created_by == 'cashier'
    assert list(showtime_repo.rows) == [showtime.id]


async def test_create_overlapping_conflicts(service, movie_90, movie_60):
    """A second showtime inside the first one's window is a 409 conflict."""
    first = await service.create_showtime(_create(movie_90, at(10), at(12)))

    with pytest.raises(ScheduleConflictError) as exc_info:
        await service.create_showtime(_create(movie_60, at(11), at(13)))
    error = exc_info.value
    assert error.kind == SchedulingErrorKind.SCHEDULE_CONFLICT
    assert error.status_code == 409
    assert error.conflicting.id == first.id


async def test_create_back_to_back_is_allowed(service, movie_90, movie_60):
    """A showtime may start exactly when the previous one ends."""
    await service.create_showtime(_create(movie_90, at(10)))
    second = await service.create_showtime(_create(movie_60, at(11, 45)))
    assert second.start_at == at(11, 45)


async def test_create_in_the_past(service, movie_90, showtime_repo):
    yesterday = NOW - timedelta(days=1)
    with pytest.raises(ValidationError) as exc_info:
        await service.create_showtime(_create(movie_90, yesterday))
    assert exc_info.value.kind == SchedulingErrorKind.IN_THE_PAST
    assert exc_info.value.status_code == 400
    assert showtime_repo.rows == {}


async def test_create_too_short_never_persists(
    service,
    movie_180,
    showtime_repo,
):
    """A caller window shorter than movie + buffer fails with TOO_SHORT."""
    with pytest.raises(ValidationError) as exc_info:
        await service.create_showtime(
            _create(movie_180, at(10), at(10, 30)),
        )
    assert exc_info.value.kind == SchedulingErrorKind.TOO_SHORT
    assert showtime_repo.rows == {}
    assert showtime_repo.write_calls == 0


async def test_create_too_long_movie(service, movie_repo):
    """A movie that cannot fit into the maximum length is rejected."""
    movie = movie_repo.add(make_movie(230))
    with pytest.raises(ValidationError) as exc_info:
        await service.create_showtime(_create(movie, at(10)))
    assert exc_info.value.kind == SchedulingErrorKind.TOO_LONG


async def test_create_unknown_movie(service, movie_90, movie_repo):
    movie_repo.movies.clear()
    with pytest.raises(NotFoundError) as exc_info:
        await service.create_showtime(_create(movie_90, at(10)))
    assert exc_info.value.kind == SchedulingErrorKind.PARENT_NOT_FOUND
    assert exc_info.value.status_code == 404


async def test_cancelled_showtime_does_not_occupy_room(service, movie_90):
    """A cancelled showtime can be created over and does not block others."""
    await service.create_showtime(
        _create(movie_90, at(10), status=ShowtimeStatus.CANCELLED),
    )
    active = await service.create_showtime(_create(movie_90, at(10)))
    assert active.status == ShowtimeStatus.ACTIVE


async def test_storage_conflict_is_reported_as_schedule_conflict(
    service,
    movie_90,
    showtime_repo,
):
    """When the pre-check misses a concurrent write, the constraint wins."""
    first = await service.create_showtime(_create(movie_90, at(10)))
    showtime_repo.stale_reads = 1

    with pytest.raises(ScheduleConflictError) as exc_info:
        await service.create_showtime(_create(movie_90, at(11)))
    assert exc_info.value.conflicting.id == first.id
    assert len(showtime_repo.rows) == 1


async def test_concurrent_creates_only_one_wins(make_service, movie_90,
                                                showtime_repo):
    """Two overlapping creates racing each other: one success, one 409."""
    results = await asyncio.gather(
        make_service().create_showtime(_create(movie_90, at(10))),
        make_service().create_showtime(_create(movie_90, at(10, 30))),
        return_exceptions=True,
    )
    errors = [r for r in results if isinstance(r, Exception)]
    created = [r for r in results if not isinstance(r, Exception)]
    assert len(created) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], ScheduleConflictError)
    assert errors[0].conflicting.id == created[0].id
    assert len(showtime_repo.rows) == 1


async def test_retry_after_failure_before_commit(service, movie_90,
                                                 showtime_repo):
    showtime_repo.write_failures = [FAIL_BEFORE_COMMIT]
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    assert showtime_repo.write_calls == 2
    assert list(showtime_repo.rows) == [showtime.id]


async def test_retry_after_committed_write_never_duplicates(
    service,
    movie_90,
    showtime_repo,
):
    """A retry of an already committed create reports the earlier row."""
    showtime_repo.write_failures = [FAIL_AFTER_COMMIT]
    with pytest.raises(ScheduleConflictError) as exc_info:
        await service.create_showtime(_create(movie_90, at(10)))
    assert len(showtime_repo.rows) == 1
    (stored,) = showtime_repo.rows.values()
    assert exc_info.value.conflicting.id == stored.id


async def test_retries_are_bounded(make_service, movie_90, showtime_repo):
    showtime_repo.write_failures = [FAIL_BEFORE_COMMIT] * 3
    with pytest.raises(TransientStorageError) as exc_info:
        await make_service(retry_attempts=2).create_showtime(
            _create(movie_90, at(10)),
        )
    assert exc_info.value.retryable
    assert exc_info.value.status_code == 503
    assert showtime_repo.write_calls == 3
    assert showtime_repo.rows == {}


async def test_update_room_moves_showtime(service, movie_90):
    """Moving a showtime to a free room frees its old room."""
    showtime = await service.create_showtime(_create(movie_90, at(10)))

    updated = await service.update_showtime(
        showtime.id,
        ShowtimeUpdate(room_id='A2'),
        'manager',
    )
    assert updated.room_id == 'A2'
    assert updated.updated_by == 'manager'
    assert await service.detector.find_conflicts(
        None,
        'A1',
        at(10),
        at(11, 45),
    ) == []
    assert await service.detector.find_conflicts(
        None,
        'A2',
        at(10),
        at(11, 45),
    ) == [updated]


async def test_update_room_into_taken_window(service, movie_90):
    await service.create_showtime(_create(movie_90, at(10), room_id='A2'))
    showtime = await service.create_showtime(_create(movie_90, at(10, 30)))

    with pytest.raises(ScheduleConflictError):
        await service.update_showtime(
            showtime.id,
            ShowtimeUpdate(room_id='A2'),
        )
    assert showtime.room_id == 'A1'


async def test_update_start_recomputes_end(service, movie_90):
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    updated = await service.update_showtime(
        showtime.id,
        ShowtimeUpdate(start_at=at(15)),
    )
    assert updated.start_at == at(15)
    assert updated.end_at == at(16, 45)


async def test_update_movie_recomputes_end(service, movie_90, movie_60):
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    updated = await service.update_showtime(
        showtime.id,
        ShowtimeUpdate(movie_id=movie_60.id),
    )
    assert updated.end_at == at(11, 15)


async def test_update_does_not_conflict_with_itself(service, movie_90):
    """Shifting a showtime by a few minutes overlaps only its old window."""
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    updated = await service.update_showtime(
        showtime.id,
        ShowtimeUpdate(start_at=at(10, 15)),
    )
    assert updated.end_at == at(12)


async def test_update_unknown_movie(service, movie_90):
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    with pytest.raises(NotFoundError) as exc_info:
        await service.update_showtime(
            showtime.id,
            ShowtimeUpdate(movie_id=uuid.uuid4()),
        )
    assert exc_info.value.kind == SchedulingErrorKind.PARENT_NOT_FOUND


async def test_update_missing_showtime(service):
    with pytest.raises(NotFoundError) as exc_info:
        await service.update_showtime(
            uuid.uuid4(),
            ShowtimeUpdate(capacity=10),
        )
    assert exc_info.value.kind == SchedulingErrorKind.SHOWTIME_NOT_FOUND


async def test_update_plain_fields_skips_checks(service, movie_90,
                                                showtime_repo):
    """Changing capacity does not touch the window."""
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    updated = await service.update_showtime(
        showtime.id,
        ShowtimeUpdate(capacity=80, status=ShowtimeStatus.INACTIVE),
    )
    assert updated.capacity == 80
    assert updated.status == ShowtimeStatus.INACTIVE
    assert updated.end_at == at(11, 45)


async def test_cancel_frees_window_and_reactivation_is_checked(
    service,
    movie_90,
):
    """Cancelling frees the room, reactivating re-runs the overlap check."""
    showtime = await service.create_showtime(_create(movie_90, at(10)))
    await service.update_showtime(
        showtime.id,
        ShowtimeUpdate(status=ShowtimeStatus.CANCELLED),
    )
    await service.create_showtime(_create(movie_90, at(10, 30)))

    with pytest.raises(ScheduleConflictError):
        await service.update_showtime(
            showtime.id,
            ShowtimeUpdate(status=ShowtimeStatus.ACTIVE),
        )


async def test_delete_is_soft_and_frees_window(service, movie_90,
                                               showtime_repo):
    showtime = await service.create_showtime(_create(movie_90, at(10)))

    deleted = await service.delete_showtime(showtime.id, 'manager')
    assert deleted.deleted_at == NOW
    assert deleted.status == ShowtimeStatus.CANCELLED
    assert showtime.id in showtime_repo.rows
    with pytest.raises(NotFoundError):
        await service.get_showtime(showtime.id)

    replacement = await service.create_showtime(_create(movie_90, at(10)))
    assert replacement.id != showtime.id


async def test_room_availability(service, movie_90):
    showtime = await service.create_showtime(_create(movie_90, at(10)))

    busy = await service.room_availability('A1', at(11), at(12))
    assert not busy.available
    assert [item.id for item in busy.showtimes] == [showtime.id]

    free = await service.room_availability('A1', at(11, 45), at(13))
    assert free.available
    assert free.showtimes == []


async def test_room_availability_rejects_inverted_window(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.room_availability('A1', at(12), at(11))
    assert exc_info.value.kind == SchedulingErrorKind.INVALID_RANGE


async def test_room_schedule_is_ordered(service, movie_90, movie_60):
    late = await service.create_showtime(_create(movie_60, at(15)))
    early = await service.create_showtime(_create(movie_90, at(10)))
    await service.create_showtime(_create(movie_90, at(10), room_id='B1'))

    assert await service.room_schedule('A1') == [early, late]
