"""HTTP tests for the showtime and room endpoints."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_scheduling_service
from app.main import app
from tests.fakes import at


@pytest.fixture
def client(service):
    app.dependency_overrides[get_scheduling_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _payload(movie, start, room_id='A1', **extra):
    payload = {
        'movie_id': str(movie.id),
        'room_id': room_id,
        'start_at': start.isoformat(),
        'language': 'SUBTITLED',
        'format': 'THREE_D',
        'capacity': 90,
    }
    payload.update(extra)
    return payload


def test_create_showtime(client, movie_90):
    response = client.post(
        '/showtimes/',
        json=_payload(movie_90, at(10), end_at=at(12).isoformat()),
        headers={'X-User': 'cashier'},
    )
    assert response.status_code == 201
    body = response.json()
    assert datetime.fromisoformat(body['end_at']) == at(11, 45)
    assert body['created_by'] == 'cashier'
    assert body['status'] == 'ACTIVE'


def test_conflict_returns_409_with_kind(client, movie_90, movie_60):
    first = client.post('/showtimes/', json=_payload(movie_90, at(10)))
    response = client.post('/showtimes/', json=_payload(movie_60, at(11)))

    assert response.status_code == 409
    body = response.json()
    assert body['code'] == 409
    assert body['kind'] == 'SCHEDULE_CONFLICT'
    assert first.json()['id'] in body['detail']


def test_validation_error_returns_400(client, movie_180):
    response = client.post(
        '/showtimes/',
        json=_payload(movie_180, at(10), end_at=at(10, 30).isoformat()),
    )
    assert response.status_code == 400
    assert response.json()['kind'] == 'TOO_SHORT'


def test_naive_time_is_rejected(client, movie_90):
    payload = _payload(movie_90, at(10))
    payload['start_at'] = '2030-01-01T10:00:00'
    response = client.post('/showtimes/', json=payload)
    assert response.status_code == 422


def test_unknown_showtime_returns_404(client):
    response = client.get('/showtimes/00000000-0000-0000-0000-000000000001')
    assert response.status_code == 404
    assert response.json()['kind'] == 'SHOWTIME_NOT_FOUND'


def test_update_and_delete(client, movie_90):
    created = client.post('/showtimes/', json=_payload(movie_90, at(10)))
    showtime_id = created.json()['id']

    moved = client.patch(
        f'/showtimes/{showtime_id}',
        json={'room_id': 'A2'},
        headers={'X-User': 'manager'},
    )
    assert moved.status_code == 200
    assert moved.json()['room_id'] == 'A2'
    assert moved.json()['updated_by'] == 'manager'

    deleted = client.delete(f'/showtimes/{showtime_id}')
    assert deleted.status_code == 200
    assert deleted.json()['status'] == 'CANCELLED'
    assert client.get(f'/showtimes/{showtime_id}').status_code == 404


def test_bulk_create(client, movie_90):
    response = client.post(
        '/showtimes/bulk',
        json={
            'showtimes': [
                _payload(movie_90, at(10)),
                _payload(movie_90, at(11)),
                _payload(movie_90, at(11), room_id='B2'),
            ],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body['summary'] == {'total': 3, 'succeeded': 2, 'failed': 1}
    assert body['failed'][0]['index'] == 1
    assert body['failed'][0]['kind'] == 'SCHEDULE_CONFLICT'
    assert body['transient'] == []


def test_empty_bulk_returns_400(client):
    response = client.post('/showtimes/bulk', json={'showtimes': []})
    assert response.status_code == 400
    assert response.json()['kind'] == 'INVALID_INPUT'


def test_room_availability(client, movie_90):
    client.post('/showtimes/', json=_payload(movie_90, at(10)))

    response = client.get(
        '/rooms/A1/availability',
        params={
            'start': at(11).isoformat(),
            'end': at(12).isoformat(),
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body['available'] is False
    assert len(body['showtimes']) == 1

    schedule = client.get('/rooms/A1/showtimes')
    assert [item['room_id'] for item in schedule.json()] == ['A1']


def test_bulk_reports_malformed_item_without_aborting(client, movie_90):
    """One item with a naive time fails alone; the others are created."""
    naive = _payload(movie_90, at(13))
    naive['start_at'] = '2030-01-01T13:00:00'

    response = client.post(
        '/showtimes/bulk',
        json={
            'showtimes': [
                _payload(movie_90, at(10)),
                naive,
                _payload(movie_90, at(10), room_id='B2'),
            ],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body['summary'] == {'total': 3, 'succeeded': 2, 'failed': 1}
    assert body['failed'][0]['index'] == 1
    assert body['failed'][0]['kind'] == 'INVALID_INPUT'


def test_oversized_bulk_with_bad_item_returns_batch_too_large(
    client,
    movie_90,
):
    items = [_payload(movie_90, at(10))] * 50
    items.append(_payload(movie_90, at(10), capacity=0))

    response = client.post('/showtimes/bulk', json={'showtimes': items})
    assert response.status_code == 400
    assert response.json()['kind'] == 'BATCH_TOO_LARGE'


def test_update_with_inverted_window_returns_400(client, movie_90):
    """An end before the start is a scheduling error, not a schema error."""
    created = client.post('/showtimes/', json=_payload(movie_90, at(10)))

    response = client.patch(
        f"/showtimes/{created.json()['id']}",
        json={
            'start_at': at(12).isoformat(),
            'end_at': at(11).isoformat(),
        },
    )
    assert response.status_code == 400
    assert response.json()['kind'] == 'INVALID_RANGE'
