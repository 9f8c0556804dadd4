import os

import pytest

os.environ.setdefault('POSTGRES_DB', 'showtimes_test')
os.environ.setdefault('POSTGRES_USER', 'postgres')
os.environ.setdefault('POSTGRES_PASSWORD', 'postgres')
os.environ.setdefault('POSTGRES_HOST', 'localhost')
os.environ.setdefault('POSTGRES_PORT', '5432')

from app.services.batch_scheduler import BatchScheduler  # noqa: E402
from app.services.scheduling_service import SchedulingService  # noqa: E402
from tests.fakes import (  # noqa: E402
    BUFFER_MINUTES,
    MAX_MINUTES,
    NOW,
    FakeMovieRepository,
    FakeShowtimeRepository,
    make_movie,
)


@pytest.fixture
def showtime_repo() -> FakeShowtimeRepository:
    return FakeShowtimeRepository()


@pytest.fixture
def movie_repo() -> FakeMovieRepository:
    return FakeMovieRepository()


@pytest.fixture
def make_service(showtime_repo, movie_repo):
    def factory(retry_attempts: int = 2) -> SchedulingService:
        return SchedulingService(
            None,
            showtimes=showtime_repo,
            movies=movie_repo,
            clock=lambda: NOW,
            buffer_minutes=BUFFER_MINUTES,
            max_minutes=MAX_MINUTES,
            retry_attempts=retry_attempts,
        )

    return factory


@pytest.fixture
def service(make_service) -> SchedulingService:
    return make_service()


@pytest.fixture
def scheduler(service) -> BatchScheduler:
    return BatchScheduler(service, max_size=50)


@pytest.fixture
def movie_90(movie_repo):
    return movie_repo.add(make_movie(90, 'Ninety'))


@pytest.fixture
def movie_60(movie_repo):
    return movie_repo.add(make_movie(60, 'Sixty'))


@pytest.fixture
def movie_180(movie_repo):
    return movie_repo.add(make_movie(180, 'Epic'))
