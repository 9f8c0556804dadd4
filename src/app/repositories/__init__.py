from .base import CRUDBase
from .movie import MovieRepository, movie_repository
from .showtime import ShowtimeRepository, showtime_repository

__all__ = [
    'CRUDBase',
    'MovieRepository',
    'movie_repository',
    'ShowtimeRepository',
    'showtime_repository',
]
