from .movie import Movie
from .showtime import Showtime

__all__ = [
    'Movie',
    'Showtime',
]
