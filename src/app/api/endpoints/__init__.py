from .healthcheck import router as healthcheck_router
from .movie import router as movie_router
from .room import router as room_router
from .showtime import router as showtime_router

__all__ = [
    'movie_router',
    'showtime_router',
    'room_router',
    'healthcheck_router',
]

routers = [
    movie_router,
    showtime_router,
    room_router,
    healthcheck_router,
]
