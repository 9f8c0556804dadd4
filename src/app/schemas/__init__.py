"""Модуль схем Pydantic для валидации и сериализации данных.

Содержит схемы для всех сущностей системы:
- Фильмы (Movie)
- Сеансы (Showtime)
- Пакетное создание сеансов и его результат
- Занятость залов

Все схемы используют UUID для идентификаторов, время сеансов
принимается только с часовым поясом.
"""

from .common import ErrorResponse
from .movie import MovieCreate, MovieInfo, MovieUpdate
from .showtime import (
    BatchItemError,
    BatchResultInfo,
    BatchSummary,
    RoomAvailability,
    ShowtimeBatchCreate,
    ShowtimeCreate,
    ShowtimeInfo,
    ShowtimeShortInfo,
    ShowtimeUpdate,
)

__all__ = [
    'MovieCreate',
    'MovieInfo',
    'MovieUpdate',
    'ShowtimeCreate',
    'ShowtimeUpdate',
    'ShowtimeInfo',
    'ShowtimeShortInfo',
    'ShowtimeBatchCreate',
    'BatchItemError',
    'BatchSummary',
    'BatchResultInfo',
    'RoomAvailability',
    'ErrorResponse',
]
