from enum import Enum


class ShowtimeStatus(str, Enum):
    """Enum класс для статусов сеансов."""

    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'
    CANCELLED = 'CANCELLED'


# Статусы, которые занимают зал и участвуют в проверке пересечений
OCCUPYING_STATUSES = (ShowtimeStatus.ACTIVE, ShowtimeStatus.INACTIVE)


class MovieStatus(str, Enum):
    """Enum класс для статусов фильмов."""

    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'


class ShowtimeLanguage(str, Enum):
    """Enum класс для языка показа."""

    DUBBED = 'DUBBED'
    SUBTITLED = 'SUBTITLED'


class ShowtimeFormat(str, Enum):
    """Enum класс для формата показа."""

    TWO_D = 'TWO_D'
    THREE_D = 'THREE_D'
    IMAX = 'IMAX'


class SchedulingErrorKind(str, Enum):
    """Машиночитаемые коды ошибок планирования сеансов."""

    INVALID_TIMESTAMP = 'INVALID_TIMESTAMP'
    INVALID_RANGE = 'INVALID_RANGE'
    IN_THE_PAST = 'IN_THE_PAST'
    TOO_SHORT = 'TOO_SHORT'
    TOO_LONG = 'TOO_LONG'
    BATCH_TOO_LARGE = 'BATCH_TOO_LARGE'
    INVALID_INPUT = 'INVALID_INPUT'
    SCHEDULE_CONFLICT = 'SCHEDULE_CONFLICT'
    PARENT_NOT_FOUND = 'PARENT_NOT_FOUND'
    SHOWTIME_NOT_FOUND = 'SHOWTIME_NOT_FOUND'
    STORAGE_UNAVAILABLE = 'STORAGE_UNAVAILABLE'
