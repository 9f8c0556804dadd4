from datetime import datetime
from typing import Any

from app.core.constants import (
    SHOWTIME_BUFFER_MINUTES,
    SHOWTIME_MAX_DURATION_MINUTES,
)
from app.core.exceptions import ValidationError
from app.utils.enums import SchedulingErrorKind
from app.utils.intervals import whole_minutes


def ensure_aware_datetime(value: Any, field: str) -> None:
    """Проверяет, что значение является датой-временем с часовым поясом."""
    if not isinstance(value, datetime):
        raise ValidationError(
            SchedulingErrorKind.INVALID_TIMESTAMP,
            f'Некорректное значение времени {field}: {value!r}',
        )
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(
            SchedulingErrorKind.INVALID_TIMESTAMP,
            f'Время {field} должно содержать часовой пояс',
        )


def validate_duration(
    start: datetime,
    end: datetime,
    reference_duration_minutes: int,
    now: datetime,
    *,
    buffer_minutes: int = SHOWTIME_BUFFER_MINUTES,
    max_minutes: int = SHOWTIME_MAX_DURATION_MINUTES,
) -> None:
    """Проверяет окно сеанса по бизнес-правилам длительности.

    Правила применяются по порядку, срабатывает первое нарушенное:
    корректность времени, ``end > start``, начало не в прошлом,
    длительность не меньше фильма с буфером и не больше потолка.
    Функция чистая: текущее время передаётся вызывающим.

    Args:
        start: Начало сеанса
        end: Конец сеанса
        reference_duration_minutes: Длительность фильма в минутах
        now: Момент проверки
        buffer_minutes: Минуты на уборку зала после фильма
        max_minutes: Максимальная длительность сеанса

    Raises:
        ValidationError: INVALID_TIMESTAMP, INVALID_RANGE, IN_THE_PAST,
            TOO_SHORT или TOO_LONG

    """
    ensure_aware_datetime(start, 'начала')
    ensure_aware_datetime(end, 'окончания')

    if end <= start:
        raise ValidationError(
            SchedulingErrorKind.INVALID_RANGE,
            'Время окончания сеанса должно быть позже времени начала',
        )
    if start < now:
        raise ValidationError(
            SchedulingErrorKind.IN_THE_PAST,
            'Время начала сеанса не может быть в прошлом',
        )

    actual_minutes = whole_minutes(start, end)
    required_minutes = reference_duration_minutes + buffer_minutes
    if actual_minutes < required_minutes:
        raise ValidationError(
            SchedulingErrorKind.TOO_SHORT,
            f'Длительность сеанса ({actual_minutes} мин) должна быть не '
            f'меньше {required_minutes} мин (фильм: '
            f'{reference_duration_minutes} мин + {buffer_minutes} мин '
            'на уборку)',
            actual_minutes=actual_minutes,
            required_minutes=required_minutes,
        )
    if actual_minutes > max_minutes:
        raise ValidationError(
            SchedulingErrorKind.TOO_LONG,
            f'Длительность сеанса ({actual_minutes} мин) не может '
            f'превышать {max_minutes} мин',
        )
