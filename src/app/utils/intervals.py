from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement

from app.core.constants import SECONDS_IN_MINUTE


def intervals_overlap(
    first_start: datetime,
    first_end: datetime,
    second_start: datetime,
    second_end: datetime,
) -> bool:
    """Проверяет пересечение полуоткрытых интервалов [s1, e1) и [s2, e2).

    Касание границ (e1 == s2) пересечением не считается.
    """
    return first_start < second_end and second_start < first_end


def overlap_condition(
    start_column: Any,
    end_column: Any,
    start: datetime,
    end: datetime,
) -> ColumnElement[bool]:
    """SQL-версия ``intervals_overlap`` для колонок модели."""
    return and_(start_column < end, end_column > start)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Возвращает длительность интервала в целых минутах."""
    return int((end - start).total_seconds() // SECONDS_IN_MINUTE)


def derive_end(
    start: datetime,
    duration_minutes: int,
    buffer_minutes: int,
) -> datetime:
    """Вычисляет конец сеанса: длительность фильма плюс буфер на уборку."""
    return start + timedelta(minutes=duration_minutes + buffer_minutes)
