"""Таксономия ошибок планирования сеансов.

Каждая ошибка несёт стабильный машиночитаемый ``kind`` и человекочитаемое
сообщение. HTTP-слой отображает их на коды ответа через ``status_code``.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from fastapi import status

from app.utils.enums import SchedulingErrorKind

if TYPE_CHECKING:
    from app.models import Showtime


def format_window(start: datetime, end: datetime) -> str:
    """Форматирует временное окно сеанса для сообщений об ошибках."""
    return (
        f'{start.isoformat(timespec="minutes")} – '
        f'{end.isoformat(timespec="minutes")}'
    )


class SchedulingError(Exception):
    """Базовая ошибка планирования сеансов."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    retryable: bool = False

    def __init__(self, kind: SchedulingErrorKind, message: str) -> None:
        """Сохраняет код и сообщение ошибки."""
        super().__init__(message)
        self.kind = kind
        self.message = message


class ValidationError(SchedulingError):
    """Входные данные сеанса некорректны."""

    def __init__(
        self,
        kind: SchedulingErrorKind,
        message: str,
        *,
        actual_minutes: Optional[int] = None,
        required_minutes: Optional[int] = None,
    ) -> None:
        """Сохраняет фактическую и требуемую длительность для TOO_SHORT."""
        super().__init__(kind, message)
        self.actual_minutes = actual_minutes
        self.required_minutes = required_minutes


class ScheduleConflictError(SchedulingError):
    """Сеанс пересекается с уже существующим сеансом в том же зале."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        conflicting: Optional['Showtime'] = None,
    ) -> None:
        """Формирует сообщение с указанием конфликтующего сеанса."""
        self.room_id = room_id
        self.start = start
        self.end = end
        self.conflicting = conflicting
        if conflicting is not None:
            message = (
                f'Конфликт расписания в зале {room_id}: уже есть сеанс '
                f'{conflicting.id} '
                f'({format_window(conflicting.start_at, conflicting.end_at)})'
            )
        else:
            message = (
                f'Конфликт расписания в зале {room_id}: окно '
                f'{format_window(start, end)} пересекается с другим сеансом'
            )
        super().__init__(SchedulingErrorKind.SCHEDULE_CONFLICT, message)


class NotFoundError(SchedulingError):
    """Фильм или сеанс не найден либо удалён."""

    status_code = status.HTTP_404_NOT_FOUND


class TransientStorageError(SchedulingError):
    """Хранилище временно недоступно; запрос можно повторить."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True

    def __init__(self, message: str = 'Хранилище временно недоступно') -> None:
        """Создаёт ошибку с кодом STORAGE_UNAVAILABLE."""
        super().__init__(SchedulingErrorKind.STORAGE_UNAVAILABLE, message)
