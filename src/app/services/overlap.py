from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ScheduleConflictError
from app.utils.enums import OCCUPYING_STATUSES
from app.utils.intervals import intervals_overlap

if TYPE_CHECKING:
    from app.models import Showtime
    from app.repositories.showtime import ShowtimeRepository


def occupies_room(showtime: 'Showtime') -> bool:
    """Проверяет, что сеанс занимает зал (не отменён и не удалён)."""
    return (
        showtime.status in OCCUPYING_STATUSES and showtime.deleted_at is None
    )


def select_conflicts(
    showtimes: Iterable['Showtime'],
    room_id: str,
    start: datetime,
    end: datetime,
    exclude_id: Optional[UUID] = None,
) -> List['Showtime']:
    """Отбирает из набора сеансы, конфликтующие с окном [start, end).

    Учитываются только сеансы того же зала, занимающие его, кроме
    ``exclude_id``. Результат упорядочен по началу сеанса.
    """
    conflicts = [
        showtime
        for showtime in showtimes
        if showtime.room_id == room_id
        and showtime.id != exclude_id
        and occupies_room(showtime)
        and intervals_overlap(start, end, showtime.start_at, showtime.end_at)
    ]
    return sorted(conflicts, key=lambda showtime: showtime.start_at)


class OverlapDetector:
    """Предварительная проверка пересечений сеансов в зале.

    Проверка только ускоряет отказ и даёт понятное сообщение: между
    чтением и вставкой другой запрос может занять то же окно.
    Окончательное решение принимает ограничение-исключение в БД.
    """

    def __init__(self, repository: 'ShowtimeRepository') -> None:
        """Инициализация детектора с репозиторием сеансов."""
        self.repository = repository

    async def find_conflicts(
        self,
        session: AsyncSession,
        room_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> List['Showtime']:
        """Возвращает все сеансы зала, пересекающие окно, по началу."""
        showtimes = await self.repository.find_overlapping(
            session,
            room_id,
            start,
            end,
            exclude_id,
        )
        return select_conflicts(showtimes, room_id, start, end, exclude_id)

    async def ensure_free(
        self,
        session: AsyncSession,
        room_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Выбрасывает ScheduleConflictError, если окно в зале занято."""
        conflicts = await self.find_conflicts(
            session,
            room_id,
            start,
            end,
            exclude_id,
        )
        if conflicts:
            logger.warning(
                f'Окно {start.isoformat()}–{end.isoformat()} в зале '
                f'{room_id} пересекается с сеансами: '
                f'{[str(showtime.id) for showtime in conflicts]}',
            )
            raise ScheduleConflictError(room_id, start, end, conflicts[0])
