from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.services.duration_validator import ensure_aware_datetime
from app.schemas.showtime import RoomAvailability, ShowtimeShortInfo
from app.utils.enums import SchedulingErrorKind

if TYPE_CHECKING:
    from app.models import Showtime
    from app.repositories.showtime import ShowtimeRepository


class AvailabilityService:
    """Сервис для проверки занятости залов."""

    @staticmethod
    async def get_room_availability(
        session: AsyncSession,
        repository: 'ShowtimeRepository',
        room_id: str,
        start: datetime,
        end: datetime,
    ) -> RoomAvailability:
        """Проверяет, свободен ли зал в окне [start, end).

        Args:
            session: Асинхронная сессия базы данных
            repository: Репозиторий сеансов
            room_id: Идентификатор зала
            start: Начало окна
            end: Конец окна

        Returns:
            RoomAvailability: Флаг доступности и сеансы, занимающие окно,
                по возрастанию начала

        Raises:
            ValidationError: INVALID_TIMESTAMP для времени без часового
                пояса, INVALID_RANGE, если конец окна не позже начала

        """
        ensure_aware_datetime(start, 'начала окна')
        ensure_aware_datetime(end, 'окончания окна')
        if end <= start:
            raise ValidationError(
                SchedulingErrorKind.INVALID_RANGE,
                'Конец окна должен быть позже его начала',
            )
        showtimes = await repository.find_overlapping(
            session,
            room_id,
            start,
            end,
        )
        return RoomAvailability(
            room_id=room_id,
            start=start,
            end=end,
            available=not showtimes,
            showtimes=[
                ShowtimeShortInfo.model_validate(showtime)
                for showtime in showtimes
            ],
        )

    @staticmethod
    async def get_room_schedule(
        session: AsyncSession,
        repository: 'ShowtimeRepository',
        room_id: str,
    ) -> List['Showtime']:
        """Возвращает все сеансы, занимающие зал, по возрастанию начала."""
        return await repository.query_active_in_room(session, room_id)
