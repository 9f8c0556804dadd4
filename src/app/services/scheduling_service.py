from datetime import date, datetime, timezone
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    List,
    Optional,
    TypeVar,
)
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    NotFoundError,
    ScheduleConflictError,
    TransientStorageError,
)
from app.repositories.errors import ExclusionViolation
from app.repositories.movie import movie_repository
from app.repositories.showtime import showtime_repository
from app.schemas.showtime import (
    RoomAvailability,
    ShowtimeCreate,
    ShowtimeUpdate,
)
from app.services.availability_service import AvailabilityService
from app.services.duration_validator import validate_duration
from app.services.overlap import OverlapDetector
from app.utils.enums import SchedulingErrorKind, ShowtimeStatus
from app.utils.intervals import derive_end

if TYPE_CHECKING:
    from app.models import Movie, Showtime
    from app.repositories.movie import MovieRepository
    from app.repositories.showtime import ShowtimeRepository

ResultT = TypeVar('ResultT')

TIMING_FIELDS = ('start_at', 'end_at', 'movie_id')


def utc_now() -> datetime:
    """Текущее время в UTC."""
    return datetime.now(timezone.utc)


class SchedulingService:
    """Создание и изменение сеансов без пересечений в зале.

    Каждая операция проходит один конвейер: фильм существует, окно
    проходит проверку длительности, предварительная проверка не находит
    пересечений, затем запись выполняется одной транзакцией под защитой
    ограничения-исключения БД. Отказ БД по ограничению сообщается так же,
    как отказ предварительной проверки: ``ScheduleConflictError``.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        showtimes: Optional['ShowtimeRepository'] = None,
        movies: Optional['MovieRepository'] = None,
        clock: Callable[[], datetime] = utc_now,
        buffer_minutes: Optional[int] = None,
        max_minutes: Optional[int] = None,
        retry_attempts: Optional[int] = None,
    ) -> None:
        """Инициализация сервиса с репозиториями и настройками."""
        self.session = session
        self.showtimes = showtimes or showtime_repository
        self.movies = movies or movie_repository
        self.clock = clock
        self.buffer_minutes = (
            settings.SHOWTIME_BUFFER_MINUTES
            if buffer_minutes is None
            else buffer_minutes
        )
        self.max_minutes = (
            settings.SHOWTIME_MAX_DURATION_MINUTES
            if max_minutes is None
            else max_minutes
        )
        self.retry_attempts = (
            settings.WRITE_RETRY_ATTEMPTS
            if retry_attempts is None
            else retry_attempts
        )
        self.detector = OverlapDetector(self.showtimes)

    async def create_showtime(
        self,
        data: ShowtimeCreate,
        operator: Optional[str] = None,
    ) -> 'Showtime':
        """Создает сеанс.

        Args:
            data: Данные сеанса
            operator: Имя пользователя для полей аудита

        Returns:
            Showtime: Созданный сеанс с вычисленным концом

        Raises:
            NotFoundError: PARENT_NOT_FOUND, если фильм не найден
            ValidationError: если окно нарушает правила длительности
            ScheduleConflictError: если окно в зале уже занято
            TransientStorageError: если хранилище недоступно после повторов

        """
        return await self._with_retries(
            lambda: self._create_once(data, operator),
            f'создание сеанса в зале {data.room_id}',
        )

    async def update_showtime(
        self,
        showtime_id: UUID,
        data: ShowtimeUpdate,
        operator: Optional[str] = None,
    ) -> 'Showtime':
        """Обновляет сеанс, повторно проверяя окно при его изменении.

        Проверки длительности и пересечений выполняются, если меняется
        зал, время, фильм или сеанс возвращается из отмены. Конец сеанса
        пересчитывается, только если переданы начало, конец или фильм.

        Raises:
            NotFoundError: SHOWTIME_NOT_FOUND или PARENT_NOT_FOUND
            ValidationError: если новое окно нарушает правила длительности
            ScheduleConflictError: если новое окно в зале уже занято
            TransientStorageError: если хранилище недоступно после повторов

        """
        return await self._with_retries(
            lambda: self._update_once(showtime_id, data, operator),
            f'обновление сеанса {showtime_id}',
        )

    async def delete_showtime(
        self,
        showtime_id: UUID,
        operator: Optional[str] = None,
    ) -> 'Showtime':
        """Логически удаляет сеанс: ставит deleted_at и статус CANCELLED."""
        showtime = await self.get_showtime(showtime_id)
        deleted = await self.showtimes.update_fields(
            showtime,
            {
                'deleted_at': self.clock(),
                'status': ShowtimeStatus.CANCELLED,
                'updated_by': operator,
            },
            self.session,
        )
        logger.info(f'Сеанс {showtime_id} удалён (отменён)')
        return deleted

    async def get_showtime(self, showtime_id: UUID) -> 'Showtime':
        """Возвращает неудалённый сеанс или выбрасывает NotFoundError."""
        showtime = await self.showtimes.get_not_deleted(
            self.session,
            showtime_id,
        )
        if showtime is None:
            raise NotFoundError(
                SchedulingErrorKind.SHOWTIME_NOT_FOUND,
                'Сеанс не найден',
            )
        return showtime

    async def list_showtimes(
        self,
        *,
        room_id: Optional[str] = None,
        movie_id: Optional[UUID] = None,
        day: Optional[date] = None,
        status: Optional[ShowtimeStatus] = ShowtimeStatus.ACTIVE,
        skip: int = 0,
        limit: int = 100,
    ) -> List['Showtime']:
        """Возвращает неудалённые сеансы с фильтрами по возрастанию начала."""
        return await self.showtimes.get_multi_filtered(
            self.session,
            room_id=room_id,
            movie_id=movie_id,
            day=day,
            status=status,
            skip=skip,
            limit=limit,
        )

    async def room_availability(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
    ) -> RoomAvailability:
        """Проверяет занятость зала в окне [start, end)."""
        return await AvailabilityService.get_room_availability(
            self.session,
            self.showtimes,
            room_id,
            start,
            end,
        )

    async def room_schedule(self, room_id: str) -> List['Showtime']:
        """Возвращает сеансы, занимающие зал."""
        return await AvailabilityService.get_room_schedule(
            self.session,
            self.showtimes,
            room_id,
        )

    async def _with_retries(
        self,
        operation: Callable[[], Awaitable[ResultT]],
        description: str,
    ) -> ResultT:
        """Повторяет операцию при TransientStorageError ограниченное число раз.

        Повтор безопасен: если прошлая попытка успела записать сеанс,
        предварительная проверка или ограничение-исключение вернут
        конфликт с этим сеансом, и второй записи не будет.
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except TransientStorageError:
                if attempt >= self.retry_attempts:
                    logger.error(
                        f'{description}: хранилище недоступно, попытки '
                        f'исчерпаны ({attempt + 1})',
                    )
                    raise
                attempt += 1
                logger.warning(
                    f'{description}: повтор после сбоя хранилища '
                    f'({attempt}/{self.retry_attempts})',
                )

    async def _create_once(
        self,
        data: ShowtimeCreate,
        operator: Optional[str],
    ) -> 'Showtime':
        """Одна попытка создания сеанса."""
        movie = await self._resolve_movie(data.movie_id)
        start = data.start_at
        end = derive_end(start, movie.duration_minutes, self.buffer_minutes)
        now = self.clock()
        if data.end_at is not None:
            self._validate(start, data.end_at, movie, now)
        self._validate(start, end, movie, now)
        if data.status != ShowtimeStatus.CANCELLED:
            await self.detector.ensure_free(
                self.session,
                data.room_id,
                start,
                end,
            )

        values = data.model_dump(exclude={'end_at'})
        values.update(end_at=end, created_by=operator, updated_by=operator)
        try:
            showtime = await self.showtimes.insert(self.session, values)
        except ExclusionViolation as e:
            raise await self._storage_conflict(data.room_id, start, end) from e
        logger.info(
            f'Сеанс {showtime.id} создан в зале {showtime.room_id}: '
            f'{showtime.start_at.isoformat()}–{showtime.end_at.isoformat()}',
        )
        return showtime

    async def _update_once(
        self,
        showtime_id: UUID,
        data: ShowtimeUpdate,
        operator: Optional[str],
    ) -> 'Showtime':
        """Одна попытка обновления сеанса."""
        showtime = await self.get_showtime(showtime_id)
        changes: dict[str, Any] = data.model_dump(
            exclude_unset=True,
            exclude_none=True,
        )
        room_id = changes.get('room_id', showtime.room_id)
        start = changes.get('start_at', showtime.start_at)
        end = showtime.end_at
        status = changes.get('status', showtime.status)

        timing_changed = any(field in changes for field in TIMING_FIELDS)
        reactivated = (
            showtime.status == ShowtimeStatus.CANCELLED
            and status != ShowtimeStatus.CANCELLED
        )
        reschedule = (
            timing_changed or room_id != showtime.room_id or reactivated
        )

        movie = None
        if timing_changed or (
            reschedule and status != ShowtimeStatus.CANCELLED
        ):
            movie = await self._resolve_movie(
                changes.get('movie_id', showtime.movie_id),
            )
        if timing_changed:
            end = derive_end(
                start,
                movie.duration_minutes,
                self.buffer_minutes,
            )
            changes['end_at'] = end
        if reschedule and status != ShowtimeStatus.CANCELLED:
            now = self.clock()
            if data.end_at is not None:
                self._validate(start, data.end_at, movie, now)
            self._validate(start, end, movie, now)
            await self.detector.ensure_free(
                self.session,
                room_id,
                start,
                end,
                exclude_id=showtime.id,
            )
        changes['updated_by'] = operator

        try:
            updated = await self.showtimes.update_fields(
                showtime,
                changes,
                self.session,
            )
        except ExclusionViolation as e:
            raise await self._storage_conflict(
                room_id,
                start,
                end,
                exclude_id=showtime_id,
            ) from e
        logger.info(f'Сеанс {showtime_id} обновлён: {sorted(changes)}')
        return updated

    async def _resolve_movie(self, movie_id: UUID) -> 'Movie':
        """Возвращает неудалённый фильм или выбрасывает NotFoundError."""
        movie = await self.movies.get_not_deleted(self.session, movie_id)
        if movie is None:
            raise NotFoundError(
                SchedulingErrorKind.PARENT_NOT_FOUND,
                f'Фильм {movie_id} не найден',
            )
        return movie

    def _validate(
        self,
        start: datetime,
        end: datetime,
        movie: 'Movie',
        now: datetime,
    ) -> None:
        """Проверяет окно сеанса правилами длительности."""
        validate_duration(
            start,
            end,
            movie.duration_minutes,
            now,
            buffer_minutes=self.buffer_minutes,
            max_minutes=self.max_minutes,
        )

    async def _storage_conflict(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> ScheduleConflictError:
        """Строит ошибку конфликта после отказа ограничения в БД.

        Транзакция уже откачена, поэтому конфликтующий сеанс читается
        заново из зафиксированного состояния.
        """
        conflicts = await self.detector.find_conflicts(
            self.session,
            room_id,
            start,
            end,
            exclude_id,
        )
        conflicting = conflicts[0] if conflicts else None
        logger.warning(
            f'Ограничение БД отклонило окно в зале {room_id}; '
            f'конфликт с {conflicting.id if conflicting else "неизвестным"}',
        )
        return ScheduleConflictError(room_id, start, end, conflicting)
