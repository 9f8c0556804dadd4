from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Showtime
from app.repositories.base import CRUDBase
from app.repositories.errors import translate_storage_errors
from app.schemas.showtime import ShowtimeCreate, ShowtimeUpdate
from app.utils.enums import OCCUPYING_STATUSES, ShowtimeStatus
from app.utils.intervals import overlap_condition


class ShowtimeRepository(CRUDBase[Showtime, ShowtimeCreate, ShowtimeUpdate]):
    """Репозиторий для операций с сеансами.

    Запись сеансов защищена ограничением-исключением
    ``showtime_no_overlap``; его нарушение приходит из ``insert`` и
    ``update_fields`` как ``ExclusionViolation``.
    """

    def __init__(self) -> None:
        """Инициализация репозитория сеансов."""
        super().__init__(Showtime)

    def _occupying(
        self,
        room_id: str,
        exclude_id: Optional[UUID],
    ) -> list[Any]:
        """Условия выборки сеансов, занимающих зал."""
        conditions = [
            Showtime.room_id == room_id,
            Showtime.status.in_(OCCUPYING_STATUSES),
            Showtime.deleted_at.is_(None),
        ]
        if exclude_id is not None:
            conditions.append(Showtime.id != exclude_id)
        return conditions

    async def query_active_in_room(
        self,
        session: AsyncSession,
        room_id: str,
        exclude_id: Optional[UUID] = None,
    ) -> List[Showtime]:
        """Получает все сеансы, занимающие зал, по возрастанию начала."""
        return await self.get(
            session,
            *self._occupying(room_id, exclude_id),
            many=True,
            order_by=(Showtime.start_at,),
        )

    async def find_overlapping(
        self,
        session: AsyncSession,
        room_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> List[Showtime]:
        """Получает сеансы зала, пересекающие окно [start, end)."""
        return await self.get(
            session,
            *self._occupying(room_id, exclude_id),
            overlap_condition(Showtime.start_at, Showtime.end_at, start, end),
            many=True,
            order_by=(Showtime.start_at,),
        )

    async def get_multi_filtered(
        self,
        session: AsyncSession,
        *,
        room_id: Optional[str] = None,
        movie_id: Optional[UUID] = None,
        day: Optional[date] = None,
        status: Optional[ShowtimeStatus] = ShowtimeStatus.ACTIVE,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Showtime]:
        """Получает список неудалённых сеансов с фильтрами."""
        conditions = [Showtime.deleted_at.is_(None)]
        if room_id:
            conditions.append(Showtime.room_id == room_id)
        if movie_id:
            conditions.append(Showtime.movie_id == movie_id)
        if status:
            conditions.append(Showtime.status == status)
        if day:
            day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            day_end = day_start + timedelta(days=1)
            conditions.append(Showtime.start_at >= day_start)
            conditions.append(Showtime.start_at < day_end)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(Showtime.start_at,),
            offset=skip,
            limit=limit,
        )

    async def insert(
        self,
        session: AsyncSession,
        values: dict[str, Any],
    ) -> Showtime:
        """Вставляет сеанс одной атомарной транзакцией."""
        db_obj = self.model(**values)
        async with translate_storage_errors(
            session,
            room_id=values.get('room_id'),
            start_at=values.get('start_at'),
        ):
            await self._bound_transaction(session)
            session.add(db_obj)
            await session.commit()
            await session.refresh(db_obj)
        return db_obj


showtime_repository = ShowtimeRepository()
