from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import StringConstraints

from app.core.constants import ROOM_ID_MAX_LENGTH
from app.utils.enums import ShowtimeFormat, ShowtimeLanguage, ShowtimeStatus

RoomConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=ROOM_ID_MAX_LENGTH,
)


def _require_timezone(value: Optional[datetime]) -> Optional[datetime]:
    """Отклоняет время без часового пояса."""
    if value is not None and value.tzinfo is None:
        raise ValueError('Время должно содержать часовой пояс')
    return value


class ShowtimeCreate(BaseModel):
    """Схема для создания сеанса.

    Конец сеанса вычисляется системой из длительности фильма и буфера;
    переданный ``end_at`` только проверяется.
    """

    movie_id: UUID
    room_id: Annotated[str, RoomConstraint]
    start_at: datetime
    end_at: Optional[datetime] = None
    language: ShowtimeLanguage
    format: ShowtimeFormat
    capacity: Annotated[int, Field(ge=1)]
    status: ShowtimeStatus = ShowtimeStatus.ACTIVE

    @field_validator('start_at', 'end_at')
    @classmethod
    def check_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Проверяет наличие часового пояса."""
        return _require_timezone(value)


class ShowtimeUpdate(BaseModel):
    """Схема для обновления существующего сеанса."""

    movie_id: Optional[UUID] = None
    room_id: Optional[Annotated[str, RoomConstraint]] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    language: Optional[ShowtimeLanguage] = None
    format: Optional[ShowtimeFormat] = None
    capacity: Optional[Annotated[int, Field(ge=1)]] = None
    status: Optional[ShowtimeStatus] = None

    @field_validator('start_at', 'end_at')
    @classmethod
    def check_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Проверяет наличие часового пояса."""
        return _require_timezone(value)


class ShowtimeShortInfo(BaseModel):
    """Сокращенная схема сеанса для вложенных объектов."""

    id: UUID
    movie_id: UUID
    room_id: str
    start_at: datetime
    end_at: datetime
    status: ShowtimeStatus

    model_config = ConfigDict(from_attributes=True)


class ShowtimeInfo(ShowtimeShortInfo):
    """Полная схема сеанса."""

    language: ShowtimeLanguage
    format: ShowtimeFormat
    capacity: int
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ShowtimeBatchCreate(BaseModel):
    """Схема для массового создания сеансов.

    Элементы разбираются по одному при обработке пакета, чтобы
    некорректный элемент попал в отказы, а не отклонил весь запрос.
    """

    showtimes: list[dict[str, Any]]


class BatchItemError(BaseModel):
    """Ошибка обработки одного элемента пакета."""

    index: int
    kind: str
    reason: str
    input: dict[str, Any]


class BatchSummary(BaseModel):
    """Итоги обработки пакета."""

    total: int
    succeeded: int
    failed: int


class BatchResultInfo(BaseModel):
    """Результат массового создания сеансов."""

    succeeded: list[ShowtimeInfo]
    failed: list[BatchItemError]
    transient: list[BatchItemError]
    summary: BatchSummary


class RoomAvailability(BaseModel):
    """Занятость зала в заданном окне."""

    room_id: str
    start: datetime
    end: datetime
    available: bool
    showtimes: list[ShowtimeShortInfo]
