from datetime import date, datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.types import StringConstraints

from app.core.constants import MOVIE_TITLE_MAX_LENGTH
from app.utils.enums import MovieStatus

TitleConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=MOVIE_TITLE_MAX_LENGTH,
)


class MovieCreate(BaseModel):
    """Схема для создания фильма."""

    title: Annotated[str, TitleConstraint]
    duration_minutes: Annotated[int, Field(ge=1)]
    rating: Annotated[str, StringConstraints(min_length=1, max_length=16)]
    release_date: Optional[date] = None
    status: MovieStatus = MovieStatus.ACTIVE


class MovieUpdate(BaseModel):
    """Схема для обновления фильма."""

    title: Optional[Annotated[str, TitleConstraint]] = None
    duration_minutes: Optional[Annotated[int, Field(ge=1)]] = None
    rating: Optional[str] = None
    release_date: Optional[date] = None
    status: Optional[MovieStatus] = None


class MovieInfo(BaseModel):
    """Полная схема фильма."""

    id: UUID
    title: str
    duration_minutes: int
    rating: str
    release_date: Optional[date]
    status: MovieStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
