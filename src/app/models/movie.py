from datetime import date

from sqlalchemy import CheckConstraint, Date, Integer, String
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from app.core.constants import MOVIE_TITLE_MAX_LENGTH
from app.core.db import Base
from app.utils.enums import MovieStatus


class Movie(Base):
    """Таблица фильмов, для которых планируются сеансы."""

    title: Mapped[str] = mapped_column(
        String(MOVIE_TITLE_MAX_LENGTH),
        nullable=False,
        index=True,
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[str] = mapped_column(String(16), nullable=False)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[MovieStatus] = mapped_column(
        ENUM(MovieStatus, name='movie_status', create_type=True),
        nullable=False,
        default=MovieStatus.ACTIVE,
        server_default=MovieStatus.ACTIVE.value,
    )

    __table_args__ = (
        CheckConstraint(
            'duration_minutes > 0',
            name='ck_movie_duration_positive',
        ),
    )
