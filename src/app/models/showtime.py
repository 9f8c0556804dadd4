import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import ENUM, ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.constants import (
    ROOM_ID_MAX_LENGTH,
    SHOWTIME_NO_OVERLAP_CONSTRAINT,
)
from app.core.db import Base
from app.utils.enums import ShowtimeFormat, ShowtimeLanguage, ShowtimeStatus


class Showtime(Base):
    """Таблица сеансов: занятость зала фильмом в окне [start_at, end_at).

    Ограничение-исключение гарантирует, что два неотменённых и
    неудалённых сеанса одного зала не пересекаются по времени.
    """

    movie_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('movie.id', ondelete='RESTRICT'),
        index=True,
        nullable=False,
    )
    room_id: Mapped[str] = mapped_column(
        String(ROOM_ID_MAX_LENGTH),
        nullable=False,
    )
    start_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    end_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    language: Mapped[ShowtimeLanguage] = mapped_column(
        ENUM(ShowtimeLanguage, name='showtime_language', create_type=True),
        nullable=False,
    )
    format: Mapped[ShowtimeFormat] = mapped_column(
        ENUM(ShowtimeFormat, name='showtime_format', create_type=True),
        nullable=False,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ShowtimeStatus] = mapped_column(
        ENUM(ShowtimeStatus, name='showtime_status', create_type=True),
        nullable=False,
        default=ShowtimeStatus.ACTIVE,
        server_default=ShowtimeStatus.ACTIVE.value,
    )
    created_by: Mapped[str | None] = mapped_column(String(150), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(150), nullable=True)

    __table_args__ = (
        CheckConstraint('end_at > start_at', name='ck_showtime_interval'),
        CheckConstraint('capacity > 0', name='ck_showtime_capacity'),
        ExcludeConstraint(
            ('room_id', '='),
            (text("tstzrange(start_at, end_at, '[)')"), '&&'),
            name=SHOWTIME_NO_OVERLAP_CONSTRAINT,
            using='gist',
            where=text("status <> 'CANCELLED' AND deleted_at IS NULL"),
        ),
        Index('ix_showtime_room_start', 'room_id', 'start_at'),
    )
