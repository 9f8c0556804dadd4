"""create movie and showtime tables with no-overlap constraint

Revision ID: 4c1f0e2a9b7d
Revises:
Create Date: 2026-10-12 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '4c1f0e2a9b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

movie_status = postgresql.ENUM(
    'ACTIVE', 'INACTIVE', name='movie_status', create_type=False
)
showtime_status = postgresql.ENUM(
    'ACTIVE', 'INACTIVE', 'CANCELLED', name='showtime_status',
    create_type=False,
)
showtime_language = postgresql.ENUM(
    'DUBBED', 'SUBTITLED', name='showtime_language', create_type=False
)
showtime_format = postgresql.ENUM(
    'TWO_D', 'THREE_D', 'IMAX', name='showtime_format', create_type=False
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            'id',
            sa.UUID(),
            server_default=sa.text('gen_random_uuid()'),
            nullable=False,
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    # gist по room_id (=) требует btree_gist
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')

    bind = op.get_bind()
    for enum in (
        movie_status, showtime_status, showtime_language, showtime_format,
    ):
        enum.create(bind, checkfirst=True)

    op.create_table(
        'movie',
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('rating', sa.String(length=16), nullable=False),
        sa.Column('release_date', sa.Date(), nullable=True),
        sa.Column(
            'status',
            movie_status,
            server_default='ACTIVE',
            nullable=False,
        ),
        *_audit_columns(),
        sa.CheckConstraint(
            'duration_minutes > 0', name='ck_movie_duration_positive'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_movie_title', 'movie', ['title'])

    op.create_table(
        'showtime',
        sa.Column('movie_id', sa.UUID(), nullable=False),
        sa.Column('room_id', sa.String(length=50), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('language', showtime_language, nullable=False),
        sa.Column('format', showtime_format, nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            showtime_status,
            server_default='ACTIVE',
            nullable=False,
        ),
        sa.Column('created_by', sa.String(length=150), nullable=True),
        sa.Column('updated_by', sa.String(length=150), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint('end_at > start_at', name='ck_showtime_interval'),
        sa.CheckConstraint('capacity > 0', name='ck_showtime_capacity'),
        sa.ForeignKeyConstraint(
            ['movie_id'], ['movie.id'], ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_showtime_movie_id', 'showtime', ['movie_id'])
    op.create_index(
        'ix_showtime_room_start', 'showtime', ['room_id', 'start_at']
    )

    # Полуоткрытый диапазон '[)': касание границ пересечением не считается
    op.execute(
        'ALTER TABLE showtime ADD CONSTRAINT showtime_no_overlap '
        'EXCLUDE USING gist ('
        "room_id WITH =, tstzrange(start_at, end_at, '[)') WITH &&"
        ") WHERE (status <> 'CANCELLED' AND deleted_at IS NULL)"
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(
        'ALTER TABLE showtime DROP CONSTRAINT IF EXISTS showtime_no_overlap'
    )
    op.drop_index('ix_showtime_room_start', table_name='showtime')
    op.drop_index('ix_showtime_movie_id', table_name='showtime')
    op.drop_table('showtime')
    op.drop_index('ix_movie_title', table_name='movie')
    op.drop_table('movie')

    bind = op.get_bind()
    for enum in (
        showtime_format, showtime_language, showtime_status, movie_status,
    ):
        enum.drop(bind, checkfirst=True)
