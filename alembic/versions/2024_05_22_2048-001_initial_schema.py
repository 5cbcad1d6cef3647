"""initial schema

Revision ID: 001
Revises:
Create Date: 2024-05-22 20:48:40

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create cinemas table
    op.create_table(
        'cinemas',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('display_name', sa.String(length=200), nullable=False),
        sa.Column('website', sa.String(length=500), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False),
        sa.Column('reliable_metadata', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_shop', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cinemas_display_name'), 'cinemas', ['display_name'], unique=False)

    # Create movies table
    op.create_table(
        'movies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('display_name', sa.String(length=500), nullable=False),
        sa.Column('name_key', sa.String(length=500), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('release_date', sa.Date(), nullable=True),
        sa.Column('external_id', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('poster_url', sa.String(length=1000), nullable=True),
        sa.Column('trailer_url', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_key')
    )
    op.create_index(op.f('ix_movies_display_name'), 'movies', ['display_name'], unique=False)
    op.create_index(op.f('ix_movies_external_id'), 'movies', ['external_id'], unique=False)

    # Create movie_aliases table
    op.create_table(
        'movie_aliases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('movie_id', sa.Integer(), nullable=False),
        sa.Column('alias', sa.String(length=500), nullable=False),
        sa.Column('alias_key', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('movie_id', 'alias', name='uq_movie_alias')
    )
    op.create_index(op.f('ix_movie_aliases_movie_id'), 'movie_aliases', ['movie_id'], unique=False)
    op.create_index(op.f('ix_movie_aliases_alias_key'), 'movie_aliases', ['alias_key'], unique=False)

    # Create showtimes table
    op.create_table(
        'showtimes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('cinema_id', sa.String(length=100), nullable=False),
        sa.Column('movie_id', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('language', sa.String(length=20), nullable=False),
        sa.Column('dub_variant', sa.String(length=20), nullable=False),
        sa.Column('special_event', sa.String(length=200), nullable=True),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('shop_url', sa.String(length=1000), nullable=True),
        sa.Column('raw_title', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['cinema_id'], ['cinemas.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cinema_id', 'movie_id', 'start_time', name='uq_cinema_movie_time')
    )
    op.create_index(op.f('ix_showtimes_cinema_id'), 'showtimes', ['cinema_id'], unique=False)
    op.create_index(op.f('ix_showtimes_movie_id'), 'showtimes', ['movie_id'], unique=False)
    op.create_index(op.f('ix_showtimes_start_time'), 'showtimes', ['start_time'], unique=False)


def downgrade() -> None:
    op.drop_table('showtimes')
    op.drop_table('movie_aliases')
    op.drop_table('movies')
    op.drop_table('cinemas')
