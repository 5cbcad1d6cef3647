"""Movie model for canonical film records."""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kinoplan.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from kinoplan.models.movie_alias import MovieAlias
    from kinoplan.models.showtime import ShowTime


class Movie(Base, TimestampMixin):
    """
    Movie model.

    ``name_key`` is the case- and diacritic-insensitive form of the display
    name and is unique across the table. Movies are never deleted by the
    ingestion pipeline; the catalog export simply leaves out movies without
    upcoming showtimes.
    """

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    display_name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    name_key: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)

    # Optional metadata, backfilled from sources or TMDb
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    external_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    poster_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    trailer_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Relationships
    showtimes: Mapped[list["ShowTime"]] = relationship(
        back_populates="movie",
        cascade="all, delete-orphan",
    )
    aliases: Mapped[list["MovieAlias"]] = relationship(
        back_populates="movie",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Movie(id={self.id!r}, display_name={self.display_name!r})>"
