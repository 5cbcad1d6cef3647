"""ShowTime model for scheduled screenings."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kinoplan.models.base import Base, TimestampMixin
from kinoplan.models.enums import DubVariant, Language
from kinoplan.utils.sqltypes import UTCDateTime

if TYPE_CHECKING:
    from kinoplan.models.cinema import Cinema
    from kinoplan.models.movie import Movie


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values ('subtitled') rather than member names."""
    return [member.value for member in enum_cls]


class ShowTime(Base, TimestampMixin):
    """
    Screening model.

    Links a cinema, a movie and a start time. Rows are never updated after
    insert; a re-scrape of the same (cinema, movie, start_time) is skipped.
    """

    __tablename__ = "showtimes"
    __table_args__ = (
        UniqueConstraint(
            "cinema_id",
            "movie_id",
            "start_time",
            name="uq_cinema_movie_time",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Foreign keys
    cinema_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("cinemas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    movie_id: Mapped[int] = mapped_column(
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Screening details
    start_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    language: Mapped[Language] = mapped_column(
        Enum(Language, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
        default=Language.UNKNOWN,
    )
    dub_variant: Mapped[DubVariant] = mapped_column(
        Enum(DubVariant, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
        default=DubVariant.REGULAR,
    )
    special_event: Mapped[str | None] = mapped_column(String(200), nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    shop_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Debugging: store the original title from the cinema website
    raw_title: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    cinema: Mapped["Cinema"] = relationship(back_populates="showtimes")
    movie: Mapped["Movie"] = relationship(back_populates="showtimes")

    def __repr__(self) -> str:
        return (
            f"<ShowTime(cinema_id={self.cinema_id!r}, "
            f"movie_id={self.movie_id!r}, "
            f"start_time={self.start_time})>"
        )
