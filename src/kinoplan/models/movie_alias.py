"""Movie alias model for every raw title a movie was resolved from."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kinoplan.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from kinoplan.models.movie import Movie


class MovieAlias(Base, TimestampMixin):
    """
    Movie alias model.

    Stores raw titles exactly as sources spelled them, plus their comparison
    key so later showings can be matched without re-normalizing.
    """

    __tablename__ = "movie_aliases"
    __table_args__ = (UniqueConstraint("movie_id", "alias", name="uq_movie_alias"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    movie_id: Mapped[int] = mapped_column(
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    alias: Mapped[str] = mapped_column(String(500), nullable=False)
    alias_key: Mapped[str] = mapped_column(String(500), nullable=False, index=True)

    # Relationships
    movie: Mapped["Movie"] = relationship(back_populates="aliases")

    def __repr__(self) -> str:
        return f"<MovieAlias(alias={self.alias!r}, movie_id={self.movie_id!r})>"
