"""Cinema model for storing venue information."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kinoplan.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from kinoplan.models.showtime import ShowTime


class Cinema(Base, TimestampMixin):
    """
    Cinema venue model.

    One row per registered source adapter; rows are upserted from the
    adapter's configuration rather than discovered from scraped data.
    """

    __tablename__ = "cinemas"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    website: Mapped[str] = mapped_column(String(500), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#000000")

    # Whether movie metadata from this source may overwrite existing values
    reliable_metadata: Mapped[bool] = mapped_column(default=False, nullable=False)
    has_shop: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Relationships
    showtimes: Mapped[list["ShowTime"]] = relationship(
        back_populates="cinema",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Cinema(id={self.id!r}, display_name={self.display_name!r})>"
