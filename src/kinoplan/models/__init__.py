"""SQLAlchemy ORM models."""

from kinoplan.models.base import Base
from kinoplan.models.cinema import Cinema
from kinoplan.models.enums import DubVariant, Language
from kinoplan.models.movie import Movie
from kinoplan.models.movie_alias import MovieAlias
from kinoplan.models.showtime import ShowTime

__all__ = ["Base", "Cinema", "DubVariant", "Language", "Movie", "MovieAlias", "ShowTime"]
