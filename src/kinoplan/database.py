"""Canonical store engine and session factory."""

from kinoplan.config import settings
from kinoplan.utils.db import make_engine, make_session_factory

engine = make_engine(settings.database_url)
AsyncSessionLocal = make_session_factory(engine)
