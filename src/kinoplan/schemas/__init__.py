"""Pydantic schemas for the catalog snapshot."""

from kinoplan.schemas.snapshot import CinemaRecord, MovieRecord, ShowTimeRecord, Snapshot

__all__ = [
    "CinemaRecord",
    "MovieRecord",
    "ShowTimeRecord",
    "Snapshot",
]
