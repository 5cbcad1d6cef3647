"""Exception types for ingestion and cache synchronisation failures."""


class KinoplanError(Exception):
    """Base class for all kinoplan errors."""


class SourceUnavailableError(KinoplanError):
    """A source adapter could not fetch or parse its listing.

    Isolated to that adapter's run: nothing from the run is committed.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class MalformedRecordError(KinoplanError):
    """A single raw showing could not be used; the record is skipped."""


class SyncUnavailableError(KinoplanError):
    """The version marker or snapshot could not be fetched or parsed."""


class ApplyFailureError(KinoplanError):
    """A fetched snapshot could not be written to the local store."""
