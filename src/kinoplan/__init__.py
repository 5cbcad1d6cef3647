"""Cinema showtime aggregation and client cache synchronisation."""

__version__ = "0.1.0"
