"""Scraper registry for the cinemas that are aggregated."""

from typing import Type

from kinoplan.scrapers.apollo import ApolloScraper
from kinoplan.scrapers.astor import AstorScraper
from kinoplan.scrapers.base import BaseScraper
from kinoplan.scrapers.csv_source import CsvScraper

# Registry mapping scraper names to scraper classes, in run order
SCRAPER_REGISTRY: dict[str, Type[BaseScraper]] = {
    "astor": AstorScraper,
    "apollo": ApolloScraper,
}


def get_scrapers(names: list[str] | None = None) -> list[BaseScraper]:
    """
    Instantiate registered scrapers.

    Args:
        names: Scraper names to include (all registered scrapers if None)

    Returns:
        Scraper instances in registry order

    Raises:
        KeyError: if a requested name is not registered
    """
    if names is None:
        return [scraper_class() for scraper_class in SCRAPER_REGISTRY.values()]
    unknown = [name for name in names if name not in SCRAPER_REGISTRY]
    if unknown:
        raise KeyError(f"Unknown scrapers: {', '.join(unknown)}")
    return [scraper_class() for name, scraper_class in SCRAPER_REGISTRY.items() if name in names]


__all__ = [
    "SCRAPER_REGISTRY",
    "get_scrapers",
    "BaseScraper",
    "ApolloScraper",
    "AstorScraper",
    "CsvScraper",
]
