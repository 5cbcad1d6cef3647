"""Adapter for cinemas whose programme is maintained by hand in a CSV file."""

import logging
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pandas as pd

from kinoplan.config import settings
from kinoplan.exceptions import MalformedRecordError, SourceUnavailableError
from kinoplan.scrapers.base import BaseScraper
from kinoplan.scrapers.models import RawShowing
from kinoplan.utils.text import title_annotations

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Time", "Title")


class CsvScraper(BaseScraper):
    """
    Reads ``Time,Title[,Url]`` rows from ``<csv_dir>/<file_name>``.

    Subclasses set ``cinema`` and ``file_name``. Times are ISO 8601; a time
    without an offset is local to the configured timezone. Rows without a
    URL link to the cinema website.
    """

    file_name: str

    def __init__(self, csv_dir: Path | None = None) -> None:
        self.csv_dir = csv_dir or settings.csv_dir
        self.tz = ZoneInfo(settings.timezone)

    @property
    def path(self) -> Path:
        return self.csv_dir / self.file_name

    async def get_showings(self) -> list[RawShowing]:
        frame = self._read_frame()

        showings: list[RawShowing] = []
        for index, row in enumerate(frame.to_dict("records"), start=1):
            try:
                showings.append(self._parse_row(row))
            except MalformedRecordError as e:
                logger.warning(f"{self.name}: Skipping row {index} of {self.path.name}: {e}")

        logger.info(f"{self.name}: Read {len(showings)} showings from {self.path}")
        return showings

    def _read_frame(self) -> pd.DataFrame:
        if not self.path.is_file():
            raise SourceUnavailableError(self.name, f"file {self.path} does not exist")

        try:
            frame = pd.read_csv(
                self.path,
                dtype=str,
                encoding="utf-8-sig",
                keep_default_na=False,
                skipinitialspace=True,
                engine="python",
                on_bad_lines=self._skip_bad_line,
            )
        except pd.errors.EmptyDataError as e:
            raise SourceUnavailableError(self.name, f"file {self.path} is empty") from e
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise SourceUnavailableError(self.name, f"cannot read {self.path}: {e}") from e

        missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
        if missing:
            raise SourceUnavailableError(self.name, f"{self.path} lacks columns {', '.join(missing)}")
        if frame.empty:
            raise SourceUnavailableError(self.name, f"no records in {self.path}")
        return frame.fillna("")

    def _skip_bad_line(self, fields: list[str]) -> None:
        logger.warning(f"{self.name}: Skipping malformed line in {self.path.name}: {fields}")
        return None

    def _parse_row(self, row: dict[str, str]) -> RawShowing:
        title = row["Title"].strip()
        if not title:
            raise MalformedRecordError("empty title")

        try:
            start = datetime.fromisoformat(row["Time"].strip())
        except ValueError as e:
            raise MalformedRecordError(f"unreadable time {row['Time']!r}") from e
        if start.tzinfo is None:
            start = start.replace(tzinfo=self.tz)

        url = row.get("Url", "").strip()
        return RawShowing(
            title=title,
            start_time=start,
            url=url or None,
            hint=" ".join(title_annotations(title)),
        )
