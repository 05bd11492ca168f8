"""CSV record source with retry on transient read errors."""

from __future__ import annotations

import asyncio
import csv
import logging
from pathlib import Path
from typing import Any, Dict, List

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from charity_selector.selection.errors import (
    ConfigError,
    EmptySourceError,
    SourceNotFoundError,
    SourceReadError,
)
from charity_selector.selection.models import CandidateItem, UserProfile
from charity_selector.sources.base import BaseRecordSource
from charity_selector.sources.parsing import parse_candidates, parse_user_profile

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8-sig"
DEFAULT_RETRY_ATTEMPTS = 3


class CsvRecordSource(BaseRecordSource):
    """Load charities and profiles from CSV files with a header row."""

    def __init__(self, config: Dict[str, Any] | None = None) -> None:
        config = config or {}
        self.encoding: str = config.get("encoding", DEFAULT_ENCODING)
        try:
            self.retry_attempts: int = int(config.get("retry_attempts", DEFAULT_RETRY_ATTEMPTS))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid retry_attempts: {config.get('retry_attempts')!r}") from e
        self._read_with_retry = retry(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(max(1, self.retry_attempts)),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        )(self._read_rows)

    async def load_candidates(self, location: str) -> List[CandidateItem]:
        rows = await self.read(location)
        return parse_candidates(rows, source=location)

    async def load_profile(self, location: str) -> UserProfile:
        rows = await self.read(location)
        profile = parse_user_profile(rows[0])
        logger.info(
            "User profile loaded: %s from %s, has_pets: %s",
            profile.name,
            profile.region,
            profile.has_pets,
        )
        return profile

    async def read(self, location: str) -> List[Dict[str, str]]:
        """Read all rows as dicts. Runs in an executor to avoid blocking."""
        path = Path(location)
        if not path.exists():
            raise SourceNotFoundError(f"CSV file not found: {location}")
        if not path.is_file():
            raise SourceNotFoundError(f"Path is not a file: {location}")
        if path.stat().st_size == 0:
            raise EmptySourceError(f"CSV file is empty: {location}")

        loop = asyncio.get_running_loop()
        try:
            rows = await loop.run_in_executor(None, self._read_with_retry, path)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise SourceReadError(f"Failed to read CSV file: {location}. {e}") from e

        if not rows:
            raise EmptySourceError(f"No valid data found in CSV file: {location}")
        logger.info("Successfully loaded %d records from %s", len(rows), location)
        return rows

    def _read_rows(self, path: Path) -> List[Dict[str, str]]:
        with open(path, "r", encoding=self.encoding, newline="") as f:
            reader = csv.DictReader(f)
            # Short rows fill with None; drop rows that are entirely blank
            return [
                {key: (value or "") for key, value in row.items() if key is not None}
                for row in reader
                if any((value or "").strip() for value in row.values() if isinstance(value, str))
            ]
