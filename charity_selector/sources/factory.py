"""Source factory: build the record source named by the ``source`` config section."""

from __future__ import annotations

from typing import Any, Dict

from charity_selector.selection.errors import ConfigError
from charity_selector.sources.base import BaseRecordSource
from charity_selector.sources.csv_source import CsvRecordSource


def build_source(config: Dict[str, Any]) -> BaseRecordSource:
    """Return a record source for the given ``source`` config section.

    Only ``csv`` is built in; it is also the default when ``type`` is absent.
    """
    if not isinstance(config, dict):
        raise ConfigError("source config must be a mapping")
    source_type = str(config.get("type") or "csv").lower().strip()
    if source_type == "csv":
        return CsvRecordSource(config)
    raise ConfigError(f"unknown source type: {source_type!r}")
