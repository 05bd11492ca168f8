"""Record sources for the charity selector.

Supported types: csv.
"""

from charity_selector.sources.base import BaseRecordSource
from charity_selector.sources.csv_source import CsvRecordSource
from charity_selector.sources.factory import build_source
from charity_selector.sources.parsing import parse_candidates, parse_user_profile

__all__ = [
    "BaseRecordSource",
    "CsvRecordSource",
    "build_source",
    "parse_candidates",
    "parse_user_profile",
]
