"""Base record source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from charity_selector.selection.models import CandidateItem, UserProfile


class BaseRecordSource(ABC):
    """Abstract base for record sources.

    Subclasses return already-validated records, or raise a
    :class:`~charity_selector.selection.errors.SourceError` describing why the
    source is missing, empty or unreadable.
    """

    @abstractmethod
    async def load_candidates(self, location: str) -> List[CandidateItem]:
        """Load candidate charities, skipping rows that fail validation."""
        ...

    @abstractmethod
    async def load_profile(self, location: str) -> UserProfile:
        """Load the single user profile (the first record)."""
        ...
