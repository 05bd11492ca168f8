"""Fill the capacity left after tailoring with uniform draws."""

from __future__ import annotations

import logging
from typing import Sequence

from charity_selector.selection.models import CandidateItem, DrawLedger
from charity_selector.selection.randomness import RandomSource

logger = logging.getLogger(__name__)


class Sampler:
    """Draw without replacement from the unclaimed members of a pool."""

    def __init__(self, random_source: RandomSource) -> None:
        self.random = random_source

    def fill(
        self,
        pool: Sequence[CandidateItem],
        count: int,
        ledger: DrawLedger,
    ) -> list[CandidateItem]:
        """Return ``count`` unclaimed items, or the whole remainder if fewer exist."""
        remaining = [c for c in pool if c.id not in ledger]
        if count >= len(remaining):
            if count > len(remaining):
                logger.debug("Pool has %d unclaimed items for %d slots", len(remaining), count)
            drawn = self.random.shuffle(remaining)
        else:
            drawn = self.random.sample(remaining, count)
        return ledger.record(drawn)
