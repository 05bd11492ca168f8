"""Pool partitioning: split eligible candidates into national and regional pools."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from charity_selector.selection.errors import SupplyError
from charity_selector.selection.models import CandidateItem, Scope, SelectionConstraints, UserProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligiblePools:
    """Candidates selectable for one user, by scope."""

    national: tuple[CandidateItem, ...]
    regional: tuple[CandidateItem, ...]

    @property
    def total(self) -> int:
        return len(self.national) + len(self.regional)

    def category_counts(self) -> dict[str, dict[str, int]]:
        return {
            "national": dict(Counter(c.category for c in self.national)),
            "regional": dict(Counter(c.category for c in self.regional)),
        }


class PoolPartitioner:
    """Build the national pool and the region pool matching the user's region.

    Candidates with an unset scope, and regional candidates from other regions,
    belong to neither pool and are never selected.
    """

    def __init__(self, constraints: SelectionConstraints) -> None:
        self.constraints = constraints

    def partition(self, candidates: Iterable[CandidateItem], profile: UserProfile) -> EligiblePools:
        national: list[CandidateItem] = []
        regional: list[CandidateItem] = []
        for item in candidates:
            if item.scope is Scope.NATIONAL:
                national.append(item)
            elif item.scope is Scope.REGIONAL and item.region == profile.region:
                regional.append(item)

        pools = EligiblePools(national=tuple(national), regional=tuple(regional))
        logger.info(
            "Available: %d national, %d regional (%s) charities",
            len(pools.national),
            len(pools.regional),
            profile.region,
        )
        return pools

    def ensure_supply(self, pools: EligiblePools) -> None:
        """Reject up front when the eligible pools cannot fill the output."""
        required = self.constraints.total_count
        if pools.total < required:
            raise SupplyError(
                f"Insufficient charities: need {required}, have {pools.total} "
                f"({len(pools.national)} national + {len(pools.regional)} regional)",
                required=required,
                available=pools.total,
                national=len(pools.national),
                regional=len(pools.regional),
            )
