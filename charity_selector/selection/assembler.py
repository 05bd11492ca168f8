"""Merge rule and sampler draws, validate, and randomize the final order."""

from __future__ import annotations

import logging
from typing import Sequence

from charity_selector.selection.errors import InvariantError
from charity_selector.selection.models import (
    CandidateItem,
    CapacityPlan,
    RuleShortfallWarning,
    SelectionResult,
)
from charity_selector.selection.randomness import RandomSource

logger = logging.getLogger(__name__)


class ResultAssembler:
    def __init__(self, random_source: RandomSource) -> None:
        self.random = random_source

    def assemble(
        self,
        parts: Sequence[Sequence[CandidateItem]],
        plan: CapacityPlan,
        shortfalls: Sequence[RuleShortfallWarning] = (),
    ) -> SelectionResult:
        combined = [item for part in parts for item in part]

        if len(combined) != plan.total:
            raise InvariantError(
                f"Selection count mismatch: expected {plan.total}, got {len(combined)}"
            )
        ids = [item.id for item in combined]
        if len(set(ids)) != len(ids):
            raise InvariantError(f"Selection contains duplicate ids: {sorted(ids)}")

        result = SelectionResult(
            items=tuple(self.random.shuffle(combined)),
            plan=plan,
            shortfalls=tuple(shortfalls),
        )
        logger.info(
            "Final distribution: %d national, %d regional",
            result.national_count,
            result.regional_count,
        )
        return result
