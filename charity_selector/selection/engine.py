"""Selection engine: partition → plan → tailor → sample → assemble."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from charity_selector.selection.assembler import ResultAssembler
from charity_selector.selection.capacity import CapacityPlanner
from charity_selector.selection.errors import ProfileError
from charity_selector.selection.models import (
    CandidateItem,
    DrawLedger,
    SelectionConstraints,
    SelectionResult,
    UserProfile,
)
from charity_selector.selection.partition import PoolPartitioner
from charity_selector.selection.randomness import NumpyRandomSource, RandomSource
from charity_selector.selection.rules import TailoringRule, build_rules
from charity_selector.selection.sampler import Sampler
from charity_selector.selection.tailoring import TailoringEngine

logger = logging.getLogger(__name__)


class SelectionEngine:
    """End-to-end selection of a randomized, constraint-satisfying subset.

    Holds no per-call state: every :meth:`select` call is independent.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        random_source: RandomSource | None = None,
        rules: Sequence[TailoringRule] | None = None,
    ) -> None:
        config = config or {}
        self.constraints = SelectionConstraints.from_config(config)
        self.random = random_source or NumpyRandomSource()
        self.rules = list(rules) if rules is not None else build_rules(config)

        self.partitioner = PoolPartitioner(self.constraints)
        self.planner = CapacityPlanner(self.constraints, self.random)
        self.tailoring = TailoringEngine(self.rules, self.constraints, self.random)
        self.sampler = Sampler(self.random)
        self.assembler = ResultAssembler(self.random)

    def select(self, candidates: Iterable[CandidateItem], profile: UserProfile) -> SelectionResult:
        """Run the full pipeline for one user.

        Raises
        ------
        ProfileError
            The profile lacks id, name or region.
        SupplyError
            The eligible pools cannot fill ``total_count``; raised before any draw.
        RuleShortfallError
            Only with ``strict_minimums``: a rule minimum cannot be met.
        InvariantError
            Internal consistency failure.
        """
        if not profile.is_identified:
            raise ProfileError("Profile missing required fields (id, name, state)")
        logger.info(
            "Selecting %d charities for %s from %s (has_pets=%s)",
            self.constraints.total_count,
            profile.name,
            profile.region,
            profile.has_pets,
        )

        # 1. Partition into pools and check supply
        pools = self.partitioner.partition(candidates, profile)
        self.partitioner.ensure_supply(pools)

        # 2. Size the regional/national split
        plan = self.planner.plan(pools)

        # 3. Tailoring rules claim their minimums
        ledger = DrawLedger()
        tailored = self.tailoring.apply(profile, pools, plan, ledger)
        plan = tailored.plan

        # 4. Fill the remaining capacity
        extra_national = self.sampler.fill(pools.national, plan.national_remaining, ledger)
        extra_regional = self.sampler.fill(pools.regional, plan.regional_remaining, ledger)

        # 5. Validate and shuffle
        result = self.assembler.assemble(
            [tailored.national, tailored.regional, extra_national, extra_regional],
            plan,
            tailored.shortfalls,
        )
        logger.info("Successfully selected %d charities", len(result))
        return result
