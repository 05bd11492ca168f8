"""Tailoring engine: carve out category minimums across both pools."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from charity_selector.selection.errors import RuleShortfallError
from charity_selector.selection.models import (
    CandidateItem,
    CapacityPlan,
    DrawLedger,
    RuleShortfallWarning,
    SelectionConstraints,
    UserProfile,
)
from charity_selector.selection.partition import EligiblePools
from charity_selector.selection.randomness import RandomSource
from charity_selector.selection.rules import TailoringRule

logger = logging.getLogger(__name__)


@dataclass
class TailoringOutcome:
    """Items claimed by rules and the plan left for the sampler."""

    plan: CapacityPlan
    national: list[CandidateItem] = field(default_factory=list)
    regional: list[CandidateItem] = field(default_factory=list)
    shortfalls: list[RuleShortfallWarning] = field(default_factory=list)


class TailoringEngine:
    """Apply each applicable rule in declaration order.

    Rules are cumulative: an item claimed by an earlier rule is never
    re-selected, and each rule's draws are deducted from the plan before the
    next rule runs. When both scopes can contribute, each unit is assigned to
    a scope by a fair coin flip.
    """

    def __init__(
        self,
        rules: Sequence[TailoringRule],
        constraints: SelectionConstraints,
        random_source: RandomSource,
    ) -> None:
        self.rules = list(rules)
        self.constraints = constraints
        self.random = random_source

    def apply(
        self,
        profile: UserProfile,
        pools: EligiblePools,
        plan: CapacityPlan,
        ledger: DrawLedger,
    ) -> TailoringOutcome:
        outcome = TailoringOutcome(plan=plan)
        for rule in self.rules:
            if not rule.applies(profile):
                continue
            self._apply_rule(rule, profile, pools, outcome, ledger)
        return outcome

    # ------------------------------------------------------------------
    # Per-rule steps
    # ------------------------------------------------------------------

    def _apply_rule(
        self,
        rule: TailoringRule,
        profile: UserProfile,
        pools: EligiblePools,
        outcome: TailoringOutcome,
        ledger: DrawLedger,
    ) -> None:
        category = rule.target_category()
        required = rule.minimum_count(profile)
        national = [c for c in pools.national if c.category == category and c.id not in ledger]
        regional = [c for c in pools.regional if c.category == category and c.id not in ledger]

        plan = self._rebalance(outcome.plan, pools, required, len(national), len(regional))

        max_national = min(plan.national_remaining, len(national))
        max_regional = min(plan.regional_remaining, len(regional))
        achievable = min(required, max_national + max_regional)

        if achievable < required:
            shortfall = RuleShortfallWarning(
                rule=rule.name, category=category, required=required, achieved=achievable
            )
            if self.constraints.strict_minimums:
                raise RuleShortfallError(str(shortfall))
            logger.warning(
                "Only %d %s charities selectable (%d national + %d regional available, "
                "%d slots remaining), need %d",
                achievable,
                category,
                len(national),
                len(regional),
                plan.national_remaining + plan.regional_remaining,
                required,
            )
            outcome.shortfalls.append(shortfall)

        from_national, from_regional = self._split(achievable, max_national, max_regional)

        outcome.national.extend(ledger.record(self.random.sample(national, from_national)))
        outcome.regional.extend(ledger.record(self.random.sample(regional, from_regional)))
        outcome.plan = plan.claim(national=from_national, regional=from_regional).check(
            len(pools.national), len(pools.regional), self.constraints.max_regional_count
        )
        logger.info(
            "Applied %s rule: selected %d national + %d regional %s charities",
            rule.name,
            from_national,
            from_regional,
            category,
        )

    def _rebalance(
        self,
        plan: CapacityPlan,
        pools: EligiblePools,
        required: int,
        national_matches: int,
        regional_matches: int,
    ) -> CapacityPlan:
        """Shift slots toward the pool whose matching items lack capacity.

        Only spare slots move: a pool gives up capacity it would have filled
        with non-matching items, so the total never changes.
        """
        reachable = min(plan.national_remaining, national_matches) + min(
            plan.regional_remaining, regional_matches
        )
        deficit = min(required, national_matches + regional_matches) - reachable
        if deficit <= 0:
            return plan

        regional_cap = min(self.constraints.max_regional_count, len(pools.regional))
        if regional_matches > plan.regional_remaining:
            shift = min(
                deficit,
                regional_matches - plan.regional_remaining,
                regional_cap - plan.regional_target,
                plan.national_remaining - national_matches,
            )
            if shift <= 0:
                return plan
            plan = plan.shift_to_regional(shift)
        elif national_matches > plan.national_remaining:
            shift = min(
                deficit,
                national_matches - plan.national_remaining,
                len(pools.national) - plan.national_target,
                plan.regional_remaining - regional_matches,
            )
            if shift <= 0:
                return plan
            plan = plan.shift_to_national(shift)
        else:
            return plan

        logger.debug("Shifted %d slots for a deficit of %d: %s", shift, deficit, plan)
        return plan.check(len(pools.national), len(pools.regional), self.constraints.max_regional_count)

    def _split(self, count: int, max_national: int, max_regional: int) -> tuple[int, int]:
        """Assign ``count`` draws to scopes, one fair coin flip per unit."""
        from_national = from_regional = 0
        for _ in range(count):
            can_national = from_national < max_national
            can_regional = from_regional < max_regional
            if can_national and can_regional:
                if self.random.coin():
                    from_regional += 1
                else:
                    from_national += 1
            elif can_regional:
                from_regional += 1
            elif can_national:
                from_national += 1
        return from_national, from_regional
