"""Capacity planning: randomly size the regional vs. national split."""

from __future__ import annotations

import logging

from charity_selector.selection.errors import SupplyError
from charity_selector.selection.models import CapacityPlan, SelectionConstraints
from charity_selector.selection.partition import EligiblePools
from charity_selector.selection.randomness import RandomSource

logger = logging.getLogger(__name__)


class CapacityPlanner:
    """Decide how many output slots each pool fills."""

    def __init__(self, constraints: SelectionConstraints, random_source: RandomSource) -> None:
        self.constraints = constraints
        self.random = random_source

    def max_regional(self, pools: EligiblePools) -> int:
        return min(self.constraints.max_regional_count, len(pools.regional))

    def plan(self, pools: EligiblePools) -> CapacityPlan:
        """Return a checked plan whose total equals ``total_count``.

        Raises :class:`SupplyError` before any draw when the pools cannot
        reach the total under the regional cap.
        """
        total = self.constraints.total_count
        national_size = len(pools.national)
        max_regional = self.max_regional(pools)

        regional = self.random.randint(0, max_regional)
        plan = CapacityPlan(national_target=total - regional, regional_target=regional)

        if plan.national_target > national_size:
            shortage = plan.national_target - national_size
            logger.warning(
                "Insufficient national charities: need %d, have %d. Adjusting targets.",
                plan.national_target,
                national_size,
            )
            plan = plan.shift_to_regional(min(shortage, max_regional - plan.regional_target))

            if plan.national_target > national_size:
                plan = CapacityPlan(national_target=national_size, regional_target=plan.regional_target)
                if plan.total < total:
                    raise SupplyError(
                        f"Insufficient total charities: need {total}, have {plan.total} "
                        f"({national_size} national + {plan.regional_target} regional, "
                        f"short by {total - plan.total})",
                        required=total,
                        available=plan.total,
                        national=national_size,
                        regional=len(pools.regional),
                    )

        plan.check(national_size, len(pools.regional), self.constraints.max_regional_count)
        logger.info(
            "Target selection: %d national + %d regional = %d total",
            plan.national_target,
            plan.regional_target,
            plan.total,
        )
        return plan
