"""Selection engine: pools, capacity planning, tailoring rules, sampling."""

from charity_selector.selection.engine import SelectionEngine
from charity_selector.selection.errors import (
    InvariantError,
    ProfileError,
    RuleShortfallError,
    SelectionError,
    SupplyError,
)
from charity_selector.selection.models import (
    CandidateItem,
    CapacityPlan,
    RuleShortfallWarning,
    Scope,
    SelectionConstraints,
    SelectionResult,
    UserProfile,
)
from charity_selector.selection.randomness import NumpyRandomSource, RandomSource
from charity_selector.selection.rules import AttributeRule, PetOwnerRule, TailoringRule, build_rules

__all__ = [
    "SelectionEngine",
    "SelectionError",
    "SupplyError",
    "ProfileError",
    "InvariantError",
    "RuleShortfallError",
    "CandidateItem",
    "CapacityPlan",
    "RuleShortfallWarning",
    "Scope",
    "SelectionConstraints",
    "SelectionResult",
    "UserProfile",
    "NumpyRandomSource",
    "RandomSource",
    "AttributeRule",
    "PetOwnerRule",
    "TailoringRule",
    "build_rules",
]
