"""Data model for the selection engine: candidates, profiles, constraints, plans, results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from charity_selector.selection.errors import ConfigError, InvariantError

DEFAULT_TOTAL_COUNT = 12
DEFAULT_MAX_REGIONAL_COUNT = 5


class Scope(str, Enum):
    """Where a candidate is featured."""

    NATIONAL = "NATIONAL"
    REGIONAL = "REGIONAL"
    UNSET = ""

    @classmethod
    def parse(cls, raw: str | None) -> Scope:
        """Map a raw ``featured`` value to a scope. ``STATE`` is an alias of ``REGIONAL``."""
        value = (raw or "").strip().upper()
        if value == "STATE":
            return cls.REGIONAL
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"invalid scope value: {raw!r}") from None

    @property
    def label(self) -> str:
        # Tabular sources spell the regional scope STATE
        return "STATE" if self is Scope.REGIONAL else self.value


@dataclass(frozen=True)
class CandidateItem:
    """A single selectable charity."""

    id: str
    name: str
    region: str
    category: str
    scope: Scope = Scope.UNSET

    def __post_init__(self) -> None:
        if not self.id or not self.name:
            raise ValueError("candidate missing required fields (id, name)")
        if self.scope is Scope.REGIONAL and not self.region:
            raise ValueError(f"regional candidate {self.id} missing region")

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> CandidateItem:
        """Create from a tabular row (``id,name,state,category,featured``)."""
        return cls(
            id=(row.get("id") or "").strip(),
            name=(row.get("name") or "").strip(),
            region=(row.get("state") or row.get("region") or "").strip(),
            category=(row.get("category") or "").strip(),
            scope=Scope.parse(row.get("featured", row.get("scope"))),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.region,
            "category": self.category,
            "featured": self.scope.label,
        }


@dataclass(frozen=True)
class UserProfile:
    """The requesting user. Read-only for the duration of one selection."""

    id: str
    name: str
    region: str
    is_married: bool = False
    has_children: bool = False
    has_pets: bool = False
    age: int = 0

    @property
    def is_identified(self) -> bool:
        return bool(self.id and self.name and self.region)

    def attribute(self, name: str) -> Any:
        """Look up a preference attribute by name, ``None`` if unknown."""
        return getattr(self, name, None)


@dataclass(frozen=True)
class SelectionConstraints:
    """Process-wide selection limits."""

    total_count: int = DEFAULT_TOTAL_COUNT
    max_regional_count: int = DEFAULT_MAX_REGIONAL_COUNT
    strict_minimums: bool = False

    def __post_init__(self) -> None:
        if self.total_count < 1:
            raise ConfigError(f"total_count must be positive, got {self.total_count}")
        if not 0 <= self.max_regional_count <= self.total_count:
            raise ConfigError(
                f"max_regional_count must be within [0, {self.total_count}], "
                f"got {self.max_regional_count}"
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> SelectionConstraints:
        selection = config.get("selection") or {}
        if not isinstance(selection, dict):
            raise ConfigError("selection config must be a mapping")
        try:
            total = int(selection.get("total_count", DEFAULT_TOTAL_COUNT))
            max_regional = int(selection.get("max_regional_count", DEFAULT_MAX_REGIONAL_COUNT))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid selection config: {e}") from e
        return cls(
            total_count=total,
            max_regional_count=max_regional,
            strict_minimums=bool(selection.get("strict_minimums", False)),
        )


@dataclass(frozen=True)
class CapacityPlan:
    """Allocation of output slots between the national and regional pools.

    ``*_claimed`` counts slots already filled by tailoring rules. Every
    transition returns a new plan; call :meth:`check` after each one.
    """

    national_target: int
    regional_target: int
    national_claimed: int = 0
    regional_claimed: int = 0

    @property
    def total(self) -> int:
        return self.national_target + self.regional_target

    @property
    def national_remaining(self) -> int:
        return self.national_target - self.national_claimed

    @property
    def regional_remaining(self) -> int:
        return self.regional_target - self.regional_claimed

    def shift_to_regional(self, count: int) -> CapacityPlan:
        return replace(
            self,
            national_target=self.national_target - count,
            regional_target=self.regional_target + count,
        )

    def shift_to_national(self, count: int) -> CapacityPlan:
        return replace(
            self,
            national_target=self.national_target + count,
            regional_target=self.regional_target - count,
        )

    def claim(self, *, national: int = 0, regional: int = 0) -> CapacityPlan:
        return replace(
            self,
            national_claimed=self.national_claimed + national,
            regional_claimed=self.regional_claimed + regional,
        )

    def check(self, national_size: int, regional_size: int, max_regional: int) -> CapacityPlan:
        """Raise :class:`InvariantError` unless every count is within bounds."""
        problems: list[str] = []
        if min(self.national_target, self.regional_target,
               self.national_claimed, self.regional_claimed) < 0:
            problems.append("negative count")
        if self.national_target > national_size:
            problems.append(f"national target {self.national_target} > pool {national_size}")
        if self.regional_target > regional_size:
            problems.append(f"regional target {self.regional_target} > pool {regional_size}")
        if self.regional_target > max_regional:
            problems.append(f"regional target {self.regional_target} > max {max_regional}")
        if self.national_remaining < 0 or self.regional_remaining < 0:
            problems.append("claims exceed targets")
        if problems:
            raise InvariantError(f"capacity plan {self} invalid: {'; '.join(problems)}")
        return self


class DrawLedger:
    """Running set of ids drawn during one selection call."""

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def record(self, items: list[CandidateItem]) -> list[CandidateItem]:
        """Register freshly drawn items; a repeated id is a bug."""
        for item in items:
            if item.id in self._ids:
                raise InvariantError(f"duplicate charity id drawn: {item.id}")
            self._ids.add(item.id)
        return items


@dataclass(frozen=True)
class RuleShortfallWarning:
    """A tailoring rule minimum that could only be partly met."""

    rule: str
    category: str
    required: int
    achieved: int

    def __str__(self) -> str:
        return (
            f"{self.rule}: only {self.achieved} {self.category} charities "
            f"selectable, need {self.required}"
        )


@dataclass(frozen=True)
class SelectionResult:
    """Final randomized ordering of selected candidates."""

    items: tuple[CandidateItem, ...]
    plan: CapacityPlan
    shortfalls: tuple[RuleShortfallWarning, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def ids(self) -> list[str]:
        return [item.id for item in self.items]

    @property
    def national_count(self) -> int:
        return sum(1 for item in self.items if item.scope is Scope.NATIONAL)

    @property
    def regional_count(self) -> int:
        return sum(1 for item in self.items if item.scope is Scope.REGIONAL)

    def category_counts(self) -> dict[str, int]:
        return dict(Counter(item.category for item in self.items))

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": len(self.items),
            "national": self.national_count,
            "regional": self.regional_count,
            "shortfalls": [str(s) for s in self.shortfalls],
        }
