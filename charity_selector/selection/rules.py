"""Tailoring rules: category minimums activated by user attributes.

A rule implements three operations: :meth:`TailoringRule.applies`,
:meth:`TailoringRule.minimum_count` and :meth:`TailoringRule.target_category`.
Rules are built from the ``tailoring.rules`` config list, in declaration
order, via the :data:`RULE_TYPES` registry. New rule types register here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from charity_selector.selection.errors import ConfigError
from charity_selector.selection.models import UserProfile

ANIMAL_CATEGORY = "ANIMAL_RELATED"
DEFAULT_PET_MINIMUM = 4


class TailoringRule(ABC):
    """Abstract base for category-minimum rules."""

    name: str = "rule"

    @abstractmethod
    def applies(self, profile: UserProfile) -> bool:
        ...

    @abstractmethod
    def minimum_count(self, profile: UserProfile) -> int:
        ...

    @abstractmethod
    def target_category(self) -> str:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}: {self.target_category()}>"


class PetOwnerRule(TailoringRule):
    """Pet owners see at least ``minimum`` animal-related charities."""

    name = "pet_owner"

    def __init__(self, minimum: int = DEFAULT_PET_MINIMUM, category: str = ANIMAL_CATEGORY) -> None:
        self.minimum = minimum
        self.category = category

    def applies(self, profile: UserProfile) -> bool:
        return profile.has_pets

    def minimum_count(self, profile: UserProfile) -> int:
        return self.minimum

    def target_category(self) -> str:
        return self.category


class AttributeRule(TailoringRule):
    """Generic rule keyed on any truthy profile attribute."""

    def __init__(self, attribute: str, category: str, minimum: int, name: str | None = None) -> None:
        self.attribute = attribute
        self.category = category
        self.minimum = minimum
        self.name = name or f"{attribute}:{category}"

    def applies(self, profile: UserProfile) -> bool:
        return bool(profile.attribute(self.attribute))

    def minimum_count(self, profile: UserProfile) -> int:
        return self.minimum

    def target_category(self) -> str:
        return self.category


def _coerce_minimum(cfg: Dict[str, Any], default: Any) -> int:
    try:
        minimum = int(cfg.get("minimum", default))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid rule minimum: {cfg.get('minimum')!r}") from e
    if minimum < 0:
        raise ConfigError(f"{cfg.get('type')} rule minimum must be non-negative")
    return minimum


def _build_pet_owner(cfg: Dict[str, Any]) -> TailoringRule:
    return PetOwnerRule(
        minimum=_coerce_minimum(cfg, DEFAULT_PET_MINIMUM),
        category=cfg.get("category", ANIMAL_CATEGORY),
    )


def _build_attribute(cfg: Dict[str, Any]) -> TailoringRule:
    missing = [key for key in ("attribute", "category", "minimum") if key not in cfg]
    if missing:
        raise ConfigError(f"attribute rule missing keys: {', '.join(missing)}")
    if cfg["attribute"] not in UserProfile.__dataclass_fields__:
        raise ConfigError(f"unknown profile attribute: {cfg['attribute']}")
    return AttributeRule(
        attribute=cfg["attribute"],
        category=cfg["category"],
        minimum=_coerce_minimum(cfg, 0),
        name=cfg.get("name"),
    )


RULE_TYPES: Dict[str, Callable[[Dict[str, Any]], TailoringRule]] = {
    "pet_owner": _build_pet_owner,
    "attribute": _build_attribute,
}


def default_rules() -> List[TailoringRule]:
    return [PetOwnerRule()]


def build_rules(config: Dict[str, Any]) -> List[TailoringRule]:
    """Return the configured rules in declaration order.

    A missing ``tailoring.rules`` key yields :func:`default_rules`; an empty
    list disables tailoring.
    """
    tailoring = config.get("tailoring") or {}
    if not isinstance(tailoring, dict):
        raise ConfigError("tailoring config must be a mapping")
    if "rules" not in tailoring:
        return default_rules()
    entries = tailoring["rules"] or []
    if not isinstance(entries, list):
        raise ConfigError("tailoring.rules must be a list")

    rules: List[TailoringRule] = []
    for cfg in entries:
        if not isinstance(cfg, dict):
            raise ConfigError(f"tailoring rule must be a mapping, got {cfg!r}")
        rule_type = str(cfg.get("type") or "").lower().strip()
        builder = RULE_TYPES.get(rule_type)
        if builder is None:
            raise ConfigError(f"unknown tailoring rule type: {rule_type!r}")
        rules.append(builder(cfg))
    return rules
