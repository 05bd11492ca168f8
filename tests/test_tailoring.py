"""Tests for tailoring rules, the tailoring engine, the sampler and the assembler."""

from __future__ import annotations

import pytest

from charity_selector.selection.assembler import ResultAssembler
from charity_selector.selection.errors import ConfigError, InvariantError, RuleShortfallError
from charity_selector.selection.models import (
    CandidateItem,
    CapacityPlan,
    DrawLedger,
    Scope,
    SelectionConstraints,
    UserProfile,
)
from charity_selector.selection.partition import EligiblePools
from charity_selector.selection.rules import (
    ANIMAL_CATEGORY,
    AttributeRule,
    PetOwnerRule,
    RULE_TYPES,
    TailoringRule,
    build_rules,
)
from charity_selector.selection.sampler import Sampler
from charity_selector.selection.tailoring import TailoringEngine

PET_OWNER = UserProfile(id="1", name="Pat", region="NEW_YORK", has_pets=True, has_children=True)
NO_PETS = UserProfile(id="2", name="Sam", region="NEW_YORK")


def make_item(item_id: str, scope: Scope, category: str = "OTHER") -> CandidateItem:
    region = "NEW_YORK" if scope is Scope.REGIONAL else "TEXAS"
    return CandidateItem(id=item_id, name=item_id.title(), region=region, category=category, scope=scope)


def make_pools(
    national_animals: int = 0,
    regional_animals: int = 0,
    national_other: int = 10,
    regional_other: int = 10,
    other_category: str = "OTHER",
) -> EligiblePools:
    national = [make_item(f"na{i}", Scope.NATIONAL, ANIMAL_CATEGORY) for i in range(national_animals)]
    national += [make_item(f"no{i}", Scope.NATIONAL, other_category) for i in range(national_other)]
    regional = [make_item(f"ra{i}", Scope.REGIONAL, ANIMAL_CATEGORY) for i in range(regional_animals)]
    regional += [make_item(f"ro{i}", Scope.REGIONAL, other_category) for i in range(regional_other)]
    return EligiblePools(national=tuple(national), regional=tuple(regional))


class TestRules:
    def test_pet_owner_rule(self):
        rule = PetOwnerRule()
        assert rule.applies(PET_OWNER)
        assert not rule.applies(NO_PETS)
        assert rule.minimum_count(PET_OWNER) == 4
        assert rule.target_category() == ANIMAL_CATEGORY

    def test_attribute_rule(self):
        rule = AttributeRule("has_children", "EDUCATION", 2)
        assert rule.applies(PET_OWNER)
        assert not rule.applies(NO_PETS)
        assert rule.name == "has_children:EDUCATION"

    def test_build_rules_default(self):
        rules = build_rules({})
        assert len(rules) == 1
        assert isinstance(rules[0], PetOwnerRule)

    def test_build_rules_empty_disables(self):
        assert build_rules({"tailoring": {"rules": []}}) == []

    def test_build_rules_in_declaration_order(self):
        rules = build_rules({
            "tailoring": {
                "rules": [
                    {"type": "attribute", "attribute": "has_children", "category": "EDUCATION", "minimum": 2},
                    {"type": "pet_owner", "minimum": 3, "category": "ANIMAL"},
                ]
            }
        })
        assert [r.target_category() for r in rules] == ["EDUCATION", "ANIMAL"]
        assert rules[1].minimum_count(PET_OWNER) == 3

    @pytest.mark.parametrize(
        "cfg",
        [
            {"type": "astrology"},
            {"type": "attribute", "attribute": "has_children"},
            {"type": "attribute", "attribute": "favourite_colour", "category": "ARTS", "minimum": 1},
            {"type": "pet_owner", "minimum": -1},
            {"type": "pet_owner", "minimum": "four"},
            {"type": "pet_owner", "minimum": None},
            {"type": "attribute", "attribute": "has_children", "category": "EDUCATION", "minimum": "two"},
            "pet_owner",
            ["pet_owner", 4],
        ],
    )
    def test_build_rules_rejects_bad_config(self, cfg):
        with pytest.raises(ConfigError):
            build_rules({"tailoring": {"rules": [cfg]}})

    @pytest.mark.parametrize("tailoring", [["pet_owner"], {"rules": {"type": "pet_owner"}}, "off"])
    def test_build_rules_rejects_bad_sections(self, tailoring):
        with pytest.raises(ConfigError):
            build_rules({"tailoring": tailoring})

    def test_registered_rule_type(self, monkeypatch):
        class SeniorRule(TailoringRule):
            name = "senior"

            def applies(self, profile):
                return profile.age >= 65

            def minimum_count(self, profile):
                return 1

            def target_category(self):
                return "HEALTH_CARE"

        monkeypatch.setitem(RULE_TYPES, "senior", lambda cfg: SeniorRule())
        rules = build_rules({"tailoring": {"rules": [{"type": "senior"}]}})
        assert rules[0].target_category() == "HEALTH_CARE"


class TestTailoringEngine:
    def _engine(self, rng, rules=None, strict=False):
        constraints = SelectionConstraints(strict_minimums=strict)
        return TailoringEngine(rules if rules is not None else [PetOwnerRule()], constraints, rng)

    def test_inapplicable_rule_claims_nothing(self, scripted):
        plan = CapacityPlan(national_target=8, regional_target=4)
        outcome = self._engine(scripted()).apply(NO_PETS, make_pools(5, 5), plan, DrawLedger())
        assert outcome.national == [] and outcome.regional == []
        assert outcome.plan == plan

    def test_coin_flips_split_draws(self, scripted):
        rng = scripted(coins=[True, False, True, False])
        plan = CapacityPlan(national_target=8, regional_target=4)
        outcome = self._engine(rng).apply(PET_OWNER, make_pools(5, 5), plan, DrawLedger())
        assert len(outcome.national) == 2
        assert len(outcome.regional) == 2
        assert outcome.plan.national_remaining == 6
        assert outcome.plan.regional_remaining == 2

    def test_falls_back_when_one_side_exhausted(self, scripted):
        rng = scripted(coins=[True, True, True, True])
        plan = CapacityPlan(national_target=8, regional_target=4)
        outcome = self._engine(rng).apply(PET_OWNER, make_pools(5, 1), plan, DrawLedger())
        assert len(outcome.regional) == 1
        assert len(outcome.national) == 3

    def test_rebalances_toward_regional_animals(self, scripted):
        plan = CapacityPlan(national_target=12, regional_target=0)
        pools = make_pools(national_animals=0, regional_animals=4, national_other=15)
        outcome = self._engine(scripted()).apply(PET_OWNER, pools, plan, DrawLedger())
        assert len(outcome.regional) == 4
        assert outcome.plan.regional_target == 4
        assert outcome.plan.national_target == 8
        assert outcome.plan.total == 12

    def test_rebalance_respects_regional_cap(self, scripted):
        constraints = SelectionConstraints(total_count=12, max_regional_count=2)
        engine = TailoringEngine([PetOwnerRule()], constraints, scripted())
        plan = CapacityPlan(national_target=12, regional_target=0)
        pools = make_pools(national_animals=0, regional_animals=4, national_other=15)
        outcome = engine.apply(PET_OWNER, pools, plan, DrawLedger())
        assert len(outcome.regional) == 2
        assert outcome.plan.regional_target == 2
        assert outcome.shortfalls[0].achieved == 2

    def test_rebalances_toward_national_animals(self, scripted):
        plan = CapacityPlan(national_target=7, regional_target=5)
        pools = make_pools(national_animals=4, national_other=6, regional_other=10)
        ledger = DrawLedger()
        # Fill national with non-animal claims first so animals lack room
        ledger.record([make_item("no0", Scope.NATIONAL), make_item("no1", Scope.NATIONAL)])
        plan = plan.claim(national=5)
        outcome = self._engine(scripted()).apply(PET_OWNER, pools, plan, ledger)
        assert len(outcome.national) == 4
        assert outcome.plan.national_target == 9
        assert outcome.plan.regional_target == 3

    def test_shortfall_is_logged_and_recorded(self, scripted, caplog):
        plan = CapacityPlan(national_target=8, regional_target=4)
        with caplog.at_level("WARNING"):
            outcome = self._engine(scripted()).apply(PET_OWNER, make_pools(1, 1), plan, DrawLedger())
        assert len(outcome.national) + len(outcome.regional) == 2
        assert outcome.shortfalls[0].required == 4
        assert outcome.shortfalls[0].achieved == 2
        assert "need 4" in caplog.text

    def test_strict_mode_raises(self, scripted):
        plan = CapacityPlan(national_target=8, regional_target=4)
        with pytest.raises(RuleShortfallError, match="need 4"):
            self._engine(scripted(), strict=True).apply(PET_OWNER, make_pools(1, 1), plan, DrawLedger())

    def test_rules_are_cumulative(self, scripted):
        rules = [PetOwnerRule(minimum=2), PetOwnerRule(minimum=3)]
        plan = CapacityPlan(national_target=8, regional_target=4)
        ledger = DrawLedger()
        outcome = self._engine(scripted(), rules=rules).apply(PET_OWNER, make_pools(5, 5), plan, ledger)
        ids = [c.id for c in outcome.national + outcome.regional]
        assert len(ids) == 5
        assert len(set(ids)) == 5
        assert len(ledger) == 5
        assert outcome.plan.national_claimed + outcome.plan.regional_claimed == 5

    def test_second_rule_other_category(self, scripted):
        rules = [PetOwnerRule(minimum=2), AttributeRule("has_children", "EDUCATION", 3)]
        pools = make_pools(national_animals=3, regional_animals=3, other_category="EDUCATION")
        plan = CapacityPlan(national_target=8, regional_target=4)
        outcome = self._engine(scripted(), rules=rules).apply(PET_OWNER, pools, plan, DrawLedger())
        categories = [c.category for c in outcome.national + outcome.regional]
        assert categories.count(ANIMAL_CATEGORY) == 2
        assert categories.count("EDUCATION") == 3


class TestSampler:
    def test_skips_claimed_items(self, scripted):
        pool = [make_item(f"n{i}", Scope.NATIONAL) for i in range(5)]
        ledger = DrawLedger()
        ledger.record(pool[:2])
        drawn = Sampler(scripted()).fill(pool, 2, ledger)
        assert [c.id for c in drawn] == ["n2", "n3"]
        assert len(ledger) == 4

    def test_takes_whole_remainder_when_short(self, scripted):
        pool = [make_item(f"n{i}", Scope.NATIONAL) for i in range(3)]
        drawn = Sampler(scripted()).fill(pool, 5, DrawLedger())
        assert len(drawn) == 3

    def test_zero_count(self, scripted):
        pool = [make_item("n0", Scope.NATIONAL)]
        assert Sampler(scripted()).fill(pool, 0, DrawLedger()) == []


class TestAssembler:
    def test_count_mismatch_is_invariant_error(self, scripted):
        items = [make_item("n0", Scope.NATIONAL)]
        with pytest.raises(InvariantError, match="expected 2, got 1"):
            ResultAssembler(scripted()).assemble([items], CapacityPlan(national_target=2, regional_target=0))

    def test_duplicates_are_invariant_error(self, scripted):
        item = make_item("n0", Scope.NATIONAL)
        with pytest.raises(InvariantError, match="duplicate"):
            ResultAssembler(scripted()).assemble([[item], [item]], CapacityPlan(national_target=2, regional_target=0))

    def test_ledger_rejects_repeat(self):
        ledger = DrawLedger()
        ledger.record([make_item("n0", Scope.NATIONAL)])
        with pytest.raises(InvariantError):
            ledger.record([make_item("n0", Scope.NATIONAL)])

    def test_final_order_comes_from_shuffle(self, scripted):
        class ReversingRandom(scripted):
            def shuffle(self, items):
                return list(reversed(list(items)))

        parts = [
            [make_item("n0", Scope.NATIONAL), make_item("n1", Scope.NATIONAL)],
            [make_item("r0", Scope.REGIONAL, ANIMAL_CATEGORY)],
            [make_item("r1", Scope.REGIONAL)],
        ]
        result = ResultAssembler(ReversingRandom()).assemble(parts, CapacityPlan(national_target=2, regional_target=2))
        assert result.ids == ["r1", "r0", "n1", "n0"]

    def test_result_summary(self, scripted):
        parts = [[make_item("n0", Scope.NATIONAL)], [make_item("r0", Scope.REGIONAL, ANIMAL_CATEGORY)]]
        result = ResultAssembler(scripted()).assemble(parts, CapacityPlan(national_target=1, regional_target=1))
        assert result.national_count == 1
        assert result.regional_count == 1
        assert result.category_counts() == {"OTHER": 1, ANIMAL_CATEGORY: 1}
        data = result.to_dict()
        assert data["total"] == 2
        assert data["items"][1]["featured"] == "STATE"
