from __future__ import annotations

import pytest
from hypothesis import given

from mest_sim.domain.context import Direction, ModifierTag, Side, TestContext
from mest_sim.domain.types import DiceInputError, DicePool
from mest_sim.rules.ruleset import default_ruleset
from mest_sim.sim.telemetry import ModifierTelemetry
from mest_sim.systems.modifiers import apply_modifiers, total_modifiers
from tests.helpers.strategies import context_strategy

CATALOG_CASES = [
    ({"is_charge": True}, ModifierTag.CHARGE),
    ({"has_high_ground": True}, ModifierTag.HIGH_GROUND),
    ({"size_advantage": 3}, ModifierTag.SIZE),
    ({"is_defending": True}, ModifierTag.DEFEND),
    ({"outnumber_advantage": 3}, ModifierTag.OUTNUMBER),
    ({"is_cornered": True}, ModifierTag.CORNERED),
    ({"is_flanked": True}, ModifierTag.FLANKED),
    ({"is_overreach": True}, ModifierTag.OVERREACH),
    ({"is_point_blank": True}, ModifierTag.POINT_BLANK),
    ({"has_elevation": True}, ModifierTag.ELEVATION),
    ({"distance_increments": 1}, ModifierTag.DISTANCE),
    ({"has_intervening_cover": True}, ModifierTag.INTERVENING_COVER),
    ({"obscuring_models": 3}, ModifierTag.OBSCURED),
    ({"has_direct_cover": True}, ModifierTag.DIRECT_COVER),
    ({"is_leaning": True}, ModifierTag.LEANING),
    ({"is_blind_attack": True}, ModifierTag.BLIND),
    ({"has_hard_cover": True, "is_damage_test": True}, ModifierTag.HARD_COVER),
    ({"is_waiting": True}, ModifierTag.WAITING),
    ({"is_solo": True}, ModifierTag.SOLO),
    ({"is_sudden": True}, ModifierTag.SUDDENNESS),
    ({"has_friendly_in_cohesion": True}, ModifierTag.FRIENDLY),
    ({"has_help": True}, ModifierTag.HELP),
    ({"is_safe": True}, ModifierTag.SAFETY),
    ({"is_concentrating": True}, ModifierTag.CONCENTRATE),
    ({"is_focusing": True}, ModifierTag.FOCUS),
    ({"hindrance_tokens": 1}, ModifierTag.HINDRANCE),
    ({"is_confined": True}, ModifierTag.CONFINED),
]


def test_empty_context_yields_nothing() -> None:
    assert apply_modifiers(TestContext()) == []


@pytest.mark.parametrize(("facts", "tag"), CATALOG_CASES)
def test_each_fact_yields_exactly_one_modifier(facts: dict, tag: ModifierTag) -> None:
    modifiers = apply_modifiers(TestContext(**facts))
    assert [modifier.tag for modifier in modifiers] == [tag]


def test_catalog_cases_cover_every_tag() -> None:
    assert {tag for _, tag in CATALOG_CASES} == set(ModifierTag)


def test_charge_is_an_attacker_modifier_die() -> None:
    (modifier,) = apply_modifiers(TestContext(is_charge=True))
    assert modifier.side == Side.ACTIVE
    assert modifier.direction == Direction.BONUS
    assert modifier.dice == DicePool(modifier=1)
    assert modifier.score == 0


def test_defend_gives_the_defender_a_base_die() -> None:
    (modifier,) = apply_modifiers(TestContext(is_defending=True))
    assert modifier.side == Side.PASSIVE
    assert modifier.dice == DicePool(base=1)


def test_cornered_and_flanked_penalise_the_defender() -> None:
    modifiers = apply_modifiers(TestContext(is_cornered=True, is_flanked=True))
    assert all(m.side == Side.PASSIVE and m.direction == Direction.PENALTY for m in modifiers)
    assert total_modifiers(modifiers).passive_penalty == DicePool(modifier=2)


def test_overreach_is_a_flat_score_penalty() -> None:
    (modifier,) = apply_modifiers(TestContext(is_overreach=True))
    assert modifier.is_flat
    assert modifier.score == -1
    assert modifier.direction == Direction.PENALTY


@pytest.mark.parametrize(("advantage", "dice"), [(2, 0), (3, 1), (7, 2), (9, 3), (30, 3)])
def test_size_scales_per_three_and_caps(advantage: int, dice: int) -> None:
    totals = total_modifiers(apply_modifiers(TestContext(size_advantage=advantage)))
    assert totals.active_bonus == DicePool(modifier=dice)


def test_outnumber_grants_wild_dice_capped_at_three() -> None:
    totals = total_modifiers(apply_modifiers(TestContext(outnumber_advantage=11)))
    assert totals.active_bonus == DicePool(wild=3)


def test_obscured_scales_per_three_models() -> None:
    totals = total_modifiers(apply_modifiers(TestContext(obscuring_models=7)))
    assert totals.active_penalty == DicePool(modifier=2)


def test_distance_and_hindrance_scale_per_unit() -> None:
    totals = total_modifiers(apply_modifiers(TestContext(distance_increments=2, hindrance_tokens=3)))
    assert totals.active_penalty == DicePool(modifier=5)


def test_hard_cover_only_applies_to_damage_tests() -> None:
    assert apply_modifiers(TestContext(has_hard_cover=True)) == []
    (modifier,) = apply_modifiers(TestContext(has_hard_cover=True, is_damage_test=True))
    assert modifier.dice == DicePool(wild=1)
    assert modifier.direction == Direction.PENALTY


def test_leaning_applies_to_each_side_independently() -> None:
    modifiers = apply_modifiers(TestContext(is_leaning=True, is_target_leaning=True))
    assert [(m.tag, m.side) for m in modifiers] == [
        (ModifierTag.LEANING, Side.ACTIVE),
        (ModifierTag.LEANING, Side.PASSIVE),
    ]
    totals = total_modifiers(modifiers)
    assert totals.active_penalty == DicePool(base=1)
    assert totals.passive_penalty == DicePool(base=1)


def test_usage_is_recorded_per_modifier() -> None:
    telemetry = ModifierTelemetry()
    apply_modifiers(TestContext(is_charge=True, is_safe=True), telemetry=telemetry)
    apply_modifiers(TestContext(is_charge=True), telemetry=telemetry)
    assert telemetry.usage[ModifierTag.CHARGE] == 2
    assert telemetry.usage[ModifierTag.SAFETY] == 1
    assert telemetry.applied[ModifierTag.CHARGE] == 0


def test_context_rejects_negative_amounts_and_unknown_flags() -> None:
    with pytest.raises(DiceInputError):
        TestContext(size_advantage=-1)
    with pytest.raises(TypeError):
        TestContext(is_chrage=True)  # type: ignore[call-arg]


def test_damage_context_keeps_only_damage_facts() -> None:
    context = TestContext(is_charge=True, has_hard_cover=True, hindrance_tokens=2)
    assert context.for_damage_test() == TestContext(has_hard_cover=True, is_damage_test=True)


def test_catalog_data_matches_tags() -> None:
    assert {entry.tag for entry in default_ruleset().modifiers} == set(ModifierTag)


@given(context=context_strategy())
def test_apply_is_pure_and_repeatable(context: TestContext) -> None:
    first = apply_modifiers(context)
    second = apply_modifiers(context)
    assert first == second
    for modifier in first:
        assert modifier.is_flat or not modifier.dice.is_empty()
        assert modifier.dice.total() <= 10
