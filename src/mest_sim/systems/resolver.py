from __future__ import annotations

import logging

from mest_sim.domain.context import TestContext
from mest_sim.domain.results import TestOutcome
from mest_sim.domain.types import DiceInputError, DicePool, TestParticipant
from mest_sim.rules.ruleset import Ruleset, default_ruleset
from mest_sim.sim.rng import FaceSource
from mest_sim.sim.telemetry import ModifierTelemetry
from mest_sim.systems.dice import roll_pool
from mest_sim.systems.flattening import flatten
from mest_sim.systems.modifiers import apply_modifiers, tags_of, total_modifiers

logger = logging.getLogger(__name__)


def starting_pool(base_dice: int, bonus: DicePool, penalty: DicePool) -> DicePool:
    return DicePool(base=base_dice).plus(bonus).minus(penalty)


def resolve_test(
    active: TestParticipant,
    passive: TestParticipant,
    difficulty_rating: int = 0,
    context: TestContext | None = None,
    *,
    faces: FaceSource,
    ruleset: Ruleset | None = None,
    telemetry: ModifierTelemetry | None = None,
) -> TestOutcome:
    """Resolve one opposed (or unopposed, against ``TestParticipant.system()``) test.

    Ties go to the active side. Carry-over dice come only from the active
    side's roll, only on a pass, and never when the active side is the System.
    Deterministic for a given face sequence. ``telemetry`` is only touched
    once both pools have been rolled.
    """
    if isinstance(difficulty_rating, bool) or not isinstance(difficulty_rating, int):
        raise DiceInputError(f"difficulty_rating must be an integer, got {difficulty_rating!r}")
    rules = ruleset or default_ruleset()
    engine = rules.engine

    modifiers = apply_modifiers(context, rules) if context is not None else []
    totals = total_modifiers(modifiers)

    active_pool = starting_pool(
        engine.base_dice,
        active.bonus.plus(totals.active_bonus),
        active.penalty.plus(totals.active_penalty),
    )
    passive_pool = starting_pool(
        engine.base_dice,
        passive.bonus.plus(totals.passive_bonus),
        passive.penalty.plus(totals.passive_penalty),
    )
    active_pool, passive_pool = flatten(active_pool, passive_pool, base_floor=engine.flatten_base_floor)

    active_roll = roll_pool(active_pool, faces)
    passive_roll = roll_pool(passive_pool, faces)

    active_attribute = engine.system_attribute if active.is_system else active.attribute
    passive_attribute = engine.system_attribute if passive.is_system else passive.attribute
    active_score = active_attribute + active_roll.successes + totals.active_score
    passive_score = passive_attribute + passive_roll.successes + difficulty_rating + totals.passive_score

    passed = active_score >= passive_score
    cascades = max(1, active_score - passive_score) if passed else 0
    misses = 0 if passed else passive_score - active_score
    carry_over = active_roll.carry_over if passed and not active.is_system else DicePool()

    if telemetry is not None and modifiers:
        telemetry.record_test(tags_of(modifiers), passed)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "test %s: active %d (faces %s) vs passive %d (faces %s), dr=%d, cascades=%d misses=%d",
            "pass" if passed else "fail",
            active_score,
            active_roll.faces,
            passive_score,
            passive_roll.faces,
            difficulty_rating,
            cascades,
            misses,
        )
    return TestOutcome(
        passed=passed,
        cascades=cascades,
        misses=misses,
        active_score=active_score,
        passive_score=passive_score,
        carry_over=carry_over,
        active_roll=active_roll,
        passive_roll=passive_roll,
        modifiers=tuple(modifiers),
    )
