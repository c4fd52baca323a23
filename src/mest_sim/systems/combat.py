from __future__ import annotations

from mest_sim.domain.combatants import AttackMode, Combatant, Weapon
from mest_sim.domain.context import TestContext
from mest_sim.domain.results import AttackResult, TestOutcome, WoundCalculation
from mest_sim.domain.types import DicePool, DieKind, TestParticipant
from mest_sim.rules.ruleset import Ruleset, default_ruleset
from mest_sim.sim.rng import FaceSource
from mest_sim.sim.telemetry import ModifierTelemetry
from mest_sim.systems.modifiers import tags_of
from mest_sim.systems.resolver import resolve_test


def hindrance_penalty(combatant: Combatant, cap: int = 3) -> DicePool:
    """One Modifier penalty die per hindrance condition present."""
    return DicePool.of(DieKind.MODIFIER, min(cap, combatant.hindrance_count()))


def compute_wounds(impact: int, armor: int, damage_successes: int) -> WoundCalculation:
    effective_armor = max(0, armor - impact)
    remaining_impact = max(0, impact - armor)
    return WoundCalculation(
        effective_armor=effective_armor,
        remaining_impact=remaining_impact,
        damage_successes=damage_successes,
        wounds_inflicted=max(0, damage_successes - effective_armor),
    )


def _record_tests(telemetry: ModifierTelemetry | None, *outcomes: TestOutcome) -> None:
    if telemetry is None:
        return
    for outcome in outcomes:
        if outcome.modifiers:
            telemetry.record_test(tags_of(outcome.modifiers), outcome.passed)


def attack(
    attacker: Combatant,
    defender: Combatant,
    weapon: Weapon,
    context: TestContext | None = None,
    *,
    faces: FaceSource,
    mode: AttackMode = AttackMode.CLOSE,
    ruleset: Ruleset | None = None,
    telemetry: ModifierTelemetry | None = None,
) -> AttackResult:
    """Hit test, then (on a hit) damage test, then armor against impact.

    Neither combatant is modified; applying ``wounds_inflicted`` to the
    defender is up to the caller. Telemetry for both tests is recorded only
    once the attack has been fully resolved.
    """
    rules = ruleset or default_ruleset()
    cap = rules.engine.hindrance_cap

    hit_active = TestParticipant(
        attribute=attacker.ability(mode),
        bonus=weapon.accuracy.bonus,
        penalty=weapon.accuracy.penalty.plus(hindrance_penalty(attacker, cap)),
    )
    hit_passive = TestParticipant(
        attribute=defender.ability(mode),
        penalty=hindrance_penalty(defender, cap),
    )
    # Flat accuracy lowers the defender's score instead of adding dice.
    hit_test = resolve_test(
        hit_active,
        hit_passive,
        -weapon.accuracy.score,
        context,
        faces=faces,
        ruleset=rules,
    )
    if not hit_test.passed:
        _record_tests(telemetry, hit_test)
        return AttackResult(hit=False, wounds_inflicted=0, remaining_impact=0, hit_test=hit_test)

    damage_active = TestParticipant(
        attribute=weapon.damage.evaluate(attacker.attribute_values()),
        bonus=weapon.damage.dice.plus(hit_test.carry_over),
    )
    damage_passive = TestParticipant(attribute=defender.fortitude)
    damage_context = context.for_damage_test() if context is not None else TestContext(is_damage_test=True)
    damage_test = resolve_test(
        damage_active,
        damage_passive,
        0,
        damage_context,
        faces=faces,
        ruleset=rules,
    )

    damage_successes = damage_test.cascades if damage_test.passed else 0
    wounds = compute_wounds(weapon.impact, defender.armor, damage_successes)
    _record_tests(telemetry, hit_test, damage_test)
    return AttackResult(
        hit=True,
        wounds_inflicted=wounds.wounds_inflicted,
        remaining_impact=wounds.remaining_impact,
        hit_test=hit_test,
        damage_test=damage_test,
        wound_calculation=wounds,
    )
