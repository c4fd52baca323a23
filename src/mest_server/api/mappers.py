from __future__ import annotations

from mest_sim.domain import combatants as domain_combatants
from mest_sim.domain import context as domain_context
from mest_sim.domain import types as domain_types
from mest_sim.domain.results import AttackResult, PoolRoll, TestOutcome
from mest_sim.rules.ruleset import Ruleset
from mest_sim.sim.batch import BatchReport, Matchup
from mest_sim.sim.telemetry import ModifierTelemetry
from mest_sim.systems.specifiers import build_weapon
from mest_server.api import schemas


def to_pool(model: schemas.DicePool) -> domain_types.DicePool:
    return domain_types.DicePool(base=model.base, modifier=model.modifier, wild=model.wild)


def to_participant(model: schemas.Participant) -> domain_types.TestParticipant:
    return domain_types.TestParticipant(
        attribute=model.attribute,
        bonus=to_pool(model.bonus),
        penalty=to_pool(model.penalty),
        is_system=model.is_system,
    )


def to_context(model: schemas.TestContext | None) -> domain_context.TestContext | None:
    if model is None:
        return None
    return domain_context.TestContext(**model.model_dump(by_alias=False))


def to_combatant(model: schemas.Combatant) -> domain_combatants.Combatant:
    return domain_combatants.Combatant(**model.model_dump(by_alias=False))


def to_weapon(model: schemas.Weapon) -> domain_combatants.Weapon:
    return build_weapon(model.name, accuracy=model.accuracy, damage=model.damage, impact=model.impact)


def to_matchup(model: schemas.BatchRequest) -> Matchup:
    return Matchup(
        attacker=to_combatant(model.attacker),
        defender=to_combatant(model.defender),
        weapon=to_weapon(model.weapon),
        context=to_context(model.context),
        mode=domain_combatants.AttackMode(model.mode),
    )


def _pool(pool: domain_types.DicePool) -> schemas.DicePool:
    return schemas.DicePool(base=pool.base, modifier=pool.modifier, wild=pool.wild)


def _dice(roll: PoolRoll) -> list[schemas.RolledDie]:
    return [
        schemas.RolledDie(kind=die.kind.value, face=die.face, successes=die.successes, carry_over=die.carry_over)
        for die in roll.dice
    ]


def build_outcome_response(outcome: TestOutcome) -> schemas.TestOutcomeResponse:
    return schemas.TestOutcomeResponse(
        passed=outcome.passed,
        cascades=outcome.cascades,
        misses=outcome.misses,
        active_score=outcome.active_score,
        passive_score=outcome.passive_score,
        carry_over=_pool(outcome.carry_over),
        active_dice=_dice(outcome.active_roll),
        passive_dice=_dice(outcome.passive_roll),
        modifiers=[
            schemas.Modifier(
                tag=modifier.tag.value,
                side=modifier.side.value,
                direction=modifier.direction.value,
                dice=_pool(modifier.dice),
                score=modifier.score,
            )
            for modifier in outcome.modifiers
        ],
    )


def build_attack_response(result: AttackResult) -> schemas.AttackResponse:
    wounds = result.wound_calculation
    return schemas.AttackResponse(
        hit=result.hit,
        wounds_inflicted=result.wounds_inflicted,
        remaining_impact=result.remaining_impact,
        effective_armor=result.effective_armor,
        hit_test=build_outcome_response(result.hit_test),
        damage_test=build_outcome_response(result.damage_test) if result.damage_test is not None else None,
        wound_calculation=(
            schemas.WoundCalculation(
                effective_armor=wounds.effective_armor,
                remaining_impact=wounds.remaining_impact,
                damage_successes=wounds.damage_successes,
                wounds_inflicted=wounds.wounds_inflicted,
            )
            if wounds is not None
            else None
        ),
    )


def build_telemetry_response(telemetry: ModifierTelemetry) -> schemas.TelemetryResponse:
    rows = [
        schemas.ModifierStats(
            tag=tag.value,
            usage=stats.usage,
            applied=stats.applied,
            successful=stats.successful,
            success_rate=stats.success_rate,
            effectiveness=stats.effectiveness,
        )
        for tag, stats in telemetry.statistics().items()
    ]
    return schemas.TelemetryResponse(total_usage=telemetry.total_usage(), modifiers=rows)


def build_batch_response(report: BatchReport) -> schemas.BatchResponse:
    interval = report.hit_rate_interval
    return schemas.BatchResponse(
        iterations=report.iterations,
        completed=report.completed,
        skipped=report.skipped,
        hits=report.hits,
        hit_rate=report.hit_rate,
        mean_wounds=report.mean_wounds,
        wound_histogram={str(wounds): count for wounds, count in report.wound_histogram.items()},
        hit_rate_interval=schemas.ConfidenceInterval(
            lower=interval.lower,
            upper=interval.upper,
            confidence=interval.confidence,
        ),
        telemetry=build_telemetry_response(report.telemetry),
    )


def build_catalog_response(ruleset: Ruleset) -> schemas.CatalogResponse:
    return schemas.CatalogResponse(
        modifiers=[
            schemas.CatalogEntry(
                tag=entry.tag.value,
                trigger=entry.trigger,
                side=entry.side.value,
                kind=entry.kind.value if entry.kind is not None else None,
                amount=entry.amount,
                step=entry.step,
                cap=entry.cap,
                damage_only=entry.damage_only,
                description=entry.description,
            )
            for entry in ruleset.modifiers
        ]
    )
