"""Situational modifier catalog: context facts to dice and score deltas."""

from __future__ import annotations

from dataclasses import dataclass, field

from mest_sim.domain.context import Direction, ModifierTag, Side, SituationalModifier, TestContext
from mest_sim.domain.types import DicePool
from mest_sim.rules.ruleset import ModifierDef, Ruleset, default_ruleset
from mest_sim.sim.telemetry import ModifierTelemetry


@dataclass(frozen=True)
class ModifierTotals:
    """Modifiers folded into per-side pools and flat score deltas."""

    active_bonus: DicePool = field(default_factory=DicePool)
    active_penalty: DicePool = field(default_factory=DicePool)
    passive_bonus: DicePool = field(default_factory=DicePool)
    passive_penalty: DicePool = field(default_factory=DicePool)
    active_score: int = 0
    passive_score: int = 0


def _trigger_count(entry: ModifierDef, context: TestContext) -> int:
    raw = getattr(context, entry.trigger)
    if isinstance(raw, bool):
        return 1 if raw else 0
    return entry.count_for(raw)


def build_modifier(entry: ModifierDef, count: int) -> SituationalModifier:
    direction = Direction.BONUS if entry.amount > 0 else Direction.PENALTY
    if entry.kind is None:
        return SituationalModifier(
            tag=entry.tag,
            side=entry.side,
            direction=direction,
            score=entry.amount * count,
        )
    return SituationalModifier(
        tag=entry.tag,
        side=entry.side,
        direction=direction,
        dice=DicePool.of(entry.kind, abs(entry.amount) * count),
    )


def apply_modifiers(
    context: TestContext,
    ruleset: Ruleset | None = None,
    telemetry: ModifierTelemetry | None = None,
) -> list[SituationalModifier]:
    """Modifiers triggered by ``context``, in catalog order.

    Each triggered entry yields exactly one modifier and one usage count in
    ``telemetry`` when given. The context itself is never changed.
    """
    rules = ruleset or default_ruleset()
    modifiers: list[SituationalModifier] = []
    for entry in rules.modifiers:
        if entry.damage_only and not context.is_damage_test:
            continue
        count = _trigger_count(entry, context)
        if count <= 0:
            continue
        modifiers.append(build_modifier(entry, count))
        if telemetry is not None:
            telemetry.record_usage(entry.tag)
    return modifiers


def total_modifiers(modifiers: list[SituationalModifier] | tuple[SituationalModifier, ...]) -> ModifierTotals:
    pools = {
        (Side.ACTIVE, Direction.BONUS): DicePool(),
        (Side.ACTIVE, Direction.PENALTY): DicePool(),
        (Side.PASSIVE, Direction.BONUS): DicePool(),
        (Side.PASSIVE, Direction.PENALTY): DicePool(),
    }
    scores = {Side.ACTIVE: 0, Side.PASSIVE: 0}
    for modifier in modifiers:
        if modifier.is_flat:
            scores[modifier.side] += modifier.score
        else:
            key = (modifier.side, modifier.direction)
            pools[key] = pools[key].plus(modifier.dice)
    return ModifierTotals(
        active_bonus=pools[(Side.ACTIVE, Direction.BONUS)],
        active_penalty=pools[(Side.ACTIVE, Direction.PENALTY)],
        passive_bonus=pools[(Side.PASSIVE, Direction.BONUS)],
        passive_penalty=pools[(Side.PASSIVE, Direction.PENALTY)],
        active_score=scores[Side.ACTIVE],
        passive_score=scores[Side.PASSIVE],
    )


def tags_of(modifiers: list[SituationalModifier] | tuple[SituationalModifier, ...]) -> list[ModifierTag]:
    return [modifier.tag for modifier in modifiers]
