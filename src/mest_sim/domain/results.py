"""Test and attack outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field

from mest_sim.domain.context import SituationalModifier
from mest_sim.domain.types import DIE_KIND_ORDER, DicePool, DieKind


@dataclass(frozen=True)
class RolledDie:
    kind: DieKind
    face: int
    successes: int
    carry_over: bool


@dataclass(frozen=True)
class PoolRoll:
    dice: tuple[RolledDie, ...] = ()

    @property
    def successes(self) -> int:
        return sum(die.successes for die in self.dice)

    @property
    def faces(self) -> tuple[int, ...]:
        return tuple(die.face for die in self.dice)

    @property
    def carry_over(self) -> DicePool:
        counts = {kind: 0 for kind in DIE_KIND_ORDER}
        for die in self.dice:
            if die.carry_over:
                counts[die.kind] += 1
        return DicePool.from_mapping(counts)


@dataclass(frozen=True)
class TestOutcome:
    __test__ = False

    passed: bool
    cascades: int
    misses: int
    active_score: int
    passive_score: int
    carry_over: DicePool = field(default_factory=DicePool)
    active_roll: PoolRoll = field(default_factory=PoolRoll)
    passive_roll: PoolRoll = field(default_factory=PoolRoll)
    modifiers: tuple[SituationalModifier, ...] = ()


@dataclass(frozen=True)
class WoundCalculation:
    effective_armor: int
    remaining_impact: int
    damage_successes: int
    wounds_inflicted: int


@dataclass(frozen=True)
class AttackResult:
    hit: bool
    wounds_inflicted: int
    remaining_impact: int
    hit_test: TestOutcome
    damage_test: TestOutcome | None = None
    wound_calculation: WoundCalculation | None = None

    @property
    def effective_armor(self) -> int:
        return self.wound_calculation.effective_armor if self.wound_calculation is not None else 0
