"""Combatant and weapon records supplied by the character/equipment layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from mest_sim.domain.types import DiceInputError, DicePool

ATTRIBUTE_CODES: tuple[str, ...] = ("CCA", "RCA", "STR", "FOR")


class AttackMode(str, Enum):
    CLOSE = "close"
    RANGED = "ranged"


@dataclass(frozen=True)
class AccuracySpec:
    """Parsed weapon accuracy: dice for the wielder or a flat score delta."""

    bonus: DicePool = field(default_factory=DicePool)
    penalty: DicePool = field(default_factory=DicePool)
    score: int = 0

    def is_neutral(self) -> bool:
        return self.bonus.is_empty() and self.penalty.is_empty() and self.score == 0


@dataclass(frozen=True)
class DamageFormula:
    """Parsed damage formula such as ``STR+1w`` or ``2+1b``."""

    attributes: tuple[str, ...] = ("STR",)
    flat: int = 0
    dice: DicePool = field(default_factory=DicePool)

    def evaluate(self, attribute_values: Mapping[str, int]) -> int:
        value = self.flat + sum(attribute_values.get(code, 0) for code in self.attributes)
        return max(0, value)


@dataclass(frozen=True)
class Weapon:
    name: str
    accuracy: AccuracySpec = field(default_factory=AccuracySpec)
    damage: DamageFormula = field(default_factory=DamageFormula)
    impact: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.impact, bool) or not isinstance(self.impact, int) or self.impact < 0:
            raise DiceInputError(f"Weapon.impact must be a non-negative integer, got {self.impact!r}")


@dataclass()
class Combatant:
    name: str
    cca: int
    rca: int
    strength: int
    fortitude: int
    armor: int = 0
    wounds: int = 0
    delay_tokens: int = 0
    fear_tokens: int = 0

    def __post_init__(self) -> None:
        for name in ("cca", "rca", "strength", "fortitude", "armor", "wounds", "delay_tokens", "fear_tokens"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise DiceInputError(f"Combatant.{name} must be a non-negative integer, got {value!r}")

    def ability(self, mode: AttackMode) -> int:
        return self.rca if mode == AttackMode.RANGED else self.cca

    def attribute_values(self) -> dict[str, int]:
        return {
            "CCA": self.cca,
            "RCA": self.rca,
            "STR": self.strength,
            "FOR": self.fortitude,
        }

    def hindrance_count(self) -> int:
        """Number of distinct hindrance conditions present (wound, delay, fear)."""
        return sum(1 for tokens in (self.wounds, self.delay_tokens, self.fear_tokens) if tokens > 0)
