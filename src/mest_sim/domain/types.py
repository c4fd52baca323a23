"""Dice kinds, dice pools and test participants."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class DiceInputError(ValueError):
    """Invalid numeric input handed to the engine by a caller."""


class DieKind(str, Enum):
    BASE = "base"
    MODIFIER = "modifier"
    WILD = "wild"


# Roll order inside a pool; scripted face sequences depend on it.
DIE_KIND_ORDER: tuple[DieKind, ...] = (DieKind.BASE, DieKind.MODIFIER, DieKind.WILD)


def _require_count(owner: str, name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DiceInputError(f"{owner}.{name} must be an integer, got {value!r}")
    if value < 0:
        raise DiceInputError(f"{owner}.{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class DicePool:
    base: int = 0
    modifier: int = 0
    wild: int = 0

    def __post_init__(self) -> None:
        for kind in DIE_KIND_ORDER:
            _require_count("DicePool", kind.value, getattr(self, kind.value))

    @staticmethod
    def of(kind: DieKind, count: int) -> "DicePool":
        return DicePool(**{DieKind(kind).value: count})

    @staticmethod
    def from_mapping(data: Mapping[DieKind | str, int] | None) -> "DicePool":
        if not data:
            return DicePool()
        counts: dict[str, int] = {}
        for key, count in data.items():
            try:
                kind = DieKind(key)
            except ValueError as exc:
                raise DiceInputError(f"Unknown die kind: {key!r}") from exc
            counts[kind.value] = counts.get(kind.value, 0) + count
        return DicePool(**counts)

    def get(self, kind: DieKind) -> int:
        return getattr(self, DieKind(kind).value)

    def with_count(self, kind: DieKind, count: int) -> "DicePool":
        values = self.as_dict()
        values[DieKind(kind).value] = count
        return DicePool(**values)

    def plus(self, other: "DicePool") -> "DicePool":
        return DicePool(
            base=self.base + other.base,
            modifier=self.modifier + other.modifier,
            wild=self.wild + other.wild,
        )

    def minus(self, other: "DicePool") -> "DicePool":
        """Subtract per kind, flooring each count at zero."""
        return DicePool(
            base=max(0, self.base - other.base),
            modifier=max(0, self.modifier - other.modifier),
            wild=max(0, self.wild - other.wild),
        )

    def total(self) -> int:
        return self.base + self.modifier + self.wild

    def is_empty(self) -> bool:
        return self.total() == 0

    def as_dict(self) -> dict[str, int]:
        return {"base": self.base, "modifier": self.modifier, "wild": self.wild}


@dataclass(frozen=True)
class TestParticipant:
    """One side of a test: an attribute plus optional bonus/penalty dice."""

    __test__ = False

    attribute: int
    bonus: DicePool = field(default_factory=DicePool)
    penalty: DicePool = field(default_factory=DicePool)
    is_system: bool = False

    def __post_init__(self) -> None:
        _require_count("TestParticipant", "attribute", self.attribute)
        if not isinstance(self.bonus, DicePool) or not isinstance(self.penalty, DicePool):
            raise DiceInputError("TestParticipant bonus/penalty must be DicePool instances")

    @staticmethod
    def system() -> "TestParticipant":
        """The impersonal opponent of an unopposed test."""
        return TestParticipant(attribute=0, is_system=True)
