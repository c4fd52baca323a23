"""Situational modifier usage and effectiveness counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from mest_sim.domain.context import ModifierTag


def _zeroed() -> dict[ModifierTag, int]:
    return {tag: 0 for tag in ModifierTag}


@dataclass(frozen=True)
class ModifierStats:
    usage: int
    applied: int
    successful: int
    success_rate: float
    effectiveness: float


@dataclass()
class ModifierTelemetry:
    """Accumulator owned by whoever runs the tests.

    Not safe to share between threads; parallel workers each keep their own
    and the results are combined with ``merge``.
    """

    usage: dict[ModifierTag, int] = field(default_factory=_zeroed)
    applied: dict[ModifierTag, int] = field(default_factory=_zeroed)
    successful: dict[ModifierTag, int] = field(default_factory=_zeroed)

    def record_usage(self, tag: ModifierTag) -> None:
        self.usage[tag] = self.usage.get(tag, 0) + 1

    def record_outcome(self, tags: Iterable[ModifierTag], passed: bool) -> None:
        for tag in tags:
            self.applied[tag] = self.applied.get(tag, 0) + 1
            if passed:
                self.successful[tag] = self.successful.get(tag, 0) + 1

    def record_test(self, tags: Iterable[ModifierTag], passed: bool) -> None:
        """Usage and outcome of one finished test, counted together."""
        tags = list(tags)
        for tag in tags:
            self.record_usage(tag)
        self.record_outcome(tags, passed)

    def statistics(self) -> dict[ModifierTag, ModifierStats]:
        stats: dict[ModifierTag, ModifierStats] = {}
        for tag in ModifierTag:
            usage = self.usage.get(tag, 0)
            applied = self.applied.get(tag, 0)
            successful = self.successful.get(tag, 0)
            success_rate = successful / applied if applied > 0 else 0.0
            stats[tag] = ModifierStats(
                usage=usage,
                applied=applied,
                successful=successful,
                success_rate=success_rate,
                effectiveness=success_rate * usage,
            )
        return stats

    def merge(self, other: "ModifierTelemetry") -> "ModifierTelemetry":
        merged = ModifierTelemetry()
        for tag in ModifierTag:
            merged.usage[tag] = self.usage.get(tag, 0) + other.usage.get(tag, 0)
            merged.applied[tag] = self.applied.get(tag, 0) + other.applied.get(tag, 0)
            merged.successful[tag] = self.successful.get(tag, 0) + other.successful.get(tag, 0)
        return merged

    def total_usage(self) -> int:
        return sum(self.usage.values())

    def reset(self) -> None:
        self.usage = _zeroed()
        self.applied = _zeroed()
        self.successful = _zeroed()
