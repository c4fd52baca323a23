"""Monte Carlo batch driver for repeated attacks between one matchup."""

from __future__ import annotations

import concurrent.futures
import logging
import math
import statistics
from dataclasses import dataclass, field

from mest_sim.domain.combatants import AttackMode, Combatant, Weapon
from mest_sim.domain.context import TestContext
from mest_sim.rules.ruleset import Ruleset, default_ruleset
from mest_sim.sim.rng import RandomFaceSource
from mest_sim.sim.telemetry import ModifierTelemetry
from mest_sim.systems.combat import attack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matchup:
    attacker: Combatant
    defender: Combatant
    weapon: Weapon
    context: TestContext | None = None
    mode: AttackMode = AttackMode.CLOSE


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float
    confidence: float


@dataclass(frozen=True)
class BatchReport:
    iterations: int
    completed: int
    skipped: int
    hits: int
    hit_rate: float
    mean_wounds: float
    wound_histogram: dict[int, int]
    hit_rate_interval: ConfidenceInterval
    telemetry: ModifierTelemetry


@dataclass()
class _WorkerTally:
    completed: int = 0
    skipped: int = 0
    hits: int = 0
    wounds_total: int = 0
    wound_histogram: dict[int, int] = field(default_factory=dict)
    telemetry: ModifierTelemetry = field(default_factory=ModifierTelemetry)

    def absorb(self, other: "_WorkerTally") -> None:
        self.completed += other.completed
        self.skipped += other.skipped
        self.hits += other.hits
        self.wounds_total += other.wounds_total
        for wounds, count in other.wound_histogram.items():
            self.wound_histogram[wounds] = self.wound_histogram.get(wounds, 0) + count
        self.telemetry = self.telemetry.merge(other.telemetry)


def proportion_interval(successes: int, trials: int, confidence: float = 0.95) -> ConfidenceInterval:
    """Normal-approximation interval for a binomial proportion."""
    if not 0 < confidence < 1:
        raise ValueError("confidence must be between 0 and 1.")
    if trials <= 0:
        return ConfidenceInterval(lower=0.0, upper=0.0, confidence=confidence)
    rate = successes / trials
    z = statistics.NormalDist().inv_cdf(1 - (1 - confidence) / 2)
    margin = z * math.sqrt(rate * (1 - rate) / trials)
    return ConfidenceInterval(
        lower=max(0.0, rate - margin),
        upper=min(1.0, rate + margin),
        confidence=confidence,
    )


def _run_chunk(matchup: Matchup, start: int, stop: int, seed: int, ruleset: Ruleset) -> _WorkerTally:
    tally = _WorkerTally()
    for iteration in range(start, stop):
        faces = RandomFaceSource.for_iteration(seed, iteration)
        try:
            result = attack(
                matchup.attacker,
                matchup.defender,
                matchup.weapon,
                matchup.context,
                faces=faces,
                mode=matchup.mode,
                ruleset=ruleset,
                telemetry=tally.telemetry,
            )
        except (ValueError, RuntimeError) as exc:
            logger.warning("Skipping iteration %d: %s", iteration, exc)
            tally.skipped += 1
            continue
        tally.completed += 1
        if result.hit:
            tally.hits += 1
        tally.wounds_total += result.wounds_inflicted
        tally.wound_histogram[result.wounds_inflicted] = tally.wound_histogram.get(result.wounds_inflicted, 0) + 1
    return tally


def _chunks(iterations: int, workers: int) -> list[tuple[int, int]]:
    size = math.ceil(iterations / workers)
    return [(start, min(iterations, start + size)) for start in range(0, iterations, size)]


def run_attack_batch(
    matchup: Matchup,
    iterations: int,
    *,
    seed: int = 1,
    workers: int = 1,
    confidence: float = 0.95,
    ruleset: Ruleset | None = None,
) -> BatchReport:
    """Run ``iterations`` independent attacks and summarise them.

    Iteration ``i`` always draws from the same seeded face stream, so the
    report does not depend on ``workers``.
    """
    if iterations < 0:
        raise ValueError("iterations must be >= 0")
    if workers < 1:
        raise ValueError("workers must be >= 1")
    rules = ruleset or default_ruleset()

    tally = _WorkerTally()
    if workers == 1 or iterations < 2:
        tally.absorb(_run_chunk(matchup, 0, iterations, seed, rules))
    else:
        chunks = _chunks(iterations, workers)
        with concurrent.futures.ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_run_chunk, matchup, start, stop, seed, rules) for start, stop in chunks]
            for future in concurrent.futures.as_completed(futures):
                tally.absorb(future.result())

    if tally.skipped:
        logger.warning("Batch skipped %d of %d iterations", tally.skipped, iterations)
    completed = tally.completed
    return BatchReport(
        iterations=iterations,
        completed=completed,
        skipped=tally.skipped,
        hits=tally.hits,
        hit_rate=tally.hits / completed if completed else 0.0,
        mean_wounds=tally.wounds_total / completed if completed else 0.0,
        wound_histogram=dict(sorted(tally.wound_histogram.items())),
        hit_rate_interval=proportion_interval(tally.hits, completed, confidence),
        telemetry=tally.telemetry,
    )
