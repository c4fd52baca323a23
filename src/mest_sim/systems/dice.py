from __future__ import annotations

from mest_sim.domain.results import PoolRoll, RolledDie
from mest_sim.domain.types import DIE_KIND_ORDER, DiceInputError, DicePool, DieKind
from mest_sim.sim.rng import FaceSource

# (successes, carry_over) for faces 1..6.
SCORING_TABLE: dict[DieKind, tuple[tuple[int, bool], ...]] = {
    DieKind.BASE: ((0, False), (0, False), (0, False), (1, False), (1, False), (2, True)),
    DieKind.MODIFIER: ((0, False), (0, False), (0, False), (1, False), (1, False), (1, True)),
    DieKind.WILD: ((0, False), (0, False), (0, False), (1, True), (1, True), (3, True)),
}


def score(kind: DieKind, face: int) -> tuple[int, bool]:
    """Successes and carry-over flag for one rolled face."""
    if isinstance(face, bool) or not isinstance(face, int) or not 1 <= face <= 6:
        raise DiceInputError(f"Die face must be an integer in 1..6, got {face!r}")
    return SCORING_TABLE[DieKind(kind)][face - 1]


def roll_die(kind: DieKind, faces: FaceSource) -> RolledDie:
    face = faces.next_face()
    successes, carry_over = score(kind, face)
    return RolledDie(kind=DieKind(kind), face=face, successes=successes, carry_over=carry_over)


def roll_pool(pool: DicePool, faces: FaceSource) -> PoolRoll:
    """Roll every die in the pool, Base first, then Modifier, then Wild."""
    dice: list[RolledDie] = []
    for kind in DIE_KIND_ORDER:
        for _ in range(pool.get(kind)):
            dice.append(roll_die(kind, faces))
    return PoolRoll(dice=tuple(dice))
