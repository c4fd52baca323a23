from __future__ import annotations

from mest_sim.domain.types import DIE_KIND_ORDER, DicePool, DieKind

BASE_FLOOR = 2


def cancellable(kind: DieKind, active_count: int, passive_count: int, *, base_floor: int = BASE_FLOOR) -> int:
    if kind == DieKind.BASE:
        return min(max(0, active_count - base_floor), max(0, passive_count - base_floor))
    return min(active_count, passive_count)


def flatten(active: DicePool, passive: DicePool, *, base_floor: int = BASE_FLOOR) -> tuple[DicePool, DicePool]:
    """Cancel matching dice between two opposing pools.

    Each kind is cancelled 1:1 independently. Base dice are only cancelled
    from the part of each pool above ``base_floor``.
    """
    for kind in DIE_KIND_ORDER:
        n = cancellable(kind, active.get(kind), passive.get(kind), base_floor=base_floor)
        if n:
            active = active.with_count(kind, active.get(kind) - n)
            passive = passive.with_count(kind, passive.get(kind) - n)
    return active, passive
