from __future__ import annotations

from mest_sim.domain.combatants import Combatant, Weapon
from mest_sim.domain.types import DicePool, TestParticipant
from mest_sim.sim.rng import ScriptedFaceSource
from mest_sim.systems.specifiers import build_weapon


def make_combatant(
    name: str = "Militia",
    *,
    cca: int = 2,
    rca: int = 2,
    strength: int = 2,
    fortitude: int = 2,
    armor: int = 0,
    wounds: int = 0,
    delay_tokens: int = 0,
    fear_tokens: int = 0,
) -> Combatant:
    """Fresh combatant for tests; every attribute defaults to an average 2."""
    return Combatant(
        name=name,
        cca=cca,
        rca=rca,
        strength=strength,
        fortitude=fortitude,
        armor=armor,
        wounds=wounds,
        delay_tokens=delay_tokens,
        fear_tokens=fear_tokens,
    )


def make_weapon(
    name: str = "Sword",
    *,
    accuracy: str | int | None = None,
    damage: str | None = "STR",
    impact: int = 0,
) -> Weapon:
    return build_weapon(name, accuracy=accuracy, damage=damage, impact=impact)


def make_participant(attribute: int, *, bonus: dict | None = None, penalty: dict | None = None) -> TestParticipant:
    return TestParticipant(
        attribute=attribute,
        bonus=DicePool.from_mapping(bonus),
        penalty=DicePool.from_mapping(penalty),
    )


def faces(*values: int) -> ScriptedFaceSource:
    return ScriptedFaceSource(values)
