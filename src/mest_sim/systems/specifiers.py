"""Parsing of weapon accuracy and damage specifier strings.

Specifiers are parsed once, when weapon data is loaded, into
``AccuracySpec`` and ``DamageFormula``. Malformed input never raises: it
degrades to the least advantageous reading and is logged.
"""

from __future__ import annotations

import logging
import re

from mest_sim.domain.combatants import ATTRIBUTE_CODES, AccuracySpec, DamageFormula, Weapon
from mest_sim.domain.types import DicePool, DieKind

logger = logging.getLogger(__name__)

NO_MODIFIER = "-"

_DIE_SUFFIXES = {"b": DieKind.BASE, "m": DieKind.MODIFIER, "w": DieKind.WILD}
_DICE_TERM = re.compile(r"^([+-]?)(\d*)([bmw])$")
_FLAT_TERM = re.compile(r"^[+-]?\d+$")


def parse_dice_delta(text: str) -> tuple[int, DicePool] | None:
    """``"+1m"`` -> ``(1, DicePool(modifier=1))``; ``"-2w"`` -> ``(-1, DicePool(wild=2))``.

    A missing count means one die. Returns None when ``text`` is not a dice term.
    """
    match = _DICE_TERM.match(text.strip().lower())
    if match is None:
        return None
    sign, digits, suffix = match.groups()
    count = int(digits) if digits else 1
    if count == 0:
        return None
    return (-1 if sign == "-" else 1), DicePool.of(_DIE_SUFFIXES[suffix], count)


def parse_accuracy(value: str | int | None) -> AccuracySpec:
    if value is None or isinstance(value, bool):
        return AccuracySpec()
    if isinstance(value, int):
        return AccuracySpec(score=value)
    text = str(value).strip()
    if not text or text == NO_MODIFIER:
        return AccuracySpec()
    if _FLAT_TERM.match(text):
        return AccuracySpec(score=int(text))
    parsed = parse_dice_delta(text)
    if parsed is None:
        logger.warning("Unrecognised accuracy specifier %r; using no modifier", value)
        return AccuracySpec()
    sign, pool = parsed
    if sign < 0:
        return AccuracySpec(penalty=pool)
    return AccuracySpec(bonus=pool)


def parse_damage_formula(value: str | None) -> DamageFormula:
    """``"STR+1w"``, ``"2+1b"``, ``"STR+2"``. Empty or malformed means STR only."""
    if value is None:
        return DamageFormula()
    text = str(value).strip()
    if not text:
        return DamageFormula()

    attributes: list[str] = []
    flat = 0
    dice = DicePool()
    for part in text.split("+"):
        term = part.strip()
        if term.upper() in ATTRIBUTE_CODES:
            attributes.append(term.upper())
            continue
        if _FLAT_TERM.match(term):
            flat += int(term)
            continue
        parsed = parse_dice_delta(term)
        if parsed is not None and parsed[0] > 0:
            dice = dice.plus(parsed[1])
            continue
        logger.warning("Unrecognised damage formula %r; using STR only", value)
        return DamageFormula()
    return DamageFormula(attributes=tuple(attributes), flat=flat, dice=dice)


def build_weapon(
    name: str,
    accuracy: str | int | None = None,
    damage: str | None = None,
    impact: int = 0,
) -> Weapon:
    return Weapon(
        name=name,
        accuracy=parse_accuracy(accuracy),
        damage=parse_damage_formula(damage),
        impact=impact,
    )
