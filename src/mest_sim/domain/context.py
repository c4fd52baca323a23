"""Situational context and the modifiers it produces."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum

from mest_sim.domain.types import DiceInputError, DicePool


class ModifierTag(str, Enum):
    CHARGE = "charge"
    HIGH_GROUND = "high_ground"
    SIZE = "size"
    DEFEND = "defend"
    OUTNUMBER = "outnumber"
    CORNERED = "cornered"
    FLANKED = "flanked"
    OVERREACH = "overreach"
    POINT_BLANK = "point_blank"
    ELEVATION = "elevation"
    DISTANCE = "distance"
    INTERVENING_COVER = "intervening_cover"
    OBSCURED = "obscured"
    DIRECT_COVER = "direct_cover"
    LEANING = "leaning"
    BLIND = "blind"
    HARD_COVER = "hard_cover"
    WAITING = "waiting"
    SOLO = "solo"
    SUDDENNESS = "suddenness"
    FRIENDLY = "friendly"
    HELP = "help"
    SAFETY = "safety"
    CONCENTRATE = "concentrate"
    FOCUS = "focus"
    HINDRANCE = "hindrance"
    CONFINED = "confined"


class Side(str, Enum):
    ACTIVE = "active"
    PASSIVE = "passive"


class Direction(str, Enum):
    BONUS = "bonus"
    PENALTY = "penalty"


@dataclass(frozen=True)
class TestContext:
    """Battlefield facts computed by the caller for a single test.

    Booleans switch a modifier on; integer fields are raw amounts (size
    points, models, range increments, tokens) that the catalog scales.
    """

    __test__ = False

    # Close combat
    is_charge: bool = False
    has_high_ground: bool = False
    size_advantage: int = 0
    is_defending: bool = False
    outnumber_advantage: int = 0
    is_cornered: bool = False
    is_flanked: bool = False
    is_overreach: bool = False

    # Ranged combat and detection
    is_point_blank: bool = False
    has_elevation: bool = False
    distance_increments: int = 0
    has_intervening_cover: bool = False
    obscuring_models: int = 0
    has_direct_cover: bool = False
    is_leaning: bool = False
    is_target_leaning: bool = False
    is_blind_attack: bool = False
    has_hard_cover: bool = False
    is_damage_test: bool = False

    # Miscellaneous
    is_waiting: bool = False
    is_solo: bool = False
    is_sudden: bool = False
    has_friendly_in_cohesion: bool = False
    has_help: bool = False
    is_safe: bool = False
    is_concentrating: bool = False
    is_focusing: bool = False
    hindrance_tokens: int = 0
    is_confined: bool = False

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool):
                continue
            if not isinstance(value, int) or value < 0:
                raise DiceInputError(f"TestContext.{item.name} must be a non-negative integer, got {value!r}")

    def for_damage_test(self) -> "TestContext":
        """Context for the follow-on damage test; only damage-phase facts carry over."""
        return TestContext(has_hard_cover=self.has_hard_cover, is_damage_test=True)


def context_field_names() -> frozenset[str]:
    return frozenset(item.name for item in fields(TestContext))


@dataclass(frozen=True)
class SituationalModifier:
    tag: ModifierTag
    side: Side
    direction: Direction
    dice: DicePool = field(default_factory=DicePool)
    score: int = 0

    @property
    def is_flat(self) -> bool:
        return self.dice.is_empty()
