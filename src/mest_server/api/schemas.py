from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_by_name=True)


class DicePool(CamelModel):
    base: int = Field(0, ge=0)
    modifier: int = Field(0, ge=0)
    wild: int = Field(0, ge=0)


class Participant(CamelModel):
    attribute: int = Field(0, ge=0)
    bonus: DicePool = Field(default_factory=DicePool)
    penalty: DicePool = Field(default_factory=DicePool)
    is_system: bool = Field(False, alias="isSystem")


class TestContext(CamelModel):
    is_charge: bool = Field(False, alias="isCharge")
    has_high_ground: bool = Field(False, alias="hasHighGround")
    size_advantage: int = Field(0, alias="sizeAdvantage", ge=0)
    is_defending: bool = Field(False, alias="isDefending")
    outnumber_advantage: int = Field(0, alias="outnumberAdvantage", ge=0)
    is_cornered: bool = Field(False, alias="isCornered")
    is_flanked: bool = Field(False, alias="isFlanked")
    is_overreach: bool = Field(False, alias="isOverreach")
    is_point_blank: bool = Field(False, alias="isPointBlank")
    has_elevation: bool = Field(False, alias="hasElevation")
    distance_increments: int = Field(0, alias="distanceIncrements", ge=0)
    has_intervening_cover: bool = Field(False, alias="hasInterveningCover")
    obscuring_models: int = Field(0, alias="obscuringModels", ge=0)
    has_direct_cover: bool = Field(False, alias="hasDirectCover")
    is_leaning: bool = Field(False, alias="isLeaning")
    is_target_leaning: bool = Field(False, alias="isTargetLeaning")
    is_blind_attack: bool = Field(False, alias="isBlindAttack")
    has_hard_cover: bool = Field(False, alias="hasHardCover")
    is_damage_test: bool = Field(False, alias="isDamageTest")
    is_waiting: bool = Field(False, alias="isWaiting")
    is_solo: bool = Field(False, alias="isSolo")
    is_sudden: bool = Field(False, alias="isSudden")
    has_friendly_in_cohesion: bool = Field(False, alias="hasFriendlyInCohesion")
    has_help: bool = Field(False, alias="hasHelp")
    is_safe: bool = Field(False, alias="isSafe")
    is_concentrating: bool = Field(False, alias="isConcentrating")
    is_focusing: bool = Field(False, alias="isFocusing")
    hindrance_tokens: int = Field(0, alias="hindranceTokens", ge=0)
    is_confined: bool = Field(False, alias="isConfined")


class Combatant(CamelModel):
    name: str
    cca: int = Field(..., ge=0)
    rca: int = Field(..., ge=0)
    strength: int = Field(..., ge=0)
    fortitude: int = Field(..., ge=0)
    armor: int = Field(0, ge=0)
    wounds: int = Field(0, ge=0)
    delay_tokens: int = Field(0, alias="delayTokens", ge=0)
    fear_tokens: int = Field(0, alias="fearTokens", ge=0)


class Weapon(CamelModel):
    name: str
    accuracy: Optional[Union[int, str]] = None
    damage: Optional[str] = None
    impact: int = Field(0, ge=0)


class ResolveRequest(CamelModel):
    active: Participant
    passive: Participant
    difficulty_rating: int = Field(0, alias="difficultyRating")
    context: Optional[TestContext] = None
    faces: Optional[List[int]] = None
    seed: Optional[int] = None


class AttackRequest(CamelModel):
    attacker: Combatant
    defender: Combatant
    weapon: Weapon
    context: Optional[TestContext] = None
    mode: Literal["close", "ranged"] = "close"
    faces: Optional[List[int]] = None
    seed: Optional[int] = None


class BatchRequest(CamelModel):
    attacker: Combatant
    defender: Combatant
    weapon: Weapon
    context: Optional[TestContext] = None
    mode: Literal["close", "ranged"] = "close"
    iterations: int = Field(..., ge=1, le=200_000)
    seed: int = 1
    workers: int = Field(1, ge=1, le=16)
    confidence: float = Field(0.95, gt=0, lt=1)


class RolledDie(CamelModel):
    kind: str
    face: int
    successes: int
    carry_over: bool = Field(..., alias="carryOver")


class Modifier(CamelModel):
    tag: str
    side: str
    direction: str
    dice: DicePool
    score: int


class TestOutcomeResponse(CamelModel):
    passed: bool
    cascades: int
    misses: int
    active_score: int = Field(..., alias="activeScore")
    passive_score: int = Field(..., alias="passiveScore")
    carry_over: DicePool = Field(..., alias="carryOver")
    active_dice: List[RolledDie] = Field(..., alias="activeDice")
    passive_dice: List[RolledDie] = Field(..., alias="passiveDice")
    modifiers: List[Modifier]


class WoundCalculation(CamelModel):
    effective_armor: int = Field(..., alias="effectiveArmor")
    remaining_impact: int = Field(..., alias="remainingImpact")
    damage_successes: int = Field(..., alias="damageSuccesses")
    wounds_inflicted: int = Field(..., alias="woundsInflicted")


class AttackResponse(CamelModel):
    hit: bool
    wounds_inflicted: int = Field(..., alias="woundsInflicted")
    remaining_impact: int = Field(..., alias="remainingImpact")
    effective_armor: int = Field(..., alias="effectiveArmor")
    hit_test: TestOutcomeResponse = Field(..., alias="hitTest")
    damage_test: Optional[TestOutcomeResponse] = Field(None, alias="damageTest")
    wound_calculation: Optional[WoundCalculation] = Field(None, alias="woundCalculation")


class ModifierStats(CamelModel):
    tag: str
    usage: int
    applied: int
    successful: int
    success_rate: float = Field(..., alias="successRate")
    effectiveness: float


class TelemetryResponse(CamelModel):
    total_usage: int = Field(..., alias="totalUsage")
    modifiers: List[ModifierStats]


class ConfidenceInterval(CamelModel):
    lower: float
    upper: float
    confidence: float


class BatchResponse(CamelModel):
    iterations: int
    completed: int
    skipped: int
    hits: int
    hit_rate: float = Field(..., alias="hitRate")
    mean_wounds: float = Field(..., alias="meanWounds")
    wound_histogram: Dict[str, int] = Field(..., alias="woundHistogram")
    hit_rate_interval: ConfidenceInterval = Field(..., alias="hitRateInterval")
    telemetry: TelemetryResponse


class CatalogEntry(CamelModel):
    tag: str
    trigger: str
    side: str
    kind: Optional[str] = None
    amount: int
    step: int
    cap: Optional[int] = None
    damage_only: bool = Field(..., alias="damageOnly")
    description: str


class CatalogResponse(CamelModel):
    modifiers: List[CatalogEntry]


class ApiResponse(CamelModel):
    ok: bool
    message: Optional[str] = None
    message_kind: str = Field("info", alias="messageKind")
