"""Data-driven rules engine."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from mest_sim.domain.context import ModifierTag, Side, context_field_names
from mest_sim.domain.types import DieKind

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data" / "rules"


class RulesError(ValueError):
    """Error loading or validating rules."""


@dataclass(frozen=True)
class EngineConfig:
    """Constants of the test procedure."""

    base_dice: int = 2
    flatten_base_floor: int = 2
    system_attribute: int = 2
    hindrance_cap: int = 3


@dataclass(frozen=True)
class ModifierDef:
    """One catalog entry: which context fact triggers it and what it grants."""

    tag: ModifierTag
    trigger: str
    side: Side
    kind: DieKind | None
    amount: int
    step: int = 1
    cap: int | None = None
    damage_only: bool = False
    description: str = ""

    def count_for(self, raw: int) -> int:
        count = raw // self.step
        if self.cap is not None:
            count = min(count, self.cap)
        return max(0, count)


@dataclass(frozen=True)
class Ruleset:
    """Loaded and validated ruleset."""

    engine: EngineConfig
    modifiers: tuple[ModifierDef, ...]

    @staticmethod
    def load(data_dir: Path) -> "Ruleset":
        """Load ruleset from JSON files in data directory."""
        engine = _load_engine(data_dir / "engine.json")
        modifiers = _load_modifiers(data_dir / "modifiers.json")
        return Ruleset(engine=engine, modifiers=modifiers)

    def modifier(self, tag: ModifierTag) -> list[ModifierDef]:
        return [entry for entry in self.modifiers if entry.tag == tag]


@lru_cache(maxsize=1)
def default_ruleset() -> Ruleset:
    return Ruleset.load(DEFAULT_DATA_DIR)


def _load_json(path: Path) -> dict[str, Any]:
    """Load JSON file."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise RulesError(f"Rules file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise RulesError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesError(f"{path}: top level must be an object")
    return data


def _load_engine(path: Path) -> EngineConfig:
    data = _load_json(path)
    try:
        config = EngineConfig(
            base_dice=int(data.get("base_dice", 2)),
            flatten_base_floor=int(data.get("flatten_base_floor", 2)),
            system_attribute=int(data.get("system_attribute", 2)),
            hindrance_cap=int(data.get("hindrance_cap", 3)),
        )
    except (TypeError, ValueError) as exc:
        raise RulesError(f"{path}: engine values must be integers ({exc})") from exc
    for name in ("base_dice", "flatten_base_floor", "system_attribute", "hindrance_cap"):
        if getattr(config, name) < 0:
            raise RulesError(f"{path}: {name} must be >= 0")
    return config


def _load_modifiers(path: Path) -> tuple[ModifierDef, ...]:
    """Load the situational modifier catalog."""
    data = _load_json(path)
    if "modifiers" not in data:
        raise RulesError(f"{path}: missing 'modifiers' key")
    triggers = context_field_names()
    entries: list[ModifierDef] = []
    for item in data["modifiers"]:
        if not isinstance(item, dict):
            raise RulesError(f"{path}: modifier entry must be object")
        try:
            tag = ModifierTag(item.get("tag"))
        except ValueError as exc:
            raise RulesError(f"{path}: unknown modifier tag {item.get('tag')!r}") from exc
        trigger = item.get("trigger")
        if trigger not in triggers:
            raise RulesError(f"{path}: modifier {tag.value} has unknown trigger {trigger!r}")
        try:
            side = Side(item.get("side", "active"))
        except ValueError as exc:
            raise RulesError(f"{path}: modifier {tag.value} has invalid side") from exc
        kind_raw = item.get("kind")
        try:
            kind = DieKind(kind_raw) if kind_raw is not None else None
        except ValueError as exc:
            raise RulesError(f"{path}: modifier {tag.value} has invalid kind {kind_raw!r}") from exc
        amount = item.get("amount")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
            raise RulesError(f"{path}: modifier {tag.value} amount must be a non-zero integer")
        step = int(item.get("step", 1))
        if step < 1:
            raise RulesError(f"{path}: modifier {tag.value} step must be >= 1")
        cap = item.get("cap")
        if cap is not None:
            cap = int(cap)
            if cap < 1:
                raise RulesError(f"{path}: modifier {tag.value} cap must be >= 1")
        entries.append(
            ModifierDef(
                tag=tag,
                trigger=str(trigger),
                side=side,
                kind=kind,
                amount=amount,
                step=step,
                cap=cap,
                damage_only=bool(item.get("damage_only", False)),
                description=str(item.get("description", "")),
            )
        )
    return tuple(entries)
