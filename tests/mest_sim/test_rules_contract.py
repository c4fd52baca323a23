from __future__ import annotations

import json
from pathlib import Path

import pytest

from mest_sim.domain.context import ModifierTag, context_field_names
from mest_sim.domain.types import TestParticipant
from mest_sim.rules.ruleset import DEFAULT_DATA_DIR, Ruleset, RulesError, default_ruleset
from mest_sim.systems.resolver import resolve_test
from tests.helpers.factories import faces, make_participant


def _write_rules(tmp_path: Path, modifiers: list[dict], engine: dict | None = None) -> Path:
    (tmp_path / "engine.json").write_text(json.dumps(engine or {}), encoding="utf-8")
    (tmp_path / "modifiers.json").write_text(json.dumps({"modifiers": modifiers}), encoding="utf-8")
    return tmp_path


def test_ruleset_contracts() -> None:
    rules = Ruleset.load(DEFAULT_DATA_DIR)

    assert rules.engine.base_dice == 2
    assert rules.engine.flatten_base_floor == 2
    assert rules.engine.system_attribute == 2
    assert rules.engine.hindrance_cap == 3

    triggers = context_field_names()
    for entry in rules.modifiers:
        assert entry.trigger in triggers
        assert entry.amount != 0
        assert entry.step >= 1
        assert entry.cap is None or entry.cap >= 1
        assert entry.description.strip()
    assert {entry.tag for entry in rules.modifiers} == set(ModifierTag)
    assert len(rules.modifier(ModifierTag.LEANING)) == 2


def test_default_ruleset_is_cached() -> None:
    assert default_ruleset() is default_ruleset()


def test_missing_rules_file(tmp_path: Path) -> None:
    with pytest.raises(RulesError):
        Ruleset.load(tmp_path)


def test_invalid_json(tmp_path: Path) -> None:
    (tmp_path / "engine.json").write_text("{", encoding="utf-8")
    with pytest.raises(RulesError):
        Ruleset.load(tmp_path)


@pytest.mark.parametrize(
    "entry",
    [
        {"tag": "stealth", "trigger": "is_charge", "kind": "modifier", "amount": 1},
        {"tag": "charge", "trigger": "is_charging", "kind": "modifier", "amount": 1},
        {"tag": "charge", "trigger": "is_charge", "kind": "golden", "amount": 1},
        {"tag": "charge", "trigger": "is_charge", "kind": "modifier", "amount": 0},
        {"tag": "charge", "trigger": "is_charge", "side": "both", "kind": "modifier", "amount": 1},
        {"tag": "size", "trigger": "size_advantage", "kind": "modifier", "amount": 1, "step": 0},
    ],
)
def test_invalid_modifier_entries(tmp_path: Path, entry: dict) -> None:
    with pytest.raises(RulesError):
        Ruleset.load(_write_rules(tmp_path, [entry]))


def test_negative_engine_value(tmp_path: Path) -> None:
    with pytest.raises(RulesError):
        Ruleset.load(_write_rules(tmp_path, [], engine={"base_dice": -1}))


def test_engine_constants_drive_the_resolver(tmp_path: Path) -> None:
    engine = {"base_dice": 3, "flatten_base_floor": 3, "system_attribute": 4}
    rules = Ruleset.load(_write_rules(tmp_path, [], engine=engine))
    source = faces(1, 1, 1, 1, 1, 1)

    outcome = resolve_test(make_participant(2), TestParticipant.system(), faces=source, ruleset=rules)

    assert len(outcome.active_roll.dice) == 3
    assert len(outcome.passive_roll.dice) == 3
    assert source.remaining == 0
    assert outcome.passive_score == 4
    assert outcome.passed is False
