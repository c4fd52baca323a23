from __future__ import annotations

from hypothesis import strategies as st

from mest_sim.domain.combatants import Combatant
from mest_sim.domain.context import TestContext
from mest_sim.domain.types import DicePool, DieKind, TestParticipant

faces_strategy = st.integers(min_value=1, max_value=6)
die_kind_strategy = st.sampled_from(list(DieKind))


def dice_pool_strategy(max_count: int = 5) -> st.SearchStrategy[DicePool]:
    return st.builds(
        DicePool,
        base=st.integers(min_value=0, max_value=max_count),
        modifier=st.integers(min_value=0, max_value=max_count),
        wild=st.integers(min_value=0, max_value=max_count),
    )


def participant_strategy(max_attribute: int = 8, max_dice: int = 3) -> st.SearchStrategy[TestParticipant]:
    return st.builds(
        TestParticipant,
        attribute=st.integers(min_value=0, max_value=max_attribute),
        bonus=dice_pool_strategy(max_dice),
        penalty=dice_pool_strategy(max_dice),
    )


def combatant_strategy(max_attribute: int = 6) -> st.SearchStrategy[Combatant]:
    attribute = st.integers(min_value=0, max_value=max_attribute)
    tokens = st.integers(min_value=0, max_value=2)
    return st.builds(
        Combatant,
        name=st.just("Fuzz"),
        cca=attribute,
        rca=attribute,
        strength=attribute,
        fortitude=attribute,
        armor=st.integers(min_value=0, max_value=6),
        wounds=tokens,
        delay_tokens=tokens,
        fear_tokens=tokens,
    )


def context_strategy() -> st.SearchStrategy[TestContext]:
    flag = st.booleans()
    amount = st.integers(min_value=0, max_value=10)
    return st.builds(
        TestContext,
        is_charge=flag,
        has_high_ground=flag,
        size_advantage=amount,
        is_defending=flag,
        outnumber_advantage=amount,
        is_cornered=flag,
        is_flanked=flag,
        is_overreach=flag,
        is_point_blank=flag,
        distance_increments=st.integers(min_value=0, max_value=3),
        obscuring_models=amount,
        has_direct_cover=flag,
        is_target_leaning=flag,
        is_blind_attack=flag,
        has_hard_cover=flag,
        is_waiting=flag,
        is_safe=flag,
        hindrance_tokens=st.integers(min_value=0, max_value=3),
    )
