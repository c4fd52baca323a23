from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from random import Random

from mest_sim.rules.ruleset import Ruleset, default_ruleset
from mest_sim.sim.telemetry import ModifierTelemetry


@dataclass
class EngineSession:
    ruleset: Ruleset
    rng: Random = field(default_factory=Random)
    telemetry: ModifierTelemetry = field(default_factory=ModifierTelemetry)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def reset_telemetry(self) -> None:
        self.telemetry.reset()


_sessions: dict[str, EngineSession] = {}


def get_or_create_session(session_id: str | None) -> tuple[str, EngineSession]:
    if session_id and session_id in _sessions:
        return session_id, _sessions[session_id]

    new_id = str(uuid.uuid4())
    session = EngineSession(ruleset=default_ruleset())
    _sessions[new_id] = session
    return new_id, session


def get_session(session_id: str) -> EngineSession | None:
    return _sessions.get(session_id)
