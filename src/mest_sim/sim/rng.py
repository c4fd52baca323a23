from __future__ import annotations

import hashlib
from collections import deque
from random import Random
from typing import Iterable, Protocol

from mest_sim.domain.types import DiceInputError


def derive_seed(base_seed: int, *, iteration: int, stream: str, purpose: str) -> int:
    payload = f"{base_seed}|{iteration}|{stream}|{purpose}".encode("utf-8")
    digest = hashlib.blake2b(payload, digest_size=8).digest()
    return int.from_bytes(digest, "big")


class FaceSourceExhausted(RuntimeError):
    """A scripted face sequence ran out before the test finished rolling."""


class FaceSource(Protocol):
    def next_face(self) -> int: ...


class RandomFaceSource:
    """Uniform d6 faces drawn from a ``random.Random``."""

    def __init__(self, rng: Random | None = None, *, seed: int | None = None) -> None:
        self.rng = rng if rng is not None else Random(seed)

    def next_face(self) -> int:
        return self.rng.randint(1, 6)

    @classmethod
    def for_iteration(cls, base_seed: int, iteration: int, *, stream: str = "attack") -> "RandomFaceSource":
        return cls(Random(derive_seed(base_seed, iteration=iteration, stream=stream, purpose="faces")))


class ScriptedFaceSource:
    """Replays a fixed face sequence, in order."""

    def __init__(self, faces: Iterable[int]) -> None:
        queued = list(faces)
        for face in queued:
            if isinstance(face, bool) or not isinstance(face, int) or not 1 <= face <= 6:
                raise DiceInputError(f"Scripted face must be an integer in 1..6, got {face!r}")
        self._faces = deque(queued)

    @property
    def remaining(self) -> int:
        return len(self._faces)

    def next_face(self) -> int:
        if not self._faces:
            raise FaceSourceExhausted("Scripted face sequence exhausted")
        return self._faces.popleft()
