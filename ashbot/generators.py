from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from ashbot.brain import Brain
from ashbot.triggers import RandomSource

if TYPE_CHECKING:
    from ashbot.rooms import RoomRegistry


logger = logging.getLogger(__name__)


class GeneratorPool:
    """Fixed array of independent brains addressed by chain index.

    Slot 0 always exists and is shared by every room.
    """

    def __init__(self, size: int, rng: RandomSource) -> None:
        if size < 1:
            raise ValueError("Generator pool needs at least one chain")
        self._brains = [Brain(rng) for _ in range(size)]

    @classmethod
    def for_registry(cls, registry: RoomRegistry, rng: RandomSource) -> "GeneratorPool":
        pool = cls(registry.max_chain_index + 1, rng)
        logger.info("Generator pool: %d chains", len(pool))
        return pool

    def __len__(self) -> int:
        return len(self._brains)

    def ingest(self, index: int, text: str) -> None:
        self._brains[index].ingest(text)

    def ingest_all(self, indices: Iterable[int], text: str) -> None:
        for i in indices:
            self._brains[i].ingest(text)

    def generate(self, index: int, seed: str) -> str | None:
        return self._brains[index].generate(seed)

    def word_count(self, index: int) -> int:
        return self._brains[index].word_count()
