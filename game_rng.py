from __future__ import annotations

"""Seeded random number generator shared by every world generation stage.

A single :class:`GameRNG` instance is created per regeneration and threaded
through preset selection, preset instantiation, world offsets, aesthetic
modifiers and graph reassembly.  Using one generator keeps the output fully
deterministic for a fixed seed, configuration and preset set.
"""

import random
from typing import Any, Optional, Sequence

import numpy as np


class GameRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)

    # ------------------------------------------------------------------
    # basic random helpers
    # ------------------------------------------------------------------
    def get_int(self, a: int, b: int) -> int:
        """Return an integer from the inclusive range ``[a, b]``."""
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        """Return a float from the half-open range ``[a, b)``."""
        if a > b:
            raise ValueError("a <= b")
        val = float(self.rng.random())
        return a + (b - a) * val

    def choice(self, seq: Sequence[Any]) -> Any:
        """Return a random element from *seq*."""
        if not seq:
            raise ValueError("seq empty")
        return seq[self.get_int(0, len(seq) - 1)]

    def reset(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)


__all__ = ["GameRNG"]
