"""
Random Source

Injectable uniform random source used for every stochastic decision in
the engine. Tests substitute a scripted source for exact reproduction.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    def randint(self, low: int, high: int) -> int:
        """Return a uniform integer in the inclusive range [low, high]."""


class NumpyRandomSource:
    """
    RandomSource backed by a numpy Generator.

    Uniform floats are drawn from the generator in blocks and mapped onto
    the requested range, so a single draw does not cost a numpy call.
    """

    BLOCK_SIZE = 4096

    def __init__(self, seed: int | None = None, block_size: int | None = None) -> None:
        self.seed = seed
        self.block_size = block_size or self.BLOCK_SIZE
        self._rng = np.random.default_rng(seed)
        self._block: list[float] = []
        self._index = 0

    def randint(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError(f"Empty range [{low}, {high}]")

        if self._index >= len(self._block):
            self._block = self._rng.random(self.block_size).tolist()
            self._index = 0

        value = self._block[self._index]
        self._index += 1

        # value is in [0, 1), so the result never exceeds high
        return low + int(value * (high - low + 1))


def choose(rng: RandomSource, options: list):
    """Pick one element uniformly using the source's single draw operation."""
    return options[rng.randint(0, len(options) - 1)]
