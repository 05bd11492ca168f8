"""Pluggable randomness provider backed by numpy's ``Generator``."""

from __future__ import annotations

from typing import Protocol, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class RandomSource(Protocol):
    """Every random decision the engine makes goes through this interface."""

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]`` (both inclusive)."""
        ...

    def coin(self) -> bool:
        """Fair coin flip."""
        ...

    def sample(self, items: Sequence[T], k: int) -> list[T]:
        """``k`` distinct items drawn uniformly without replacement."""
        ...

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """A uniformly random permutation of ``items`` (input untouched)."""
        ...


class NumpyRandomSource:
    """Default :class:`RandomSource`. Unseeded unless a seed or generator is given."""

    def __init__(
        self,
        seed: int | None = None,
        generator: np.random.Generator | None = None,
    ) -> None:
        self._rng = generator if generator is not None else np.random.default_rng(seed)

    def randint(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError(f"empty range [{low}, {high}]")
        return int(self._rng.integers(low, high, endpoint=True))

    def coin(self) -> bool:
        return bool(self._rng.random() < 0.5)

    def sample(self, items: Sequence[T], k: int) -> list[T]:
        if k <= 0:
            return []
        if k >= len(items):
            return self.shuffle(items)
        picks = self._rng.choice(len(items), size=k, replace=False)
        return [items[int(i)] for i in picks]

    def shuffle(self, items: Sequence[T]) -> list[T]:
        order = self._rng.permutation(len(items))
        return [items[int(i)] for i in order]
