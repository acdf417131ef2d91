"""Random number source for Monte Carlo simulation.

Each Monte Carlo worker thread owns its own :class:`RandomSource`, spawned
from the engine's root source, so threads never share generator state.
"""

from __future__ import annotations
import numpy as np

__all__ = ["RandomSource"]


class RandomSource:
    """Thin wrapper around :class:`numpy.random.Generator`.

    Parameters
    ==========
    seed: int | numpy.random.SeedSequence | None
        Root seed. ``None`` draws fresh entropy from the OS.
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None) -> None:
        if isinstance(seed, np.random.SeedSequence):
            self._seed_sequence = seed
        else:
            self._seed_sequence = np.random.SeedSequence(seed)
        self._generator = np.random.default_rng(self._seed_sequence)

    def uniform(self, size: int | tuple[int, ...] | None = None) -> np.ndarray | float:
        """Uniform sample(s) in [0, 1)."""
        return self._generator.random(size)

    def normal(self, size: int | tuple[int, ...] | None = None) -> np.ndarray | float:
        """Standard normal sample(s)."""
        return self._generator.standard_normal(size)

    def spawn(self, n: int) -> list[RandomSource]:
        """Return ``n`` independent child sources.

        Children are derived deterministically from this source's seed
        sequence; successive calls yield fresh, non-overlapping streams.
        """
        return [RandomSource(child) for child in self._seed_sequence.spawn(n)]
