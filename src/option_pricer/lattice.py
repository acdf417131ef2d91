"""Triangular array addressed by (level, index), used to store lattice node data.

Level ``n`` of a lattice of depth ``d`` holds exactly ``n + 1`` cells, so the
total cell count is ``(d + 1)(d + 2) / 2``. Node ``(n, i)`` of a binomial
tree is the state after ``i`` up-moves out of ``n`` periods.
"""

from __future__ import annotations
from typing import Any
import numpy as np
import pandas as pd
from .exceptions import LatticeIndexError, ValidationError

__all__ = ["TriangularLattice"]


def _is_integer(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


class TriangularLattice:
    """Resizable triangular array.

    Parameters
    ==========
    depth: int
        Index of the last level (>= 0).
    dtype:
        numpy dtype of the cells: ``float`` for option values, ``bool`` for
        exercise flags, ``object`` for arbitrary payloads. Cells are
        default-initialised to zero of that dtype (``0.0``, ``False``, ``0``).
    """

    def __init__(self, depth: int = 0, dtype: Any = float) -> None:
        self._dtype = np.dtype(dtype)
        self._depth = 0
        self._levels: list[np.ndarray] = []
        self.set_depth(depth)

    def __repr__(self) -> str:
        return f"TriangularLattice(depth={self._depth}, dtype={self._dtype})"

    def __str__(self) -> str:
        return self.display()

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def size(self) -> int:
        """Total number of cells, ``(depth + 1)(depth + 2) / 2``."""
        return (self._depth + 1) * (self._depth + 2) // 2

    def set_depth(self, depth: int) -> None:
        """Reallocate storage for ``depth``; all previous contents are discarded."""
        if not _is_integer(depth):
            raise ValidationError(f"depth must be an integer, got {type(depth).__name__}")
        if depth < 0:
            raise ValidationError(f"depth must be >= 0, got {depth}")
        self._depth = int(depth)
        self._levels = [np.zeros(n + 1, dtype=self._dtype) for n in range(self._depth + 1)]

    def _check_level(self, n: int) -> None:
        if not _is_integer(n) or not 0 <= n <= self._depth:
            raise LatticeIndexError(f"level n={n!r} out of range [0, {self._depth}]")

    def _check_indices(self, n: int, i: int) -> None:
        self._check_level(n)
        if not _is_integer(i) or not 0 <= i <= n:
            raise LatticeIndexError(f"index i={i!r} out of range [0, {n}] at level {n}")

    def set_node(self, n: int, i: int, value: Any) -> None:
        self._check_indices(n, i)
        self._levels[n][i] = value

    def get_node(self, n: int, i: int) -> Any:
        self._check_indices(n, i)
        value = self._levels[n][i]
        if isinstance(value, np.generic):
            return value.item()
        return value

    def set_level(self, n: int, values) -> None:
        """Overwrite all ``n + 1`` cells of level ``n``."""
        self._check_level(n)
        arr = np.asarray(values, dtype=self._dtype)
        if arr.shape != (n + 1,):
            raise ValidationError(f"level {n} expects {n + 1} values, got shape {arr.shape}")
        self._levels[n][:] = arr

    def get_level(self, n: int) -> np.ndarray:
        """Return a copy of the ``n + 1`` cells of level ``n``."""
        self._check_level(n)
        return self._levels[n].copy()

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    @staticmethod
    def _format(value: Any) -> str:
        if isinstance(value, (bool, np.bool_)):
            return str(bool(value))
        if isinstance(value, (float, np.floating)):
            return f"{value:g}"
        return str(value)

    def display(self) -> str:
        """Render the lattice as centred rows joined by ``/ \\`` connectors."""
        labels = [[self._format(v) for v in level] for level in self._levels]
        width = max(len(label) for row in labels for label in row)
        gap = width + 2

        lines = []
        for n, row in enumerate(labels):
            indent = max((self._depth - n) * gap // 2, 0)
            line = " " * indent
            for i, label in enumerate(row):
                line += label
                if i < n:
                    line += " " * max(gap - len(label), 1)
            lines.append(line)

            if n < self._depth:
                connectors = (" " * (gap - 1)).join("/ \\" for _ in range(n + 1))
                lines.append(" " * max(indent - 1, 0) + connectors)
        return "\n".join(lines) + "\n"

    def to_frame(self) -> pd.DataFrame:
        """Tabular view: one row per level, one column per index, NaN outside the triangle."""
        rows = [
            list(level) + [np.nan] * (self._depth - n) for n, level in enumerate(self._levels)
        ]
        return pd.DataFrame(
            rows,
            index=pd.RangeIndex(self._depth + 1, name="level"),
            columns=pd.RangeIndex(self._depth + 1, name="index"),
        )
