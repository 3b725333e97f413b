"""Bounded history tables used to order moves during search."""

from __future__ import annotations

from typing import Sequence

import numpy as np

COLOR_NB = 2
SQUARE_NB = 64
PIECE_NB = 16
PIECE_TYPE_NB = 8

BUTTERFLY_BOUND = 7183
CAPTURE_BOUND = 10692
PIECE_TO_BOUND = 29952

_I16_MIN, _I16_MAX = -(1 << 15), (1 << 15) - 1


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class StatsTable:
    """N-dimensional int16 table whose entries are nudged towards a bonus.

    ``bound`` limits updates to ``[-bound, bound]``; a bound of 0 marks a
    table whose entries are only ever set directly.
    """

    def __init__(self, shape: Sequence[int], bound: int) -> None:
        dims = tuple(int(d) for d in shape)
        if not dims or any(d <= 0 for d in dims):
            raise ValueError(f"invalid table shape {shape!r}")
        if not 0 <= bound <= _I16_MAX:
            raise ValueError(f"bound {bound} does not fit in int16")
        self.shape = dims
        self.bound = bound
        self._data = np.zeros(dims, dtype=np.int16)

    def _full_index(self, index) -> tuple[int, ...]:
        idx = index if isinstance(index, tuple) else (index,)
        if len(idx) != len(self.shape):
            raise IndexError(f"expected {len(self.shape)} indices, got {len(idx)}")
        for i, size in zip(idx, self.shape):
            if not 0 <= int(i) < size:
                raise IndexError(f"index {i} out of range 0..{size - 1}")
        return tuple(int(i) for i in idx)

    def update(self, index, bonus: int) -> int:
        """Move the entry towards ``bonus`` with gravity; return the new value."""
        if self.bound == 0:
            raise ValueError("this table does not take bounded updates")
        if abs(bonus) > self.bound:
            raise ValueError(f"bonus {bonus} outside [-{self.bound}, {self.bound}]")
        key = self._full_index(index)
        entry = int(self._data[key])
        entry += bonus - _trunc_div(entry * abs(bonus), self.bound)
        self._data[key] = entry
        return entry

    def fill(self, value: int) -> None:
        """Set every entry to ``value``."""
        self._data.fill(self._checked(value))

    @staticmethod
    def _checked(value: int) -> int:
        v = int(value)
        if not _I16_MIN <= v <= _I16_MAX:
            raise ValueError(f"value {v} does not fit in int16")
        return v

    def __getitem__(self, index):
        idx = index if isinstance(index, tuple) else (index,)
        if len(idx) == len(self.shape):
            return int(self._data[self._full_index(index)])
        view = self._data[index]
        view.flags.writeable = False
        return view

    def __setitem__(self, index, value: int) -> None:
        self._data[self._full_index(index)] = self._checked(value)


def butterfly_history() -> StatsTable:
    """History of quiet moves indexed by ``[color][from * 64 + to]``."""
    return StatsTable((COLOR_NB, SQUARE_NB * SQUARE_NB), BUTTERFLY_BOUND)


def capture_history() -> StatsTable:
    """History of captures indexed by ``[piece][to][captured piece type]``."""
    return StatsTable((PIECE_NB, SQUARE_NB, PIECE_TYPE_NB), CAPTURE_BOUND)


def piece_to_history() -> StatsTable:
    """History indexed by ``[piece][to]``."""
    return StatsTable((PIECE_NB, SQUARE_NB), PIECE_TO_BOUND)