"""Accumulated first-layer sums for one perspective and how they are kept current.

The feature transformer's first layer is a sum of weight columns, one per
active feature, on top of a bias vector. Rather than recomputing that sum from
scratch after every move, an accumulator can be refreshed in full or updated
incrementally by subtracting the columns of removed features and adding those
of added features. Sums wrap to int16 (positional part) and int32 (PSQT part),
like the fixed-width integers they model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np


def _wrap(values, bits: int, dtype) -> np.ndarray:
    arr = np.asarray(values, dtype=np.int64)
    half = 1 << (bits - 1)
    return ((arr + half) % (1 << bits) - half).astype(dtype)


def _matrix(values, name: str) -> np.ndarray:
    arr = np.asarray(values)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be a two-dimensional array, got shape {arr.shape}")
    return arr.astype(np.int64)


def _indices(indices: Iterable[int], rows: int) -> np.ndarray:
    idx = np.asarray(list(indices), dtype=np.int64)
    if idx.size and (idx.min() < 0 or idx.max() >= rows):
        raise IndexError(f"feature index out of range 0..{rows - 1}")
    return idx


def _check_shapes(weights: np.ndarray, psqt_weights: np.ndarray) -> None:
    if weights.shape[0] != psqt_weights.shape[0]:
        raise ValueError(
            "weights and psqt_weights must have one row per feature: "
            f"{weights.shape[0]} != {psqt_weights.shape[0]}"
        )


def _column_sum(matrix: np.ndarray, idx: np.ndarray) -> np.ndarray:
    if idx.size == 0:
        return np.zeros(matrix.shape[1], dtype=np.int64)
    return matrix[idx].sum(axis=0)


@dataclass(eq=False)
class Accumulator:
    """First-layer sums for one perspective: int16 positional and int32 PSQT parts."""

    accumulation: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int16))
    psqt_accumulation: np.ndarray = field(
        default_factory=lambda: np.zeros(0, dtype=np.int32)
    )

    def __post_init__(self) -> None:
        acc = np.asarray(self.accumulation)
        psqt = np.asarray(self.psqt_accumulation)
        if acc.ndim != 1 or psqt.ndim != 1:
            raise ValueError("accumulator parts must be one-dimensional")
        self.accumulation = acc.astype(np.int16)
        self.psqt_accumulation = psqt.astype(np.int32)

    def copy(self) -> "Accumulator":
        """Return an independent copy."""
        return Accumulator(self.accumulation.copy(), self.psqt_accumulation.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Accumulator):
            return NotImplemented
        return np.array_equal(self.accumulation, other.accumulation) and np.array_equal(
            self.psqt_accumulation, other.psqt_accumulation
        )


def refresh_accumulator(biases, weights, psqt_weights, active: Iterable[int]) -> Accumulator:
    """Compute an accumulator from scratch for the ``active`` feature indices.

    ``weights`` has one row of ``half_dimensions`` int16 values per feature and
    ``psqt_weights`` one row of int32 values per feature.
    """
    w = _matrix(weights, "weights")
    p = _matrix(psqt_weights, "psqt_weights")
    _check_shapes(w, p)
    b = np.asarray(biases, dtype=np.int64)
    if b.shape != (w.shape[1],):
        raise ValueError(f"expected {w.shape[1]} biases, got shape {b.shape}")
    idx = _indices(active, w.shape[0])
    accumulation = _wrap(b + _column_sum(w, idx), 16, np.int16)
    psqt = _wrap(_column_sum(p, idx), 32, np.int32)
    return Accumulator(accumulation, psqt)


def update_accumulator(
    accumulator: Accumulator,
    weights,
    psqt_weights,
    removed: Iterable[int],
    added: Iterable[int],
) -> Accumulator:
    """Return ``accumulator`` with ``removed`` features taken out and ``added`` ones put in."""
    w = _matrix(weights, "weights")
    p = _matrix(psqt_weights, "psqt_weights")
    _check_shapes(w, p)
    if accumulator.accumulation.shape != (w.shape[1],):
        raise ValueError("accumulator width does not match the weights")
    if accumulator.psqt_accumulation.shape != (p.shape[1],):
        raise ValueError("accumulator PSQT width does not match the PSQT weights")
    rem = _indices(removed, w.shape[0])
    add = _indices(added, w.shape[0])
    accumulation = (
        accumulator.accumulation.astype(np.int64) - _column_sum(w, rem) + _column_sum(w, add)
    )
    psqt = (
        accumulator.psqt_accumulation.astype(np.int64)
        - _column_sum(p, rem)
        + _column_sum(p, add)
    )
    return Accumulator(_wrap(accumulation, 16, np.int16), _wrap(psqt, 32, np.int32))