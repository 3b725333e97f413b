"""Integer semantics of the vector dot-product and reduction primitives.

The helpers mirror the saturating byte multiply-add path used by the
inference layers: unsigned 8-bit inputs times signed 8-bit weights, summed
in pairs with 16-bit saturation, then widened to 32-bit accumulators.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

_I16_MIN, _I16_MAX = -(1 << 15), (1 << 15) - 1


def _wrap32(values) -> np.ndarray:
    arr = np.asarray(values, dtype=np.int64)
    return ((arr + (1 << 31)) % (1 << 32) - (1 << 31)).astype(np.int32)


def _bytes_pair(a, b) -> tuple[np.ndarray, np.ndarray]:
    ua = np.asarray(a, dtype=np.int64)
    sb = np.asarray(b, dtype=np.int64)
    if ua.ndim != 1 or sb.ndim != 1 or ua.shape != sb.shape:
        raise ValueError("operands must be one-dimensional and of equal length")
    if ua.size % 2:
        raise ValueError("operand length must be even")
    if ua.size and (ua.min() < 0 or ua.max() > 255):
        raise ValueError("first operand must hold unsigned bytes")
    if sb.size and (sb.min() < -128 or sb.max() > 127):
        raise ValueError("second operand must hold signed bytes")
    return ua, sb


def maddubs(a: Sequence[int], b: Sequence[int]) -> np.ndarray:
    """Multiply unsigned bytes by signed bytes and add adjacent pairs with int16 saturation."""
    ua, sb = _bytes_pair(a, b)
    products = (ua * sb).reshape(-1, 2).sum(axis=1)
    return np.clip(products, _I16_MIN, _I16_MAX).astype(np.int16)


def _madd_ones(words: np.ndarray) -> np.ndarray:
    return words.astype(np.int64).reshape(-1, 2).sum(axis=1)


def _check_acc(acc, lanes: int) -> np.ndarray:
    arr = np.asarray(acc, dtype=np.int64)
    if arr.shape != (lanes,):
        raise ValueError(f"accumulator must have {lanes} lanes, got shape {arr.shape}")
    return arr


def add_dpbusd(acc: Sequence[int], a: Sequence[int], b: Sequence[int]) -> np.ndarray:
    """Return ``acc`` plus the byte dot products of ``a`` and ``b``, four bytes per lane."""
    words = maddubs(a, b)
    if words.size % 2:
        raise ValueError("operand length must be a multiple of four")
    dots = _madd_ones(words)
    return _wrap32(_check_acc(acc, dots.size) + dots)


def add_dpbusd_x2(
    acc: Sequence[int],
    a0: Sequence[int],
    b0: Sequence[int],
    a1: Sequence[int],
    b1: Sequence[int],
) -> np.ndarray:
    """Accumulate two byte dot products, adding their int16 pair sums with saturation first."""
    w0 = maddubs(a0, b0).astype(np.int64)
    w1 = maddubs(a1, b1).astype(np.int64)
    if w0.shape != w1.shape:
        raise ValueError("both operand pairs must have the same length")
    if w0.size % 2:
        raise ValueError("operand length must be a multiple of four")
    words = np.clip(w0 + w1, _I16_MIN, _I16_MAX)
    dots = _madd_ones(words)
    return _wrap32(_check_acc(acc, dots.size) + dots)


def hadd(acc: Sequence[int], bias: int) -> int:
    """Sum all lanes of ``acc`` and add ``bias``, wrapping to 32 bits."""
    total = int(np.asarray(acc, dtype=np.int64).sum()) + int(bias)
    return int(_wrap32(total))


def haddx4(
    acc0: Sequence[int],
    acc1: Sequence[int],
    acc2: Sequence[int],
    acc3: Sequence[int],
    bias: Sequence[int],
) -> np.ndarray:
    """Reduce four accumulators to four lanes, each plus the matching bias lane."""
    biases = np.asarray(bias, dtype=np.int64)
    if biases.shape != (4,):
        raise ValueError("bias must have exactly four lanes")
    sums = [int(np.asarray(acc, dtype=np.int64).sum()) for acc in (acc0, acc1, acc2, acc3)]
    return _wrap32(np.asarray(sums, dtype=np.int64) + biases)