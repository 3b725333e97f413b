"""Shared constants and little-endian stream helpers for network files."""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable

import numpy as np

# Version tag at the start of every network file.
VERSION = 0x7AF32F20

# Scale of the final network output relative to internal units.
OUTPUT_SCALE = 16
WEIGHT_SCALE_BITS = 6

CACHE_LINE_SIZE = 64
MAX_SIMD_WIDTH = 32

_INTEGER_CODES = frozenset("bBhHiIqQ")


class NetworkFormatError(ValueError):
    """Raised when a network stream is truncated or malformed."""


def ceil_to_multiple(n: int, base: int) -> int:
    """Round ``n`` up to the nearest multiple of ``base``."""
    if base <= 0:
        raise ValueError(f"base must be positive, got {base}")
    return (n + base - 1) // base * base


def _struct_for(fmt: str) -> struct.Struct:
    if len(fmt) != 1 or fmt not in _INTEGER_CODES:
        raise ValueError(f"unsupported integer format {fmt!r}")
    return struct.Struct("<" + fmt)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise NetworkFormatError(f"unexpected end of stream: wanted {size} bytes, got {got}")
    return data


def read_int(stream: BinaryIO, fmt: str) -> int:
    """Read one little-endian integer described by a struct code such as ``"I"``."""
    packer = _struct_for(fmt)
    (value,) = packer.unpack(_read_exact(stream, packer.size))
    return value


def write_int(stream: BinaryIO, value: int, fmt: str) -> None:
    """Write one integer in little-endian order using a struct code such as ``"I"``."""
    packer = _struct_for(fmt)
    try:
        data = packer.pack(value)
    except struct.error as exc:
        raise ValueError(f"{value} does not fit format {fmt!r}") from exc
    stream.write(data)


def _little_endian(dtype) -> np.dtype:
    dt = np.dtype(dtype)
    if dt.kind not in "iu":
        raise ValueError(f"unsupported array dtype {dt}")
    return dt.newbyteorder("<")


def read_array(stream: BinaryIO, dtype, count: int) -> np.ndarray:
    """Read ``count`` little-endian integers of ``dtype`` into a new array."""
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    le = _little_endian(dtype)
    data = _read_exact(stream, le.itemsize * count)
    return np.frombuffer(data, dtype=le).astype(np.dtype(dtype))


def write_array(stream: BinaryIO, values: Iterable[int], dtype) -> None:
    """Write ``values`` as little-endian integers of ``dtype``."""
    le = _little_endian(dtype)
    stream.write(np.asarray(values).astype(le).tobytes())