"""Fully connected layer with int8 weights, int32 biases and uint8 inputs."""

from __future__ import annotations

from typing import BinaryIO, Sequence

import numpy as np

from nnuekit.common import MAX_SIMD_WIDTH, ceil_to_multiple, read_array, write_array

_HASH_SEED = 0xCC03DAE4
_MASK32 = 0xFFFFFFFF


def _wrap32(values: np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=np.int64)
    return ((arr + (1 << 31)) % (1 << 32) - (1 << 31)).astype(np.int32)


class AffineTransform:
    """Affine transform ``output = biases + weights @ input`` over quantized values.

    Weights are stored row by row, one row of ``padded_input_dimensions``
    entries per output; the padding columns are serialized but never used.
    """

    def __init__(self, input_dimensions: int, output_dimensions: int) -> None:
        if input_dimensions <= 0 or output_dimensions <= 0:
            raise ValueError("layer dimensions must be positive")
        self.input_dimensions = input_dimensions
        self.output_dimensions = output_dimensions
        self.padded_input_dimensions = ceil_to_multiple(input_dimensions, MAX_SIMD_WIDTH)
        self.padded_output_dimensions = ceil_to_multiple(output_dimensions, MAX_SIMD_WIDTH)
        self.biases = np.zeros(output_dimensions, dtype=np.int32)
        self.weights = np.zeros(
            (output_dimensions, self.padded_input_dimensions), dtype=np.int8
        )

    def hash_value(self, prev_hash: int) -> int:
        """Combine the previous layer's hash with this layer's shape."""
        prev = prev_hash & _MASK32
        value = (_HASH_SEED + self.output_dimensions) & _MASK32
        value ^= prev >> 1
        value ^= (prev << 31) & _MASK32
        return value

    def weight_index(self, i: int) -> tuple[int, int]:
        """Return the ``(output, input)`` position of the ``i``-th serialized weight."""
        total = self.output_dimensions * self.padded_input_dimensions
        if not 0 <= i < total:
            raise IndexError(f"weight index {i} out of range 0..{total - 1}")
        return divmod(i, self.padded_input_dimensions)

    def read_parameters(self, stream: BinaryIO) -> None:
        """Load biases then weights from ``stream``."""
        biases = read_array(stream, np.int32, self.output_dimensions)
        weights = read_array(
            stream, np.int8, self.output_dimensions * self.padded_input_dimensions
        )
        self.biases = biases
        self.weights = weights.reshape(self.output_dimensions, self.padded_input_dimensions)

    def write_parameters(self, stream: BinaryIO) -> None:
        """Store biases then weights to ``stream``."""
        write_array(stream, self.biases, np.int32)
        write_array(stream, self.weights.reshape(-1), np.int8)

    def propagate(self, inputs: Sequence[int]) -> np.ndarray:
        """Apply the layer to uint8 ``inputs``; returns int32 outputs."""
        values = np.asarray(inputs, dtype=np.int64)
        if values.ndim != 1 or not (
            self.input_dimensions <= values.size <= self.padded_input_dimensions
        ):
            raise ValueError(
                f"expected {self.input_dimensions} to {self.padded_input_dimensions} "
                f"inputs, got shape {values.shape}"
            )
        if values.size and (values.min() < 0 or values.max() > 255):
            raise ValueError("inputs must be unsigned bytes")
        used = values[: self.input_dimensions]
        weights = self.weights[:, : self.input_dimensions].astype(np.int64)
        sums = self.biases.astype(np.int64) + weights @ used
        return _wrap32(sums)