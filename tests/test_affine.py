import io

import numpy as np
import pytest

from nnuekit.affine import AffineTransform
from nnuekit.common import NetworkFormatError


def _layer_with_values(inputs, outputs, seed=0):
    layer = AffineTransform(inputs, outputs)
    rng = np.random.default_rng(seed)
    layer.biases = rng.integers(-1000, 1000, size=outputs).astype(np.int32)
    layer.weights = rng.integers(
        -128, 128, size=(outputs, layer.padded_input_dimensions)
    ).astype(np.int8)
    return layer


def test_padded_dimensions():
    layer = AffineTransform(30, 16)
    assert layer.padded_input_dimensions == 32
    assert layer.padded_output_dimensions == 32
    assert layer.weights.shape == (16, 32)


def test_invalid_dimensions():
    with pytest.raises(ValueError):
        AffineTransform(0, 4)
    with pytest.raises(ValueError):
        AffineTransform(4, -1)


def test_hash_value_from_zero():
    assert AffineTransform(8, 1).hash_value(0) == 0xCC03DAE5


def test_hash_value_stays_32_bit():
    value = AffineTransform(1024, 16).hash_value(0xFFFFFFFF)
    assert 0 <= value < 2**32
    assert value == AffineTransform(1024, 16).hash_value(0x1FFFFFFFF)


def test_weight_index_layout():
    layer = AffineTransform(30, 2)
    assert layer.weight_index(0) == (0, 0)
    assert layer.weight_index(layer.padded_input_dimensions) == (1, 0)
    assert layer.weight_index(2 * layer.padded_input_dimensions - 1) == (
        1,
        layer.padded_input_dimensions - 1,
    )


def test_weight_index_out_of_range():
    layer = AffineTransform(30, 2)
    with pytest.raises(IndexError):
        layer.weight_index(2 * layer.padded_input_dimensions)
    with pytest.raises(IndexError):
        layer.weight_index(-1)


def test_serialized_size():
    layer = _layer_with_values(30, 2)
    buffer = io.BytesIO()
    layer.write_parameters(buffer)
    assert len(buffer.getvalue()) == 4 * 2 + 2 * layer.padded_input_dimensions


def test_round_trip():
    layer = _layer_with_values(30, 4, seed=3)
    buffer = io.BytesIO()
    layer.write_parameters(buffer)
    buffer.seek(0)
    other = AffineTransform(30, 4)
    other.read_parameters(buffer)
    assert np.array_equal(other.biases, layer.biases)
    assert np.array_equal(other.weights, layer.weights)
    assert buffer.read() == b""


def test_bias_bytes_little_endian():
    layer = AffineTransform(1, 1)
    layer.biases = np.array([1], dtype=np.int32)
    buffer = io.BytesIO()
    layer.write_parameters(buffer)
    assert buffer.getvalue()[:4] == b"\x01\x00\x00\x00"


def test_truncated_stream_raises():
    layer = _layer_with_values(30, 2)
    buffer = io.BytesIO()
    layer.write_parameters(buffer)
    truncated = io.BytesIO(buffer.getvalue()[:-1])
    with pytest.raises(NetworkFormatError):
        AffineTransform(30, 2).read_parameters(truncated)


def test_zero_weights_give_biases():
    layer = AffineTransform(8, 3)
    layer.biases = np.array([5, -7, 11], dtype=np.int32)
    out = layer.propagate([200] * 8)
    assert out.tolist() == [5, -7, 11]


def test_single_weight_contributes_product():
    layer = AffineTransform(4, 1)
    layer.weights[0, 2] = 3
    out = layer.propagate([0, 0, 5, 0])
    assert out.tolist() == [15]


def test_negative_weight():
    layer = AffineTransform(4, 1)
    layer.weights[0, 1] = -128
    out = layer.propagate([0, 1, 0, 0])
    assert out.tolist() == [-128]


def test_padding_inputs_are_ignored():
    layer = _layer_with_values(30, 2, seed=5)
    base = list(range(30))
    padded = base + [255, 255]
    assert np.array_equal(layer.propagate(base), layer.propagate(padded))


def test_output_wraps_to_int32():
    layer = AffineTransform(1, 1)
    layer.biases = np.array([2**31 - 1], dtype=np.int32)
    layer.weights[0, 0] = 1
    out = layer.propagate([1])
    assert out.dtype == np.int32
    assert out.tolist() == [-(2**31)]


def test_linearity_in_bias():
    layer = _layer_with_values(16, 4, seed=9)
    inputs = list(range(16))
    before = layer.propagate(inputs).astype(np.int64)
    layer.biases = layer.biases + np.int32(10)
    after = layer.propagate(inputs).astype(np.int64)
    assert np.array_equal(after - before, np.full(4, 10))


def test_wrong_input_length():
    layer = AffineTransform(30, 2)
    with pytest.raises(ValueError):
        layer.propagate([0] * 29)
    with pytest.raises(ValueError):
        layer.propagate([0] * 33)


def test_input_out_of_byte_range():
    layer = AffineTransform(4, 1)
    with pytest.raises(ValueError):
        layer.propagate([0, 256, 0, 0])
    with pytest.raises(ValueError):
        layer.propagate([0, -1, 0, 0])