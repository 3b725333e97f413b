import numpy as np
import pytest

from nnuekit.accumulator import Accumulator, refresh_accumulator, update_accumulator


@pytest.fixture
def params():
    rng = np.random.default_rng(7)
    biases = rng.integers(-100, 100, size=8, dtype=np.int16)
    weights = rng.integers(-50, 50, size=(20, 8), dtype=np.int16)
    psqt = rng.integers(-1000, 1000, size=(20, 4), dtype=np.int32)
    return biases, weights, psqt


def test_refresh_without_features_is_biases(params):
    biases, weights, psqt = params
    acc = refresh_accumulator(biases, weights, psqt, [])
    assert np.array_equal(acc.accumulation, biases)
    assert np.array_equal(acc.psqt_accumulation, np.zeros(4, dtype=np.int32))


def test_refresh_sums_columns(params):
    biases, weights, psqt = params
    acc = refresh_accumulator(biases, weights, psqt, [3, 5])
    expected = biases.astype(np.int64) + weights[3] + weights[5]
    assert np.array_equal(acc.accumulation, expected)
    assert np.array_equal(acc.psqt_accumulation, psqt[3].astype(np.int64) + psqt[5])


def test_refresh_order_independent(params):
    biases, weights, psqt = params
    a = refresh_accumulator(biases, weights, psqt, [1, 7, 12])
    b = refresh_accumulator(biases, weights, psqt, [12, 1, 7])
    assert a == b


def test_update_matches_refresh(params):
    biases, weights, psqt = params
    before = refresh_accumulator(biases, weights, psqt, [1, 2, 3])
    after = update_accumulator(before, weights, psqt, removed=[2], added=[9, 10])
    assert after == refresh_accumulator(biases, weights, psqt, [1, 3, 9, 10])


def test_update_round_trip(params):
    biases, weights, psqt = params
    start = refresh_accumulator(biases, weights, psqt, [4, 6])
    moved = update_accumulator(start, weights, psqt, [4], [11])
    back = update_accumulator(moved, weights, psqt, [11], [4])
    assert back == start
    assert moved != start


def test_update_does_not_modify_input(params):
    biases, weights, psqt = params
    start = refresh_accumulator(biases, weights, psqt, [0])
    snapshot = start.copy()
    update_accumulator(start, weights, psqt, [0], [1])
    assert start == snapshot


def test_int16_wraps():
    weights = np.ones((1, 1), dtype=np.int16)
    psqt = np.zeros((1, 1), dtype=np.int32)
    acc = refresh_accumulator([32767], weights, psqt, [0])
    assert int(acc.accumulation[0]) == -32768


def test_index_out_of_range(params):
    biases, weights, psqt = params
    with pytest.raises(IndexError):
        refresh_accumulator(biases, weights, psqt, [20])
    acc = refresh_accumulator(biases, weights, psqt, [])
    with pytest.raises(IndexError):
        update_accumulator(acc, weights, psqt, [-1], [])


def test_shape_mismatches(params):
    biases, weights, psqt = params
    with pytest.raises(ValueError):
        refresh_accumulator(biases[:5], weights, psqt, [])
    with pytest.raises(ValueError):
        refresh_accumulator(biases, weights, psqt[:10], [])
    wrong = Accumulator(np.zeros(3, dtype=np.int16), np.zeros(4, dtype=np.int32))
    with pytest.raises(ValueError):
        update_accumulator(wrong, weights, psqt, [], [])