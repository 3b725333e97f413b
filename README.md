# nnuekit

Integer building blocks for an efficiently updatable neural network (NNUE)
chess evaluator, written with numpy. All arithmetic is done on fixed-width
integers, with the same wrapping and saturation as the quantized values they
model.

## Modules

- `nnuekit.common`: constants of the network file format (`VERSION`,
  `OUTPUT_SCALE`, `WEIGHT_SCALE_BITS`, `CACHE_LINE_SIZE`, `MAX_SIMD_WIDTH`),
  `ceil_to_multiple`, and little-endian I/O: `read_int` / `write_int` for a
  single integer given as a struct code such as `"I"`, `read_array` /
  `write_array` for numpy integer arrays. A truncated stream raises
  `NetworkFormatError`, a subclass of `ValueError`.
- `nnuekit.simd`: the saturating byte multiply-add steps of the quantized
  layers: `maddubs`, `add_dpbusd`, `add_dpbusd_x2`, and the horizontal sums
  `hadd` and `haddx4`.
- `nnuekit.affine`: `AffineTransform`, a fully connected layer with int8
  weights, int32 biases and uint8 inputs. It computes its file hash with
  `hash_value`, reads and writes its parameters, and applies itself with
  `propagate`.
- `nnuekit.accumulator`: `Accumulator` (int16 positional and int32 PSQT
  sums for one perspective), `refresh_accumulator` to build one from a set of
  active feature indices, and `update_accumulator` to apply removed and added
  features incrementally.
- `nnuekit.stats`: `StatsTable`, an int16 history table whose `update`
  moves an entry towards a bonus bounded by the table's `bound`, with the
  factories `butterfly_history`, `capture_history` and `piece_to_history`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Reading and writing little-endian data:

```python
import io
import numpy as np
from nnuekit.common import read_array, read_int, write_array, write_int

buffer = io.BytesIO()
write_int(buffer, 0x7AF32F20, "I")
write_array(buffer, [1, -2, 3], np.int16)
buffer.seek(0)
assert read_int(buffer, "I") == 0x7AF32F20
assert list(read_array(buffer, np.int16, 3)) == [1, -2, 3]
```

A small affine layer:

```python
import numpy as np
from nnuekit.affine import AffineTransform

layer = AffineTransform(4, 2)
layer.biases = np.array([10, -5], dtype=np.int32)
layer.weights[0, :4] = [1, 1, 1, 1]
print(layer.propagate([1, 2, 3, 4]))   # [20 -5]
```

Keeping an accumulator current:

```python
import numpy as np
from nnuekit.accumulator import refresh_accumulator, update_accumulator

weights = np.arange(12, dtype=np.int16).reshape(4, 3)      # 4 features, width 3
psqt_weights = np.ones((4, 2), dtype=np.int32)             # 2 PSQT buckets
acc = refresh_accumulator([0, 0, 0], weights, psqt_weights, [0, 2])
acc = update_accumulator(acc, weights, psqt_weights, removed=[2], added=[3])
assert acc == refresh_accumulator([0, 0, 0], weights, psqt_weights, [0, 3])
```

History tables:

```python
from nnuekit.stats import butterfly_history

history = butterfly_history()
history.update((0, 12 * 64 + 28), 500)   # returns 500 from an empty entry
```

## What it does not do

The package provides layers, accumulators and file helpers, not a complete
evaluator. It has no activation layers, no board-to-feature encoding, no
feature transformer or layer stack that assembles these parts, and nothing
that loads or saves a whole network file or evaluates a chess position. It
has no command-line program.