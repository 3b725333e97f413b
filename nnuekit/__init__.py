"""Integer NNUE building blocks: file I/O, vector primitives, affine layers, accumulators and history tables."""

__version__ = "0.1.0"
__all__ = ["accumulator", "affine", "common", "simd", "stats"]