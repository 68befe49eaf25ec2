"""
Frequency based image hash (DCT-II).

The image is scaled to a near square grid, transformed into the frequency
domain and the lowest frequencies (a quarter of each axis, skipping the first
row and column) are compared to their mean. Bits are far from 50% likely to be
set, so normalized Hamming distances between unrelated images rarely get close
to 1.
"""
from threading import Lock
from typing import Callable, Optional, Tuple

import numpy as np

from dcthash.config import HashAlgorithmConfig
from dcthash.errors import ConfigurationError
from dcthash.features.dct import DctEngine
from dcthash.features.luminance import luminance_grid
from dcthash.hashing.base import Hash
from dcthash.logging import get_logger

LOGGER = get_logger("hashing.perceptive")

_WARN_LOCK = Lock()
_POOL_WARNING_LOGGED = False

POOL_WARNING = (
    "Hashing a {width}x{height} grid runs the DCT on a background thread pool that stays "
    "alive after the hash is computed. Call close() on the PerceptiveHash (or its DctEngine) "
    "once you are done hashing to release it.")


def _log_once(message: str):
    global _POOL_WARNING_LOGGED
    with _WARN_LOCK:
        if _POOL_WARNING_LOGGED:
            return
        _POOL_WARNING_LOGGED = True
    LOGGER.warning(message)


def _java_string_hash(s: str) -> int:
    h = 0
    for ch in s:
        h = (31 * h + ord(ch)) & 0xFFFFFFFF
    return h


def _to_int32(v: int) -> int:
    v &= 0xFFFFFFFF
    return v - (1 << 32) if v & 0x80000000 else v


def algorithm_identity(class_name: str, height: int, width: int) -> int:
    """Order sensitive 32-bit hash of (class name, height, width)."""
    result = 1
    for part in (_java_string_hash(class_name), height, width):
        result = (31 * result + part) & 0xFFFFFFFF
    return _to_int32(result * 31 + 1)


def binarize(grid: np.ndarray, sub_width: int, sub_height: int) -> Tuple[int, np.ndarray]:
    """
    Threshold the low frequency block grid[1:sub_width+1, 1:sub_height+1] at its mean.

    Coefficients are visited x-major (x outer, y inner); the first visited
    coefficient becomes the most significant bit. Returns (value, bits).
    """
    count = sub_width * sub_height
    if count <= 0:
        raise ConfigurationError(f"Empty sub-band ({sub_width}x{sub_height}).")
    block = grid[1:sub_width + 1, 1:sub_height + 1]
    if block.shape != (sub_width, sub_height):
        raise ConfigurationError(
            f"Grid of shape {grid.shape} is too small for a {sub_width}x{sub_height} sub-band.")

    # running sum of coefficient / count in traversal order; numpy's pairwise
    # sum can land one ulp away and flip coefficients that tie with the mean
    avg = 0.0
    for v in block.ravel().tolist():
        avg += v / count
    bits = (block >= avg).ravel()

    value = 0
    for b in bits:
        value = (value << 1) | int(b)
    return value, bits


class PerceptiveHash:
    """
    DCT based perceptual hash.

    bit_resolution: approximate hash length. Higher values track finer detail
        at the cost of computation time; the exact length is
        `config.hash_length`.
    engine: DCT engine to use. When omitted the instance creates and owns one.
    on_diagnostic: receives non-fatal diagnostic messages. Without it they are
        logged once per process.
    """

    def __init__(self, bit_resolution: int, engine: Optional[DctEngine] = None,
                 on_diagnostic: Optional[Callable[[str], None]] = None):
        self.config = HashAlgorithmConfig.from_bit_resolution(bit_resolution)
        self._owns_engine = engine is None
        self.engine = engine if engine is not None else DctEngine()
        self._algorithm_id: Optional[int] = None

        width, height = self.config.size
        if self.engine.uses_pool(width, height):
            message = POOL_WARNING.format(width=width, height=height)
            if on_diagnostic is not None:
                on_diagnostic(message)
            else:
                _log_once(message)

        LOGGER.debug("PerceptiveHash: %d bits requested -> %dx%d grid, %d bits",
                     bit_resolution, width, height, self.config.hash_length)

    @property
    def bit_resolution(self) -> int:
        return self.config.hash_length

    def frequency_grid(self, image) -> np.ndarray:
        """Frequency domain grid of the scaled luminance, indexed [x, y]."""
        lum = luminance_grid(image, self.config.width, self.config.height)
        return self.engine.forward(lum)

    def hash_bits(self, image) -> np.ndarray:
        _, bits = binarize(self.frequency_grid(image), self.config.sub_width, self.config.sub_height)
        return bits

    def hash(self, image) -> Hash:
        value, _ = binarize(self.frequency_grid(image), self.config.sub_width, self.config.sub_height)
        return Hash(value, self.config.hash_length, self.algorithm_id())

    def algorithm_id(self) -> int:
        if self._algorithm_id is None:
            cls = type(self)
            self._algorithm_id = algorithm_identity(
                f"{cls.__module__}.{cls.__qualname__}", self.config.height, self.config.width)
        return self._algorithm_id

    def close(self):
        """Release the DCT worker pool if this instance created the engine."""
        if self._owns_engine:
            self.engine.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self):
        return (f"PerceptiveHash(bit_resolution={self.config.bit_resolution}, "
                f"width={self.config.width}, height={self.config.height})")
