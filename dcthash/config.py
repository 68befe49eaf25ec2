from dataclasses import dataclass
from typing import Tuple

from PIL import Image

DEFAULT_BIT_RESOLUTION = 64
MIN_BIT_RESOLUTION = 1

# Grid cell count (width * height) from which the DCT runs on a worker pool.
PARALLEL_THRESHOLD = 65536

RESAMPLE = Image.BILINEAR


@dataclass(frozen=True)
class HashAlgorithmConfig:
    """Requested bit resolution and the resize grid derived from it."""
    bit_resolution: int
    width: int
    height: int

    @classmethod
    def from_bit_resolution(cls, bit_resolution: int) -> "HashAlgorithmConfig":
        from dcthash.hashing.planner import compute_dimensions
        width, height = compute_dimensions(bit_resolution)
        return cls(bit_resolution, width, height)

    @property
    def sub_width(self) -> int:
        return self.width // 4

    @property
    def sub_height(self) -> int:
        return self.height // 4

    @property
    def hash_length(self) -> int:
        return self.sub_width * self.sub_height

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height
