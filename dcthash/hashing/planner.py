"""Resize grid selection for a requested hash length."""
import math
from typing import Tuple

from dcthash.config import MIN_BIT_RESOLUTION
from dcthash.errors import ConfigurationError


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def compute_dimensions(bit_resolution: int) -> Tuple[int, int]:
    """
    Pick the (width, height) an image is scaled to before the DCT.

    The hash uses a (width/4) x (height/4) block of coefficients, so the grid is
    kept as close to square as possible: either side x side (side**2 bits) or
    side x (side+4) (side/4 * (side/4 + 1) bits). The resulting length is an
    approximation of `bit_resolution`, not an exact match.
    """
    if isinstance(bit_resolution, bool) or not isinstance(bit_resolution, int):
        raise ConfigurationError(f"bit resolution must be an integer, got {bit_resolution!r}")
    if bit_resolution < MIN_BIT_RESOLUTION:
        raise ConfigurationError(
            f"bit resolution must be >= {MIN_BIT_RESOLUTION}, got {bit_resolution}")

    # bits ~ (dimension/4)^2
    dimension = _round_half_up(math.sqrt(bit_resolution)) * 4
    normal_bound = (dimension // 4) * (dimension // 4)
    higher_bound = (dimension // 4) * (dimension // 4 + 1)

    width = height = dimension
    if higher_bound < bit_resolution:
        width += 1
        height += 1
    elif normal_bound < bit_resolution or (normal_bound - bit_resolution) > (higher_bound - bit_resolution):
        height += 4
    return width, height
