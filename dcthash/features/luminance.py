import numpy as np
from PIL import Image
from sklearn.base import BaseEstimator, TransformerMixin

from dcthash.config import RESAMPLE
from dcthash.data.loader import open_image
from dcthash.errors import ImageInputError


def luminance_grid(img, width: int, height: int, resample=RESAMPLE) -> np.ndarray:
    """Resize -> luma (0..255) -> [0, 1]. Returned grid is indexed [x, y].

    Luma is taken from the resized image, so interpolation runs on the source
    colors rather than on already rounded 8-bit luma.
    """
    img = open_image(img)
    if img.width == 0 or img.height == 0:
        raise ImageInputError(f"Cannot hash an image of size {img.width}x{img.height}.")
    try:
        # Pillow resizes palette and bilevel images with NEAREST only
        if img.mode in ("1", "P", "PA"):
            img = img.convert("RGBA" if img.mode == "PA" or "transparency" in img.info else "RGB")
        g = img.resize((width, height), resample=resample).convert("L")
    except Exception as exc:
        raise ImageInputError(f"Cannot resize image to {width}x{height}: {exc}") from exc
    # PIL arrays are row major ([y, x])
    return np.asarray(g, dtype=np.float64).T / 255.0


class LuminanceFeatures(BaseEstimator, TransformerMixin):
    """Resize -> luma -> flatten (0..1), one row per image."""
    def __init__(self, width: int = 32, height: int = 32):
        self.width, self.height = width, height

    def fit(self, X, y=None):
        return self

    def transform(self, X):
        return np.vstack([luminance_grid(img, self.width, self.height).ravel() for img in X])
