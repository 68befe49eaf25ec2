import io
import os

os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pytest
from PIL import Image, ImageFilter


def smooth_field(seed: int, side: int = 256) -> Image.Image:
    """Low frequency random texture: a small noise grid upsampled bicubically."""
    rng = np.random.RandomState(seed)
    channels = [
        Image.fromarray((rng.rand(12, 12) * 255).astype(np.uint8)).resize((side, side), Image.BICUBIC)
        for _ in range(3)
    ]
    return Image.merge("RGB", channels)


def png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def scene() -> Image.Image:
    return smooth_field(seed=7)


@pytest.fixture()
def other_scene() -> Image.Image:
    return smooth_field(seed=1234)


@pytest.fixture()
def blurred_scene(scene) -> Image.Image:
    return scene.filter(ImageFilter.GaussianBlur(radius=1))


@pytest.fixture()
def recompressed_scene(scene) -> Image.Image:
    buf = io.BytesIO()
    scene.save(buf, format="JPEG", quality=70)
    buf.seek(0)
    return Image.open(buf).convert("RGB")


@pytest.fixture()
def solid_gray() -> Image.Image:
    return Image.new("RGB", (64, 64), (128, 128, 128))


@pytest.fixture()
def scene_png(scene) -> bytes:
    return png_bytes(scene)


@pytest.fixture()
def odd_scene() -> Image.Image:
    """RGB image whose size is not a multiple of any hash grid."""
    return smooth_field(seed=3, side=97)
