import io, os, zipfile
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union
import numpy as np
from PIL import Image

from dcthash.errors import ImageInputError
from dcthash.logging import get_logger

LOGGER = get_logger("data.loader")

IMG_EXT = {".png",".jpg",".jpeg",".bmp",".gif",".webp",".tif",".tiff",".dcm",".dicom"}

try:
    import pydicom
    HAVE_PYDICOM = True
except ImportError:
    HAVE_PYDICOM = False

ImageSource = Union[Image.Image, np.ndarray, str, Path, bytes, BinaryIO]


def _is_img(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in IMG_EXT

def _clean_parts(parts: List[str]) -> List[str]:
    return [p for p in parts if p and not p.startswith("__MACOSX") and p != ".DS_Store"]

def _decode_dicom(raw: bytes) -> Image.Image:
    if not HAVE_PYDICOM:
        raise ImageInputError("pydicom is not installed; cannot decode DICOM input.")
    ds = pydicom.dcmread(io.BytesIO(raw))
    arr = ds.pixel_array.astype(np.float32)
    if arr.ndim == 3:
        arr = arr[arr.shape[0] // 2]
    slope = float(getattr(ds, "RescaleSlope", 1.0))
    intercept = float(getattr(ds, "RescaleIntercept", 0.0))
    arr = (arr * slope + intercept)
    arr = arr - np.min(arr)
    if arr.max() > 0: arr = arr / arr.max()
    return Image.fromarray((arr * 255).astype(np.uint8)).convert("RGB")

def decode_image(name: str, raw: bytes) -> Image.Image:
    """Decode raw file bytes; the extension of `name` selects the DICOM path."""
    ext = os.path.splitext(name)[1].lower()
    try:
        if ext in (".dcm",".dicom"):
            return _decode_dicom(raw)
        img = Image.open(io.BytesIO(raw))
        img.load()
        return img
    except ImageInputError:
        raise
    except Exception as exc:
        raise ImageInputError(f"Cannot decode image {name!r}: {exc}") from exc

def _array_to_uint8(arr: np.ndarray) -> np.ndarray:
    """
    Integer arrays must hold 0..255; float arrays are read as normalized
    0..1 intensities and scaled to 0..255. Anything else is rejected.
    """
    if arr.dtype == np.uint8:
        return arr
    if arr.size == 0:
        return arr.astype(np.uint8)
    if arr.dtype == np.bool_:
        return arr.astype(np.uint8) * 255
    if np.issubdtype(arr.dtype, np.integer):
        lo, hi = arr.min(), arr.max()
        if lo < 0 or hi > 255:
            raise ImageInputError(f"Integer pixel values must be within 0..255, got {lo}..{hi}.")
        return arr.astype(np.uint8)
    if np.issubdtype(arr.dtype, np.floating):
        if not np.all(np.isfinite(arr)):
            raise ImageInputError("Float pixel values must be finite.")
        lo, hi = float(arr.min()), float(arr.max())
        if lo < 0.0 or hi > 1.0:
            raise ImageInputError(f"Float pixel values must be within 0..1, got {lo}..{hi}.")
        return np.rint(arr * 255.0).astype(np.uint8)
    raise ImageInputError(f"Unsupported pixel dtype: {arr.dtype}")

def open_image(source: ImageSource) -> Image.Image:
    """Coerce any supported image source into a loaded PIL image."""
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, np.ndarray):
        arr = _array_to_uint8(source)
        try:
            return Image.fromarray(arr)
        except Exception as exc:
            raise ImageInputError(f"Cannot build image from array of shape {source.shape}: {exc}") from exc
    if isinstance(source, (bytes, bytearray)):
        return decode_image("<bytes>", bytes(source))
    if isinstance(source, (str, Path)):
        p = Path(source)
        try:
            raw = p.read_bytes()
        except OSError as exc:
            raise ImageInputError(f"Cannot read image file {p}: {exc}") from exc
        return decode_image(p.name, raw)
    if hasattr(source, "read"):
        return decode_image(getattr(source, "name", "<stream>"), source.read())
    raise ImageInputError(f"Unsupported image source type: {type(source).__name__}")

def _new_report() -> Dict:
    return {"read_ok":0, "skipped":0, "skipped_names":[]}

def _skip(report: Dict, name: str, exc: Exception):
    LOGGER.debug("Skipping %s: %s", name, exc)
    report["skipped"] += 1
    report["skipped_names"].append(name)

def load_from_zip(zip_bytes: bytes, limit: Optional[int]=None
                 ) -> Tuple[List[Image.Image], List[str], Dict]:
    """Decode every image in a ZIP archive; unreadable members are counted, not raised."""
    images, names = [], []
    report = _new_report()
    with zipfile.ZipFile(io.BytesIO(zip_bytes)) as z:
        members = [n for n in z.namelist()
                   if not n.endswith("/") and _is_img(n) and len(_clean_parts(n.split("/"))) == len(n.split("/"))]
        if not members:
            raise ImageInputError("No image files found in ZIP.")
        for n in sorted(members):
            if limit and len(images) >= limit:
                break
            with z.open(n) as f:
                raw = f.read()
            try:
                img = decode_image(n, raw)
            except ImageInputError as exc:
                _skip(report, n, exc)
                continue
            images.append(img); names.append(n)
            report["read_ok"] += 1
    LOGGER.info("Loaded %d images from ZIP (%d skipped)", report["read_ok"], report["skipped"])
    return images, names, report

def load_from_dir(path: Union[str, Path], limit: Optional[int]=None
                 ) -> Tuple[List[Image.Image], List[str], Dict]:
    """Recursive directory variant of `load_from_zip`; names are relative posix paths."""
    root = Path(path)
    if not root.is_dir():
        raise ImageInputError(f"Not a directory: {root}")
    images, names = [], []
    report = _new_report()
    for p in sorted(root.rglob("*")):
        if not p.is_file() or not _is_img(p.name):
            continue
        if limit and len(images) >= limit:
            break
        rel = p.relative_to(root).as_posix()
        try:
            img = decode_image(p.name, p.read_bytes())
        except (ImageInputError, OSError) as exc:
            _skip(report, rel, exc)
            continue
        images.append(img); names.append(rel)
        report["read_ok"] += 1
    if not images and not report["skipped"]:
        raise ImageInputError(f"No image files found in {root}.")
    LOGGER.info("Loaded %d images from %s (%d skipped)", report["read_ok"], root, report["skipped"])
    return images, names, report
