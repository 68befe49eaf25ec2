import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
from scipy.fftpack import dct
from sklearn.base import BaseEstimator, TransformerMixin

from dcthash.config import DEFAULT_BIT_RESOLUTION, PARALLEL_THRESHOLD
from dcthash.logging import get_logger

LOGGER = get_logger("features.dct")


def _dct_axis(block: np.ndarray, axis: int) -> np.ndarray:
    # unnormalized DCT-II, one independent 1D transform per line
    return dct(block, type=2, axis=axis)


class DctEngine:
    """
    Separable forward 2D DCT-II (no scaling).

    Large grids are split into row and column chunks that run on a thread pool
    owned by the engine. Every line is transformed by the same call on both
    paths, so the pool never changes the result. The pool outlives the
    transform that created it until `close()` is called. `close()` waits for
    running transforms and is final: later `forward()` calls raise
    RuntimeError.
    """

    def __init__(self, workers: Optional[int] = None, parallel_threshold: int = PARALLEL_THRESHOLD):
        self.workers = workers if workers is not None else (os.cpu_count() or 1)
        self.parallel_threshold = parallel_threshold
        self._pool: Optional[ThreadPoolExecutor] = None
        self._cond = threading.Condition()
        self._active = 0
        self._closed = False

    def uses_pool(self, width: int, height: int) -> bool:
        return self.workers > 1 and width * height >= self.parallel_threshold

    def _acquire(self, with_pool: bool) -> Optional[ThreadPoolExecutor]:
        with self._cond:
            if self._closed:
                raise RuntimeError("DctEngine is closed.")
            if with_pool and self._pool is None:
                LOGGER.debug("Starting DCT worker pool (%d threads)", self.workers)
                self._pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="dcthash-dct")
            self._active += 1
            return self._pool

    def _release(self):
        with self._cond:
            self._active -= 1
            self._cond.notify_all()

    def _chunked(self, pool: ThreadPoolExecutor, grid: np.ndarray, axis: int) -> np.ndarray:
        # chunks are cut across the transform axis, never along it
        split_axis = 1 - axis
        parts = np.array_split(grid, min(self.workers, grid.shape[split_axis]), axis=split_axis)
        done = list(pool.map(lambda p: _dct_axis(p, axis), parts))
        return np.concatenate(done, axis=split_axis)

    def forward(self, grid: np.ndarray) -> np.ndarray:
        """Rows then columns; returns a new grid of the same shape."""
        grid = np.asarray(grid, dtype=np.float64)
        if grid.ndim != 2:
            raise ValueError(f"Expected a 2D grid, got shape {grid.shape}.")
        with_pool = self.uses_pool(*grid.shape)
        pool = self._acquire(with_pool)
        try:
            if with_pool:
                return self._chunked(pool, self._chunked(pool, grid, axis=1), axis=0)
            return _dct_axis(_dct_axis(grid, axis=1), axis=0)
        finally:
            self._release()

    @property
    def pool_running(self) -> bool:
        return self._pool is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        with self._cond:
            self._closed = True
            self._cond.wait_for(lambda: self._active == 0)
            pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=True)
            LOGGER.debug("DCT worker pool shut down")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class PerceptiveHashFeatures(BaseEstimator, TransformerMixin):
    """Resize -> luma -> 2D DCT -> mean-threshold low-freq sub-band -> 0/1 row per image."""
    def __init__(self, bit_resolution: int = DEFAULT_BIT_RESOLUTION):
        self.bit_resolution = bit_resolution

    def fit(self, X, y=None):
        return self

    def transform(self, X):
        from dcthash.hashing.perceptive import PerceptiveHash
        with PerceptiveHash(self.bit_resolution) as hasher:
            out = [hasher.hash_bits(img).astype(np.uint8) for img in X]
        if not out:
            return np.zeros((0, hasher.config.hash_length), dtype=np.uint8)
        return np.vstack(out)
