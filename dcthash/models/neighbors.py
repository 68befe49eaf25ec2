from typing import List, Optional, Sequence, Tuple
import numpy as np
from sklearn.neighbors import NearestNeighbors
from sklearn.pipeline import Pipeline

from dcthash.config import DEFAULT_BIT_RESOLUTION
from dcthash.features.dct import PerceptiveHashFeatures
from dcthash.hashing.base import Hash
from dcthash.logging import get_logger

LOGGER = get_logger("models.neighbors")


def make_pipeline(bit_resolution: int = DEFAULT_BIT_RESOLUTION):
    return Pipeline([("feat", PerceptiveHashFeatures(bit_resolution=bit_resolution))])


class DuplicateIndex:
    """
    Near-duplicate lookup over perceptual hash bits.

    Distances are normalized Hamming distances (fraction of differing bits).
    """
    def __init__(self, bit_resolution: int = DEFAULT_BIT_RESOLUTION):
        self.bit_resolution = bit_resolution
        self.pipeline = make_pipeline(bit_resolution)
        self._nn: Optional[NearestNeighbors] = None
        self.names: List[str] = []

    def fit(self, images, names: Optional[Sequence[str]] = None):
        images = list(images)
        if not images:
            raise ValueError("Cannot build an index from zero images.")
        bits = self.pipeline.fit_transform(images)
        self.names = list(names) if names is not None else [str(i) for i in range(len(images))]
        if len(self.names) != len(images):
            raise ValueError("names and images must have the same length.")
        self._nn = NearestNeighbors(metric="hamming", algorithm="brute").fit(bits)
        LOGGER.info("Indexed %d images (%d bits each)", len(images), bits.shape[1])
        return self

    def _bits(self, image) -> np.ndarray:
        if self._nn is None:
            raise RuntimeError("Index is empty; call fit() first.")
        return self.pipeline.transform([image])

    def query(self, image, max_distance: float) -> List[Tuple[int, float]]:
        """All indexed images within `max_distance`, closest first, as (index, distance)."""
        bits = self._bits(image)
        dist, idx = self._nn.radius_neighbors(bits, radius=max_distance)
        dist, idx = dist[0], idx[0]
        order = np.argsort(dist, kind="stable")
        return [(int(idx[i]), float(dist[i])) for i in order]

    def nearest(self, image, k: int = 1) -> List[Tuple[int, float]]:
        bits = self._bits(image)
        dist, idx = self._nn.kneighbors(bits, n_neighbors=min(k, len(self.names)))
        return [(int(i), float(d)) for i, d in zip(idx[0], dist[0])]


def cluster_duplicates(hashes: Sequence[Hash], max_distance: float) -> List[List[int]]:
    """Greedy grouping: each unvisited hash collects every later hash within `max_distance`."""
    visited = [False] * len(hashes)
    clusters = []
    for i, hi in enumerate(hashes):
        if visited[i]: continue
        group = [i]; visited[i] = True
        for j in range(i + 1, len(hashes)):
            if visited[j]: continue
            if hi.normalized_hamming_distance(hashes[j]) <= max_distance:
                group.append(j); visited[j] = True
        if len(group) > 1: clusters.append(group)
    return clusters
