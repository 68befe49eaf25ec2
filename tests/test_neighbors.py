"""Tests for the scikit-learn hash features and near-duplicate search."""
import numpy as np
import pytest

from dcthash.features.dct import PerceptiveHashFeatures
from dcthash.hashing.perceptive import PerceptiveHash
from dcthash.models.neighbors import DuplicateIndex, cluster_duplicates, make_pipeline


class TestPerceptiveHashFeatures:

    def test_rows_match_hashes(self, scene, other_scene):
        X = PerceptiveHashFeatures(bit_resolution=64).fit_transform([scene, other_scene])
        assert X.shape == (2, 64)
        assert X.dtype == np.uint8
        hasher = PerceptiveHash(64)
        assert X[0].tolist() == hasher.hash(scene).to_bits()
        assert X[1].tolist() == hasher.hash(other_scene).to_bits()

    def test_empty_batch(self):
        assert PerceptiveHashFeatures(bit_resolution=72).transform([]).shape == (0, 72)

    def test_pipeline(self, scene):
        assert make_pipeline(100).fit_transform([scene]).shape == (1, 100)


class TestDuplicateIndex:

    def test_query_finds_blurred_copy(self, scene, other_scene, blurred_scene):
        index = DuplicateIndex(64).fit([scene, other_scene], names=["scene", "other"])
        hits = index.query(blurred_scene, max_distance=0.15)
        assert hits[0][0] == 0
        assert index.names[hits[0][0]] == "scene"
        assert all(i != 1 for i, _ in hits)

    def test_nearest_exact(self, scene, other_scene):
        index = DuplicateIndex(64).fit([scene, other_scene])
        assert index.nearest(other_scene, k=1) == [(1, 0.0)]
        assert len(index.nearest(scene, k=5)) == 2

    def test_query_before_fit(self, scene):
        with pytest.raises(RuntimeError):
            DuplicateIndex(64).query(scene, 0.1)

    def test_fit_validation(self, scene):
        with pytest.raises(ValueError):
            DuplicateIndex(64).fit([])
        with pytest.raises(ValueError):
            DuplicateIndex(64).fit([scene], names=["a", "b"])


class TestClusterDuplicates:

    def test_groups_near_copies(self, scene, blurred_scene, other_scene, recompressed_scene):
        hasher = PerceptiveHash(64)
        hashes = [hasher.hash(i) for i in (scene, other_scene, blurred_scene, recompressed_scene)]
        assert cluster_duplicates(hashes, 0.15) == [[0, 2, 3]]

    def test_no_singletons(self, scene, other_scene):
        hasher = PerceptiveHash(64)
        assert cluster_duplicates([hasher.hash(scene), hasher.hash(other_scene)], 0.05) == []
