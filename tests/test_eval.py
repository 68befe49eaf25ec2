"""Tests for distance evaluation and plotting."""
import numpy as np
import pytest
from matplotlib.figure import Figure

from dcthash.hashing.base import Hash
from dcthash.utils.eval import evaluate_threshold, pairwise_distances
from dcthash.utils.plotting import plot_distance_histogram


def test_pairwise_distances():
    hashes = [Hash(0b0000, 4, 1), Hash(0b0011, 4, 1), Hash(0b1111, 4, 1)]
    d = pairwise_distances(hashes)
    assert d.shape == (3, 3)
    np.testing.assert_array_equal(d, d.T)
    assert np.all(np.diag(d) == 0)
    assert d[0, 1] == 0.5
    assert d[0, 2] == 1.0


def test_evaluate_threshold():
    result = evaluate_threshold([0.05, 0.1, 0.4, 0.5], [1, 1, 0, 1], threshold=0.2)
    assert result["precision"] == 1.0
    assert result["recall"] == pytest.approx(2 / 3)
    assert result["accuracy"] == 0.75
    np.testing.assert_array_equal(result["confusion_matrix"], [[1, 0], [1, 2]])


def test_evaluate_threshold_nothing_predicted():
    result = evaluate_threshold([0.5, 0.6], [1, 0], threshold=0.1)
    assert result["precision"] == 0.0
    assert result["recall"] == 0.0


@pytest.mark.parametrize("labels, threshold", [(None, None), ([1, 0, 1], 0.2)])
def test_plot_distance_histogram(labels, threshold):
    import matplotlib.pyplot as plt
    fig = plot_distance_histogram([0.1, 0.5, 0.15], labels, threshold)
    assert isinstance(fig, Figure)
    assert len(fig.axes) == 1
    plt.close(fig)
