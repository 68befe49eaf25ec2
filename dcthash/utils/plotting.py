import numpy as np
import matplotlib.pyplot as plt

def plot_distance_histogram(distances, is_duplicate=None, threshold=None, bins: int = 20):
    distances = np.asarray(distances, dtype=float)
    fig, ax = plt.subplots()
    edges = np.linspace(0.0, 1.0, bins + 1)
    if is_duplicate is None:
        ax.hist(distances, bins=edges)
    else:
        mask = np.asarray(is_duplicate, dtype=bool)
        ax.hist(distances[mask], bins=edges, alpha=0.6, label="duplicate")
        ax.hist(distances[~mask], bins=edges, alpha=0.6, label="distinct")
        ax.legend()
    if threshold is not None:
        ax.axvline(threshold, color="black", linestyle="--")
    ax.set(xlabel="Normalized Hamming distance", ylabel="Pairs", title="Hash distances")
    fig.tight_layout()
    return fig
