from typing import Dict, Sequence
import numpy as np
from sklearn.metrics import accuracy_score, confusion_matrix, precision_score, recall_score

from dcthash.hashing.base import Hash

def pairwise_distances(hashes: Sequence[Hash]) -> np.ndarray:
    """Symmetric matrix of normalized Hamming distances."""
    n = len(hashes)
    out = np.zeros((n, n), dtype=float)
    for i in range(n):
        for j in range(i + 1, n):
            out[i, j] = out[j, i] = hashes[i].normalized_hamming_distance(hashes[j])
    return out

def evaluate_threshold(distances, is_duplicate, threshold: float) -> Dict:
    """Score 'distance <= threshold means duplicate' against ground-truth pair labels."""
    y = np.asarray(is_duplicate, dtype=int)
    yhat = (np.asarray(distances, dtype=float) <= threshold).astype(int)
    return {
        "accuracy": accuracy_score(y, yhat),
        "precision": precision_score(y, yhat, zero_division=0),
        "recall": recall_score(y, yhat, zero_division=0),
        "confusion_matrix": confusion_matrix(y, yhat, labels=[0, 1]),
    }
