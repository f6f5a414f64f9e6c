"""
Cluster quality scores.

Provides the dispersion figures behind the elbow heuristic, silhouette
widths, and agreement between two assignments (adjusted Rand index).
"""

from __future__ import annotations

from typing import Any, List, Optional

import numpy as np

from ..dataset import DataLike, as_matrix
from ..errors import InvalidArgumentError
from .clustering import RunResult, total_sum_of_squares

Array2D = np.ndarray


def _check_assignment(assignment: Any, n: int) -> np.ndarray:
    labels = np.asarray(assignment)
    if labels.ndim != 1 or labels.shape[0] != n:
        raise InvalidArgumentError(
            f"assignment must be 1-D with {n} entries; got shape {labels.shape}"
        )
    if not np.issubdtype(labels.dtype, np.integer):
        raise InvalidArgumentError(
            f"assignment must hold integer cluster ids; got dtype {labels.dtype}"
        )
    if n and labels.min() < 0:
        raise InvalidArgumentError("cluster ids must be non-negative")
    return labels.astype(np.int64, copy=False)


def distance_matrix(data: DataLike) -> Array2D:
    """
    Euclidean distance between every pair of observations.

    Returns:
        Symmetric (n, n) array with a zero diagonal
    """
    X = as_matrix(data)
    diffs = X[:, None, :] - X[None, :, :]
    dist = np.sqrt(np.einsum("ijd,ijd->ij", diffs, diffs))
    np.fill_diagonal(dist, 0.0)
    return dist


def total_ss(data: DataLike) -> float:
    """Sum of squared distances of all observations to the grand mean."""
    return total_sum_of_squares(as_matrix(data))


def between_ss(data: DataLike, assignment: Any) -> float:
    """
    Between-cluster sum of squares: sum_c n_c * ||mean_c - grand_mean||^2.

    Together with the within-cluster SS of the same assignment it adds up to
    ``total_ss``.
    """
    X = as_matrix(data)
    labels = _check_assignment(assignment, X.shape[0])
    grand = X.mean(axis=0)
    out = 0.0
    for c in np.unique(labels):
        members = X[labels == c]
        diff = members.mean(axis=0) - grand
        out += members.shape[0] * float(diff @ diff)
    return out


def silhouette_samples(
    data: DataLike, assignment: Any, dist: Optional[Array2D] = None
) -> np.ndarray:
    """
    Silhouette width of every observation.

    For observation i in cluster C, ``a(i)`` is the mean distance to the other
    members of C (0 when i is alone) and ``b(i)`` the smallest mean distance to
    the members of any other populated cluster. The width is
    ``(b - a) / max(a, b)``, or 0 when both are 0.

    Args:
        data: ``Dataset`` or (n, d) array
        assignment: Cluster id per observation
        dist: Optional precomputed (n, n) Euclidean distance matrix

    Raises:
        InvalidArgumentError: If fewer than two clusters are populated
    """
    X = as_matrix(data)
    n = X.shape[0]
    labels = _check_assignment(assignment, n)
    clusters = np.unique(labels)
    if len(clusters) < 2:
        raise InvalidArgumentError(
            f"silhouette needs at least 2 populated clusters; got {len(clusters)}"
        )
    if dist is None:
        dist = distance_matrix(X)
    elif np.shape(dist) != (n, n):
        raise InvalidArgumentError(
            f"dist must have shape ({n}, {n}); got {np.shape(dist)}"
        )

    # (n, n_clusters) summed distance from each point to each cluster
    member = (labels[:, None] == clusters[None, :]).astype(np.float64)
    sums = dist @ member
    counts = member.sum(axis=0)
    own = np.searchsorted(clusters, labels)

    sil = np.zeros(n, dtype=np.float64)
    for i in range(n):
        c = own[i]
        a = sums[i, c] / (counts[c] - 1) if counts[c] > 1 else 0.0
        others = np.delete(sums[i] / counts, c)
        b = float(others.min())
        denom = max(a, b)
        sil[i] = (b - a) / denom if denom > 0 else 0.0
    return sil


def average_silhouette(
    data: DataLike, assignment: Any, dist: Optional[Array2D] = None
) -> float:
    """Mean silhouette width across all observations (higher is better)."""
    return float(np.mean(silhouette_samples(data, assignment, dist)))


def adjusted_rand_index(labels_a: np.ndarray, labels_b: np.ndarray) -> float:
    """
    Compute Adjusted Rand Index between two clusterings.

    ARI measures agreement between two clusterings, adjusted for chance.
    Returns 1.0 for identical clusterings, ~0.0 for random agreement.

    Args:
        labels_a: First clustering labels
        labels_b: Second clustering labels

    Returns:
        ARI score in [-1, 1], typically in [0, 1]
    """
    labels_a = np.asarray(labels_a)
    labels_b = np.asarray(labels_b)
    if labels_a.shape != labels_b.shape:
        raise InvalidArgumentError(
            f"label arrays differ in shape: {labels_a.shape} vs {labels_b.shape}"
        )
    _, a = np.unique(labels_a, return_inverse=True)
    _, b = np.unique(labels_b, return_inverse=True)
    n = len(labels_a)
    if n < 2:
        return 1.0

    contingency = np.zeros((a.max() + 1, b.max() + 1), dtype=np.int64)
    np.add.at(contingency, (a, b), 1)

    sum_comb = (contingency * (contingency - 1) / 2.0).sum()
    rows = contingency.sum(axis=1)
    cols = contingency.sum(axis=0)
    sum_comb_c = (rows * (rows - 1) / 2.0).sum()
    sum_comb_k = (cols * (cols - 1) / 2.0).sum()
    comb_n = n * (n - 1) / 2.0

    expected_index = (sum_comb_c * sum_comb_k) / comb_n
    max_index = 0.5 * (sum_comb_c + sum_comb_k)
    denom = max_index - expected_index
    if denom == 0:
        return 1.0
    return float((sum_comb - expected_index) / denom)


def pairwise_ari(labels_list: List[np.ndarray]) -> List[float]:
    """
    Compute pairwise ARI between all pairs of clusterings.

    Args:
        labels_list: List of clustering label arrays

    Returns:
        List of ARI scores for all pairs (i, j) where i < j
    """
    aris = []
    for i in range(len(labels_list)):
        for j in range(i + 1, len(labels_list)):
            aris.append(adjusted_rand_index(labels_list[i], labels_list[j]))
    return aris


def restart_stability(run_result: RunResult) -> float:
    """
    Mean pairwise ARI between the final assignments of all restarts.

    1.0 means every restart landed on the same partition; a single restart is
    trivially stable.
    """
    aris = pairwise_ari(list(run_result.restart_labels))
    return float(np.mean(aris)) if aris else 1.0
