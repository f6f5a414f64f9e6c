"""
Lloyd-style k-means partitioning with seeded random restarts.

Each restart samples k distinct observations as initial centroids, then
alternates assignment and update steps until the labels stop changing or
``max_iterations`` is reached. The restart with the lowest total
within-cluster sum of squares wins.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np

from ..dataset import DataLike, as_matrix
from ..errors import InvalidArgumentError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

Array2D = np.ndarray


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class RunResult:
    """Final state of the best restart of one ``partition`` call."""

    labels: np.ndarray
    centroids: Array2D
    within_ss: np.ndarray
    total_within_ss: float
    total_ss: float
    n_iter: int
    converged: bool
    restart_index: int = 0
    seed: int = 0
    history: Tuple[float, ...] = ()
    restart_objectives: Tuple[float, ...] = ()
    restart_labels: Tuple[np.ndarray, ...] = ()

    @property
    def k(self) -> int:
        return self.centroids.shape[0]

    @property
    def sizes(self) -> np.ndarray:
        """Number of observations assigned to each cluster."""
        return np.bincount(self.labels, minlength=self.k)

    @property
    def between_ss(self) -> float:
        """Dispersion explained by the partition (total minus within)."""
        return self.total_ss - self.total_within_ss

    def clusters(self) -> List[np.ndarray]:
        """Member row indices for each cluster id, in cluster order."""
        return [np.flatnonzero(self.labels == c) for c in range(self.k)]


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def _check_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidArgumentError(f"{name} must be >= 1, got {value}")
    return int(value)


def _check_seed(rng_seed: Any) -> int:
    if isinstance(rng_seed, bool) or not isinstance(rng_seed, (int, np.integer)):
        raise InvalidArgumentError(f"rng_seed must be an integer, got {rng_seed!r}")
    if rng_seed < 0:
        raise InvalidArgumentError(f"rng_seed must be >= 0, got {rng_seed}")
    return int(rng_seed)


def validate_partition_args(
    X: Array2D, k: Any, restarts: Any, max_iterations: Any, rng_seed: Any
) -> Tuple[int, int, int, int]:
    """Validate ``partition`` arguments against the observation matrix."""
    k = _check_positive_int("k", k)
    restarts = _check_positive_int("restarts", restarts)
    max_iterations = _check_positive_int("max_iterations", max_iterations)
    rng_seed = _check_seed(rng_seed)
    n = X.shape[0]
    if k > n:
        raise InvalidArgumentError(f"k ({k}) cannot exceed number of observations ({n})")
    return k, restarts, max_iterations, rng_seed


# ------------------------------------------------------------------
# Single-restart building blocks
# ------------------------------------------------------------------

def restart_rng(rng_seed: int, restart_index: int) -> np.random.Generator:
    """Independent generator for one restart, derived from the base seed."""
    return np.random.default_rng([rng_seed, restart_index])


def _sq_distances(X: Array2D, centroids: Array2D) -> np.ndarray:
    """(n, k) squared Euclidean distances, computed from exact differences."""
    diffs = X[:, None, :] - centroids[None, :, :]
    return np.einsum("nkd,nkd->nk", diffs, diffs)


def _assign(sq_dists: np.ndarray) -> np.ndarray:
    """Nearest centroid per row; argmin keeps the lowest index on ties."""
    return np.argmin(sq_dists, axis=1)


def _update_centroids(
    X: Array2D, labels: np.ndarray, centroids: Array2D, sq_dists: np.ndarray
) -> Tuple[Array2D, List[int]]:
    """
    Recompute centroids as member means, re-seeding empty clusters.

    An empty cluster takes the observation farthest from its own assigned
    centroid (using the assignment-step distances). Several empty clusters
    are filled in ascending order with distinct observations. When every
    remaining observation already sits on its centroid (duplicate rows), the
    empty cluster keeps its previous centroid and is not counted as re-seeded.

    Returns:
        Tuple of (new centroids, ids of clusters that were re-seeded)
    """
    n, d = X.shape
    k = centroids.shape[0]
    counts = np.bincount(labels, minlength=k)
    sums = np.zeros((k, d), dtype=np.float64)
    np.add.at(sums, labels, X)

    new = centroids.astype(np.float64, copy=True)
    populated = counts > 0
    new[populated] = sums[populated] / counts[populated, None]

    reseeded: List[int] = []
    empty = np.flatnonzero(~populated)
    if len(empty):
        own = sq_dists[np.arange(n), labels].copy()
        for j in empty:
            far = int(np.argmax(own))
            if own[far] <= 0:
                break
            new[j] = X[far]
            own[far] = -np.inf
            reseeded.append(int(j))
    return new, reseeded


def _within_ss(X: Array2D, labels: np.ndarray, centroids: Array2D) -> np.ndarray:
    """Per-cluster sum of squared distances to the cluster centroid."""
    diffs = X - centroids[labels]
    per_point = np.einsum("nd,nd->n", diffs, diffs)
    return np.bincount(labels, weights=per_point, minlength=centroids.shape[0])


def total_sum_of_squares(X: Array2D) -> float:
    """Dispersion of all observations about the grand mean."""
    centered = X - X.mean(axis=0)
    return float(np.einsum("nd,nd->", centered, centered))


def run_restart(
    X: Array2D, k: int, *, max_iterations: int, rng_seed: int, restart_index: int
) -> RunResult:
    """
    Run one randomized restart to convergence or ``max_iterations``.

    The loop rebinds ``labels``/``centroids`` each iteration instead of
    mutating shared state, so restarts can run on separate threads.
    """
    n = X.shape[0]
    rng = restart_rng(rng_seed, restart_index)
    seeds = rng.choice(n, size=k, replace=False)
    centroids = X[seeds].astype(np.float64, copy=True)

    prev_labels: Optional[np.ndarray] = None
    labels = np.zeros(n, dtype=np.int64)
    history: List[float] = []
    converged = False
    n_iter = 0

    for n_iter in range(1, max_iterations + 1):
        # ---- ASSIGNMENT STEP ----
        sq_dists = _sq_distances(X, centroids)
        labels = _assign(sq_dists)

        # ---- UPDATE STEP ----
        new_centroids, reseeded = _update_centroids(X, labels, centroids, sq_dists)
        if reseeded:
            logger.warning(
                "Restart %d iteration %d: re-seeded empty clusters %s",
                restart_index, n_iter, reseeded,
            )
        history.append(float(_within_ss(X, labels, new_centroids).sum()))

        # ---- CONVERGENCE CHECK ----
        unchanged = prev_labels is not None and np.array_equal(labels, prev_labels)
        fixed_point = np.array_equal(new_centroids, centroids)
        centroids = new_centroids
        prev_labels = labels
        if (unchanged or fixed_point) and not reseeded:
            converged = True
            break

    if not converged:
        logger.warning(
            "Restart %d (k=%d) did not converge within %d iterations",
            restart_index, k, max_iterations,
        )

    within = _within_ss(X, labels, centroids)
    logger.debug(
        "Restart %d (k=%d): %d iterations, total within SS %.6g",
        restart_index, k, n_iter, within.sum(),
    )
    return RunResult(
        labels=_frozen(labels.astype(np.int64)),
        centroids=_frozen(centroids),
        within_ss=_frozen(within),
        total_within_ss=float(within.sum()),
        total_ss=total_sum_of_squares(X),
        n_iter=n_iter,
        converged=converged,
        restart_index=restart_index,
        seed=rng_seed,
        history=tuple(history),
    )


def select_best(results: List[RunResult]) -> RunResult:
    """Lowest total within SS wins; ties go to the lowest restart index."""
    return min(results, key=lambda r: (r.total_within_ss, r.restart_index))


# ------------------------------------------------------------------
# Partitioner
# ------------------------------------------------------------------

def partition(
    dataset: DataLike,
    k: int,
    restarts: int = 1,
    max_iterations: int = 100,
    rng_seed: int = 0,
    *,
    n_workers: int = 1,
) -> RunResult:
    """
    Partition observations into k clusters, keeping the best of several restarts.

    Args:
        dataset: ``Dataset`` or (n_observations, n_features) array
        k: Number of clusters, 1 <= k <= n_observations
        restarts: Number of independent random initializations
        max_iterations: Upper bound on iterations per restart
        rng_seed: Non-negative base seed; restart r draws from
            ``default_rng([rng_seed, r])``
        n_workers: Threads used to run restarts; does not affect the result

    Returns:
        RunResult of the restart with the lowest total within-cluster SS,
        with ``restart_objectives`` listing every restart's final score

    Raises:
        InvalidArgumentError: If the dataset or any parameter is invalid
    """
    X = as_matrix(dataset)
    k, restarts, max_iterations, rng_seed = validate_partition_args(
        X, k, restarts, max_iterations, rng_seed
    )
    n_workers = _check_positive_int("n_workers", n_workers)

    def _one(restart_index: int) -> RunResult:
        return run_restart(
            X, k, max_iterations=max_iterations, rng_seed=rng_seed,
            restart_index=restart_index,
        )

    if n_workers > 1 and restarts > 1:
        with ThreadPoolExecutor(max_workers=min(n_workers, restarts)) as executor:
            results = list(executor.map(_one, range(restarts)))
    else:
        results = [_one(r) for r in range(restarts)]

    best = select_best(results)
    objectives = tuple(r.total_within_ss for r in results)
    logger.info(
        "partition k=%d: best restart %d of %d, total within SS %.6g (%s)",
        k, best.restart_index, restarts, best.total_within_ss,
        "converged" if best.converged else "not converged",
    )
    return RunResult(
        labels=best.labels,
        centroids=best.centroids,
        within_ss=best.within_ss,
        total_within_ss=best.total_within_ss,
        total_ss=best.total_ss,
        n_iter=best.n_iter,
        converged=best.converged,
        restart_index=best.restart_index,
        seed=best.seed,
        history=best.history,
        restart_objectives=objectives,
        restart_labels=tuple(r.labels for r in results),
    )


def total_within_ss(run_result: RunResult) -> float:
    """Total within-cluster sum of squares of a run (feeds the elbow plot)."""
    return float(run_result.total_within_ss)
