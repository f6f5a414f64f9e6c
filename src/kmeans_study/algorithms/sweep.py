"""
Sweep orchestration for choosing the number of clusters.

Runs the partitioner once per candidate k and records a quality score per k
(total within-cluster SS for the elbow heuristic, or mean silhouette width).
Reading the bend or the peak off the series is left to the caller.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from ..config import config
from ..dataset import DataLike, as_matrix
from ..errors import InvalidArgumentError
from ..utils.logging_config import get_logger
from .clustering import RunResult, partition, total_within_ss, validate_partition_args
from .scoring import average_silhouette, distance_matrix

logger = get_logger(__name__)

DISPERSION = "dispersion"
SILHOUETTE = "silhouette"
METRICS = [DISPERSION, SILHOUETTE]


@dataclass(frozen=True, eq=False)
class ScoreSeries:
    """Score per candidate k, in ascending k."""

    metric: str
    points: Tuple[Tuple[int, float], ...]
    results: Tuple[RunResult, ...] = ()

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def ks(self) -> List[int]:
        return [k for k, _ in self.points]

    @property
    def scores(self) -> List[float]:
        return [score for _, score in self.points]

    def result_for(self, k: int) -> RunResult:
        """RunResult computed for *k* during the sweep."""
        for (kk, _), result in zip(self.points, self.results):
            if kk == k:
                return result
        raise KeyError(f"k={k} not in series {self.ks}")

    def as_dict(self) -> Dict[int, float]:
        return dict(self.points)


def _normalize_k_range(k_range: Iterable[Any], n: int, metric: str) -> List[int]:
    try:
        entries = list(k_range)
    except TypeError as e:
        raise InvalidArgumentError(f"k_range must be an iterable of integers: {e}") from e
    for k in entries:
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
            raise InvalidArgumentError(f"k_range must contain integers, got {k!r}")
    ks = sorted({int(k) for k in entries})
    if not ks:
        raise InvalidArgumentError("k_range must not be empty")
    lower = 2 if metric == SILHOUETTE else 1
    if ks[0] < lower or ks[-1] > n:
        raise InvalidArgumentError(
            f"k_range for {metric} must lie within [{lower}, {n}]; "
            f"got [{ks[0]}, {ks[-1]}]"
        )
    return ks


def advise(
    dataset: DataLike,
    k_range: Iterable[int],
    restarts: int = 1,
    max_iterations: int = 100,
    rng_seed: int = 0,
    metric: str = DISPERSION,
    *,
    n_workers: int = 1,
) -> ScoreSeries:
    """
    Score every candidate k so the caller can pick the elbow or silhouette peak.

    Each k gets its own ``partition`` call with the same restarts,
    max_iterations and rng_seed.

    Args:
        dataset: ``Dataset`` or (n_observations, n_features) array
        k_range: Candidate cluster counts; sorted and de-duplicated
        restarts: Restarts per partition call
        max_iterations: Iteration bound per restart
        rng_seed: Base seed shared by every k
        metric: ``"dispersion"`` (total within SS) or ``"silhouette"``
        n_workers: Threads used to run different k concurrently

    Returns:
        ScoreSeries in ascending k, with the RunResult of each k attached

    Raises:
        InvalidArgumentError: If the metric is unknown, the range is empty or
            out of bounds, or a partition argument is invalid
    """
    if metric not in METRICS:
        raise InvalidArgumentError(f"metric must be one of {METRICS}, got {metric!r}")
    X = as_matrix(dataset)
    n = X.shape[0]
    ks = _normalize_k_range(k_range, n, metric)
    # Fail before any work if the shared parameters are bad
    validate_partition_args(X, ks[0], restarts, max_iterations, rng_seed)
    if isinstance(n_workers, bool) or not isinstance(n_workers, (int, np.integer)) or n_workers < 1:
        raise InvalidArgumentError(f"n_workers must be a positive integer, got {n_workers!r}")

    dist = distance_matrix(X) if metric == SILHOUETTE else None

    def _score(k: int) -> Tuple[float, RunResult]:
        result = partition(X, k, restarts, max_iterations, rng_seed)
        if metric == SILHOUETTE:
            score = average_silhouette(X, result.labels, dist)
        else:
            score = total_within_ss(result)
        logger.debug("advise %s: k=%d score=%.6g", metric, k, score)
        return score, result

    if n_workers > 1 and len(ks) > 1:
        with ThreadPoolExecutor(max_workers=min(n_workers, len(ks))) as executor:
            scored = dict(zip(ks, executor.map(_score, ks)))
    else:
        scored = {k: _score(k) for k in ks}

    logger.info("advise %s over k=%d..%d on %d observations", metric, ks[0], ks[-1], n)
    return ScoreSeries(
        metric=metric,
        points=tuple((k, scored[k][0]) for k in ks),
        results=tuple(scored[k][1] for k in ks),
    )


# ------------------------------------------------------------------
# Configured sweep over both metrics
# ------------------------------------------------------------------

@dataclass
class AdviseConfig:
    """Configuration for a cluster-count sweep."""

    k_min: int = field(default_factory=lambda: config.clustering.k_min)
    k_max: int = field(default_factory=lambda: config.clustering.k_max)
    restarts: int = field(default_factory=lambda: config.clustering.restarts)
    max_iterations: int = field(default_factory=lambda: config.clustering.max_iterations)
    rng_seed: int = field(default_factory=lambda: config.clustering.seed)
    n_workers: int = field(default_factory=lambda: config.clustering.n_workers)


@dataclass(frozen=True, eq=False)
class AdviceResult:
    """Elbow and silhouette series from one sweep."""

    dispersion: ScoreSeries
    silhouette: Optional[ScoreSeries] = None


def run_advice(dataset: DataLike, cfg: Optional[AdviseConfig] = None) -> AdviceResult:
    """
    Compute both the elbow and the silhouette series over ``[k_min, k_max]``.

    ``k_max`` is clipped to the number of observations. The silhouette series
    starts at ``max(2, k_min)`` and is omitted when that exceeds ``k_max``.

    Raises:
        InvalidArgumentError: If k_min > k_max
    """
    cfg = cfg or AdviseConfig()
    if cfg.k_min > cfg.k_max:
        raise InvalidArgumentError(f"k_min ({cfg.k_min}) must be <= k_max ({cfg.k_max})")

    n = as_matrix(dataset).shape[0]
    k_max = min(cfg.k_max, n)
    if k_max < cfg.k_max:
        logger.info("k_max clipped from %d to %d observations", cfg.k_max, k_max)

    common = dict(
        restarts=cfg.restarts,
        max_iterations=cfg.max_iterations,
        rng_seed=cfg.rng_seed,
        n_workers=cfg.n_workers,
    )
    dispersion = advise(dataset, range(cfg.k_min, k_max + 1), metric=DISPERSION, **common)

    silhouette = None
    sil_min = max(2, cfg.k_min)
    if sil_min <= k_max:
        silhouette = advise(dataset, range(sil_min, k_max + 1), metric=SILHOUETTE, **common)
    return AdviceResult(dispersion=dispersion, silhouette=silhouette)
