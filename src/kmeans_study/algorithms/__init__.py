"""
Algorithm Core Library - k-means partitioning and cluster-count scoring.

This module provides the partitioner, its quality scores and the sweep that
scores a range of cluster counts, separate from scripts and plotting.
"""

from .clustering import RunResult, partition, total_within_ss
from .scoring import (
    distance_matrix,
    total_ss,
    between_ss,
    silhouette_samples,
    average_silhouette,
    adjusted_rand_index,
    pairwise_ari,
    restart_stability,
)
from .sweep import (
    METRICS,
    ScoreSeries,
    AdviseConfig,
    AdviceResult,
    advise,
    run_advice,
)
from .preprocessing import standardize, pca_project

__all__ = [
    # Partitioning
    "RunResult",
    "partition",
    "total_within_ss",
    # Scores
    "distance_matrix",
    "total_ss",
    "between_ss",
    "silhouette_samples",
    "average_silhouette",
    "adjusted_rand_index",
    "pairwise_ari",
    "restart_stability",
    # Sweep orchestration
    "METRICS",
    "ScoreSeries",
    "AdviseConfig",
    "AdviceResult",
    "advise",
    "run_advice",
    # Pre-processing
    "standardize",
    "pca_project",
]
