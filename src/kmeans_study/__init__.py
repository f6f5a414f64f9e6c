"""
kmeans_study - Core Package

A small toolkit for walking through k-means clustering of a numeric table:
standardize the data, score candidate cluster counts with the elbow and
silhouette methods, then partition with the chosen k.

This package provides:
- Seeded, multi-restart k-means partitioning
- Dispersion, silhouette and agreement scores
- Reporting and plotting helpers around the results
"""

__version__ = "0.1.0"

from .errors import InvalidArgumentError
from .dataset import Dataset
from .algorithms import (
    RunResult,
    ScoreSeries,
    partition,
    total_within_ss,
    average_silhouette,
    advise,
    standardize,
)

from . import algorithms
from . import experiments
from . import utils

__all__ = [
    "InvalidArgumentError",
    "Dataset",
    "RunResult",
    "ScoreSeries",
    "partition",
    "total_within_ss",
    "average_silhouette",
    "advise",
    "standardize",
    "algorithms",
    "experiments",
    "utils",
]
