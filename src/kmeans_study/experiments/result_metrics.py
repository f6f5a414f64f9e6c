"""Canonical result flattening helpers.

Turns ``RunResult`` and ``ScoreSeries`` objects into plain rows, pandas
frames and JSON-friendly dicts for reporting and plotting layers.
"""

from typing import Any, Dict, List

import numpy as np
import pandas as pd

from ..algorithms.clustering import RunResult
from ..algorithms.scoring import restart_stability
from ..algorithms.sweep import ScoreSeries
from ..dataset import Dataset
from ..errors import InvalidArgumentError


# ---------------------------------------------------------------------------
# Score series
# ---------------------------------------------------------------------------

def series_rows(series: ScoreSeries) -> List[dict]:
    """Flatten a score series into ``{"k", "metric", "score"}`` rows."""
    return [
        {"k": int(k), "metric": series.metric, "score": float(score)}
        for k, score in series
    ]


def series_to_frame(series: ScoreSeries) -> pd.DataFrame:
    """Score series as a DataFrame with columns k, metric, score."""
    return pd.DataFrame(series_rows(series), columns=["k", "metric", "score"])


# ---------------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------------

def run_result_to_dict(result: RunResult) -> Dict[str, Any]:
    """Serializable summary of a run (lists and floats only)."""
    return {
        "k": result.k,
        "labels": result.labels.tolist(),
        "centroids": result.centroids.tolist(),
        "sizes": result.sizes.tolist(),
        "within_ss": result.within_ss.tolist(),
        "total_within_ss": float(result.total_within_ss),
        "between_ss": float(result.between_ss),
        "total_ss": float(result.total_ss),
        "between_over_total": (
            float(result.between_ss / result.total_ss) if result.total_ss > 0 else 0.0
        ),
        "n_iter": int(result.n_iter),
        "converged": bool(result.converged),
        "restart_index": int(result.restart_index),
        "seed": int(result.seed),
        "restart_objectives": [float(o) for o in result.restart_objectives],
        "restart_stability_ari": restart_stability(result),
    }


def _check_rows(dataset: Dataset, result: RunResult) -> None:
    if dataset.n_observations != len(result.labels):
        raise InvalidArgumentError(
            f"dataset has {dataset.n_observations} rows but the run assigned "
            f"{len(result.labels)}"
        )


def assignment_frame(dataset: Dataset, result: RunResult) -> pd.DataFrame:
    """One row per observation: label and assigned cluster."""
    _check_rows(dataset, result)
    return pd.DataFrame(
        {"label": list(dataset.labels), "cluster": result.labels.astype(int)}
    )


def cluster_profile(dataset: Dataset, result: RunResult) -> pd.DataFrame:
    """
    Per-cluster feature means and sizes.

    Pass the unstandardized dataset to read the profile in original units.
    """
    _check_rows(dataset, result)
    frame = pd.DataFrame(np.array(dataset.values), columns=list(dataset.feature_names))
    frame["cluster"] = result.labels.astype(int)
    profile = frame.groupby("cluster").mean()
    profile.insert(0, "size", frame.groupby("cluster").size())
    return profile.reindex(range(result.k))
