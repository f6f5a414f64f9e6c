"""
End-to-end clustering walkthrough.

Pipeline:
1. Load a CSV table and drop rows with missing values
2. Standardize every feature
3. Compute the pairwise distance matrix
4. Score k over a range with the elbow and silhouette methods
5. If the caller has chosen k, partition with it and build the report

Choosing k from the score series is a judgment left to the reader; the
pipeline only partitions when ``k`` is passed explicitly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from .algorithms.clustering import RunResult, partition
from .algorithms.preprocessing import standardize
from .algorithms.scoring import distance_matrix, silhouette_samples
from .algorithms.sweep import AdviceResult, AdviseConfig, run_advice
from .dataset import Dataset
from .experiments.result_metrics import (
    assignment_frame,
    cluster_profile,
    run_result_to_dict,
    series_to_frame,
)
from .utils.data_loader import dataset_from_csv
from .utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class WalkthroughResult:
    """Everything the walkthrough produced."""

    raw: Dataset
    scaled: Dataset
    dist: np.ndarray
    advice: AdviceResult
    final: Optional[RunResult] = None
    assignments: Optional[pd.DataFrame] = None
    profile: Optional[pd.DataFrame] = None

    def score_table(self) -> pd.DataFrame:
        frames = [series_to_frame(self.advice.dispersion)]
        if self.advice.silhouette is not None:
            frames.append(series_to_frame(self.advice.silhouette))
        return pd.concat(frames, ignore_index=True)


def run_walkthrough(
    csv_path: Union[str, Path],
    *,
    label_column: Optional[str] = None,
    k: Optional[int] = None,
    output_dir: Optional[Union[str, Path]] = None,
    cfg: Optional[AdviseConfig] = None,
) -> WalkthroughResult:
    """
    Run the walkthrough on a CSV file.

    Args:
        csv_path: Table with one row per observation
        label_column: Column with observation names (first column if omitted)
        k: Final number of clusters; when None only the score series are built
        output_dir: Directory for CSV/JSON/PNG outputs; nothing is written when None
        cfg: Sweep configuration (defaults from ``kmeans_study.config``)

    Returns:
        WalkthroughResult
    """
    cfg = cfg or AdviseConfig()

    raw = dataset_from_csv(csv_path, label_column=label_column)
    scaled = standardize(raw)
    dist = distance_matrix(scaled)
    logger.info(
        "Walkthrough on %d observations x %d features", raw.n_observations, raw.n_features
    )

    advice = run_advice(scaled, cfg)
    out = WalkthroughResult(raw=raw, scaled=scaled, dist=dist, advice=advice)

    if k is not None:
        out.final = partition(
            scaled, k, cfg.restarts, cfg.max_iterations, cfg.rng_seed,
            n_workers=cfg.n_workers,
        )
        out.assignments = assignment_frame(scaled, out.final)
        out.profile = cluster_profile(raw, out.final)
    else:
        logger.info("No k given; inspect the score series and rerun with k")

    if output_dir is not None:
        write_outputs(out, Path(output_dir))
    return out


def write_outputs(out: WalkthroughResult, output_dir: Path) -> None:
    """
    Write tables, the run summary and figures into *output_dir*.

    Uses whatever matplotlib backend the caller has selected.
    """
    import matplotlib.pyplot as plt

    from . import plotting

    output_dir.mkdir(parents=True, exist_ok=True)
    out.score_table().to_csv(output_dir / "score_series.csv", index=False)

    figures = {
        "distance_matrix.png": plotting.plot_distance_matrix(out.dist, out.scaled.labels),
        "elbow.png": plotting.plot_elbow(out.advice.dispersion),
    }
    if out.advice.silhouette is not None:
        figures["silhouette.png"] = plotting.plot_silhouette_series(out.advice.silhouette)

    if out.final is not None:
        out.assignments.to_csv(output_dir / "assignments.csv", index=False)
        out.profile.to_csv(output_dir / "cluster_profile.csv", index_label="cluster")
        with open(output_dir / "run_result.json", "w", encoding="utf-8") as f:
            json.dump(run_result_to_dict(out.final), f, indent=2)
        figures["clusters.png"] = plotting.plot_clusters(out.scaled, out.final)
        if out.final.k >= 2:
            sil = silhouette_samples(out.scaled, out.final.labels, out.dist)
            figures["silhouette_samples.png"] = plotting.plot_silhouette_samples(
                sil, out.final.labels
            )

    for name, fig in figures.items():
        fig.savefig(output_dir / name, dpi=120, bbox_inches="tight")
        plt.close(fig)
    logger.info("Wrote %d figures and tables to %s", len(figures), output_dir)
