"""
Figures for the clustering walkthrough.

Every function returns a matplotlib ``Figure`` and leaves saving/closing to
the caller; nothing here calls ``plt.show()``.
"""

from __future__ import annotations

from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from .algorithms.clustering import RunResult
from .algorithms.preprocessing import pca_project
from .algorithms.sweep import ScoreSeries
from .dataset import Dataset, DataLike


def plot_distance_matrix(
    dist: np.ndarray, labels: Optional[Sequence[str]] = None, title: str = "Distance matrix"
) -> Figure:
    """Heatmap of a pairwise distance matrix."""
    fig, ax = plt.subplots(figsize=(7, 6))
    im = ax.imshow(dist, cmap="viridis", interpolation="nearest")
    fig.colorbar(im, ax=ax, label="Euclidean distance")
    if labels is not None and len(labels) <= 60:
        ticks = np.arange(len(labels))
        ax.set_xticks(ticks)
        ax.set_yticks(ticks)
        ax.set_xticklabels(labels, rotation=90, fontsize=6)
        ax.set_yticklabels(labels, fontsize=6)
    ax.set_title(title)
    fig.tight_layout()
    return fig


def _plot_series(series: ScoreSeries, ylabel: str, title: str) -> Figure:
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(series.ks, series.scores, marker="o")
    ax.set_xticks(series.ks)
    ax.set_xlabel("Number of clusters k")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def plot_elbow(series: ScoreSeries) -> Figure:
    """Total within-cluster SS against k; look for the bend."""
    return _plot_series(series, "Total within-cluster sum of squares", "Elbow method")


def plot_silhouette_series(series: ScoreSeries) -> Figure:
    """Average silhouette width against k; look for the peak."""
    return _plot_series(series, "Average silhouette width", "Silhouette method")


def plot_silhouette_samples(sil: np.ndarray, labels: np.ndarray) -> Figure:
    """Per-observation silhouette widths grouped by cluster, sorted within each."""
    labels = np.asarray(labels)
    fig, ax = plt.subplots(figsize=(8, 5))
    y = 0
    for c in np.unique(labels):
        vals = np.sort(sil[labels == c])[::-1]
        ax.barh(np.arange(y, y + len(vals)), vals, height=1.0, label=f"cluster {c}")
        y += len(vals) + 1
    ax.axvline(float(np.mean(sil)), color="red", linestyle="--", label="average")
    ax.set_yticks([])
    ax.set_xlabel("Silhouette width")
    ax.set_title("Silhouette plot")
    ax.legend(loc="lower right", fontsize=8)
    fig.tight_layout()
    return fig


def plot_clusters(data: DataLike, result: RunResult) -> Figure:
    """
    Scatter of observations on the first two principal components.

    Centroids are projected with the same axes; labels are drawn when the
    dataset carries them.
    """
    Z, meta = pca_project(data, n_components=2)
    if Z.shape[1] == 1:
        Z = np.column_stack([Z[:, 0], np.zeros(Z.shape[0])])
    fig, ax = plt.subplots(figsize=(8, 6))
    scatter = ax.scatter(Z[:, 0], Z[:, 1], c=result.labels, cmap="tab10", s=30)

    centers = (result.centroids - np.asarray(meta["mean"])) @ meta["components"].T
    if centers.shape[1] == 1:
        centers = np.column_stack([centers[:, 0], np.zeros(centers.shape[0])])
    ax.scatter(centers[:, 0], centers[:, 1], c="black", marker="x", s=80, label="centroids")

    if isinstance(data, Dataset):
        for (x, y), name in zip(Z, data.labels):
            ax.annotate(name, (x, y), fontsize=6, alpha=0.7)

    ratio = meta["explained_variance_ratio"] + [0.0]
    ax.set_xlabel(f"Dim1 ({ratio[0]:.1%})")
    ax.set_ylabel(f"Dim2 ({ratio[1]:.1%})")
    ax.set_title(f"Cluster plot (k={result.k})")
    ax.legend(*scatter.legend_elements(), title="cluster", loc="best", fontsize=8)
    fig.tight_layout()
    return fig
