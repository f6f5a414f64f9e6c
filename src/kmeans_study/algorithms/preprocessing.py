"""
Pre-processing helpers applied before clustering.

Provides column standardization and a PCA/SVD projection used to draw
clusters in two dimensions.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple, Union

import numpy as np

from ..dataset import Dataset, DataLike, as_matrix
from ..errors import InvalidArgumentError

Array2D = np.ndarray


def standardize(data: DataLike, ddof: int = 1) -> Union[Dataset, Array2D]:
    """
    Scale every feature to zero mean and unit standard deviation.

    Uses the sample standard deviation (``ddof=1``) by default, the usual
    convention for scaling a table before k-means.

    Args:
        data: ``Dataset`` or (n_samples, n_features) array
        ddof: Delta degrees of freedom for the standard deviation

    Returns:
        Same type as *data*, with z-scored values

    Raises:
        InvalidArgumentError: If a column is constant or there are too few rows
    """
    X = as_matrix(data)
    if X.shape[0] <= ddof:
        raise InvalidArgumentError(
            f"need more than {ddof} observations to standardize; got {X.shape[0]}"
        )
    mu = X.mean(axis=0)
    sd = X.std(axis=0, ddof=ddof)
    constant = np.flatnonzero(sd == 0)
    if len(constant):
        names = (
            [data.feature_names[j] for j in constant]
            if isinstance(data, Dataset)
            else constant.tolist()
        )
        raise InvalidArgumentError(f"cannot standardize constant features: {names}")
    Z = (X - mu) / sd
    if isinstance(data, Dataset):
        return data.with_values(Z)
    return Z


def pca_project(data: DataLike, n_components: int = 2) -> Tuple[Array2D, Dict[str, Any]]:
    """
    Project data onto its leading principal components using SVD.

    Centers the data, computes SVD, and projects to the top components.

    Args:
        data: ``Dataset`` or (n_samples, n_features) array
        n_components: Number of principal components to keep

    Returns:
        Tuple of:
        - Z: Projected data of shape (n_samples, k_used) where
          k_used = min(n_components, n_samples, n_features)
        - meta: Dictionary with PCA metadata:
            - pca_dim_used: Actual number of components used
            - singular_values: All singular values
            - explained_variance_ratio: Share of variance per kept component
            - mean: Mean vector used for centering
            - components: (k_used, n_features) principal axes
    """
    if n_components < 1:
        raise InvalidArgumentError(f"n_components must be >= 1, got {n_components}")
    X = as_matrix(data)
    mu = X.mean(axis=0, keepdims=True)
    Xc = X - mu
    U, S, Vt = np.linalg.svd(Xc, full_matrices=False)
    kk = int(min(n_components, U.shape[1]))
    Z = U[:, :kk] * S[:kk]

    var = S ** 2
    total = var.sum()
    ratio = (var[:kk] / total) if total > 0 else np.zeros(kk)
    meta = {
        "pca_dim_used": kk,
        "singular_values": S.tolist(),
        "explained_variance_ratio": ratio.tolist(),
        "mean": mu.squeeze(0).tolist(),
        "components": Vt[:kk],
    }
    return Z, meta
