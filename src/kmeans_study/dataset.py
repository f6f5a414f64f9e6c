"""
Labelled numeric tables consumed by the clustering core.

A ``Dataset`` is built once per analysis (usually by
``kmeans_study.utils.data_loader``) and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .errors import InvalidArgumentError

Array2D = np.ndarray


def _readonly(values: np.ndarray) -> np.ndarray:
    out = np.array(values, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


def as_matrix(data: Any) -> Array2D:
    """
    Return the observation matrix of *data* as a 2-D float64 array.

    Accepts a ``Dataset`` or anything ``np.asarray`` understands. The matrix
    must be non-empty, two-dimensional and finite.

    Raises:
        InvalidArgumentError: If the shape or values are unusable
    """
    if isinstance(data, Dataset):
        return data.values
    try:
        X = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"dataset must be numeric: {e}") from e
    if X.ndim != 2:
        raise InvalidArgumentError(
            f"dataset must be 2-D (n_observations, n_features); got shape {X.shape}"
        )
    n, d = X.shape
    if n == 0:
        raise InvalidArgumentError("dataset must contain at least one observation")
    if d == 0:
        raise InvalidArgumentError("dataset must have at least one feature")
    if not np.all(np.isfinite(X)):
        raise InvalidArgumentError(
            "dataset contains missing or non-finite values; clean it before clustering"
        )
    return X


@dataclass(frozen=True, eq=False)
class Dataset:
    """Ordered, labelled observations sharing the same feature columns."""

    labels: Tuple[str, ...]
    feature_names: Tuple[str, ...]
    values: Array2D

    def __post_init__(self):
        """Validate shape and labels, and freeze the value matrix."""
        values = _readonly(as_matrix(self.values))
        labels = tuple(str(label) for label in self.labels)
        feature_names = tuple(str(name) for name in self.feature_names)
        n, d = values.shape

        if len(labels) != n:
            raise InvalidArgumentError(
                f"got {len(labels)} labels for {n} observations"
            )
        if len(set(labels)) != n:
            raise InvalidArgumentError("observation labels must be unique")
        if len(feature_names) != d:
            raise InvalidArgumentError(
                f"got {len(feature_names)} feature names for {d} features"
            )

        object.__setattr__(self, "values", values)
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "feature_names", feature_names)

    @property
    def n_observations(self) -> int:
        return self.values.shape[0]

    @property
    def n_features(self) -> int:
        return self.values.shape[1]

    def __len__(self) -> int:
        return self.n_observations

    def with_values(self, values: Array2D) -> "Dataset":
        """Return a new Dataset with the same labels and columns but new values."""
        return Dataset(self.labels, self.feature_names, values)

    def to_frame(self) -> pd.DataFrame:
        """Return the dataset as a DataFrame indexed by observation label."""
        return pd.DataFrame(
            np.array(self.values), index=list(self.labels), columns=list(self.feature_names)
        )

    @classmethod
    def from_array(
        cls,
        values: Any,
        labels: Optional[Sequence[Any]] = None,
        feature_names: Optional[Sequence[Any]] = None,
    ) -> "Dataset":
        """Build a Dataset from a bare matrix, generating labels/names if absent."""
        X = as_matrix(values)
        n, d = X.shape
        if labels is None:
            labels = [str(i) for i in range(n)]
        if feature_names is None:
            feature_names = [f"x{j}" for j in range(d)]
        return cls(tuple(labels), tuple(feature_names), X)

    @classmethod
    def from_frame(
        cls, frame: pd.DataFrame, label_column: Optional[str] = None
    ) -> "Dataset":
        """
        Build a Dataset from a DataFrame.

        Args:
            frame: Table with one row per observation
            label_column: Column holding observation labels; the index is used
                when omitted

        Raises:
            InvalidArgumentError: If the label column is unknown or a feature
                column is not numeric
        """
        if label_column is not None:
            if label_column not in frame.columns:
                raise InvalidArgumentError(
                    f"label column {label_column!r} not found in {list(frame.columns)}"
                )
            labels = frame[label_column].astype(str).tolist()
            features = frame.drop(columns=[label_column])
        else:
            labels = [str(label) for label in frame.index]
            features = frame

        non_numeric = [
            col for col in features.columns
            if not pd.api.types.is_numeric_dtype(features[col])
        ]
        if non_numeric:
            raise InvalidArgumentError(f"non-numeric feature columns: {non_numeric}")

        return cls(
            tuple(labels),
            tuple(str(col) for col in features.columns),
            features.to_numpy(dtype=np.float64),
        )


DataLike = Union[Dataset, Array2D]
