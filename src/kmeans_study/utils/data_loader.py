"""
Loading tabular observations from CSV files.

Reads a table with pandas, drops rows with missing feature values, and wraps
the rest in a ``Dataset``.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..dataset import Dataset
from ..errors import InvalidArgumentError
from .logging_config import get_logger

logger = get_logger(__name__)


def load_table(
    path: Union[str, Path],
    label_column: Optional[str] = None,
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Read a CSV table.

    Args:
        path: CSV file path
        label_column: Column holding observation labels. When omitted, the
            first column is used as the index, which matches CSV exports of
            row-named tables.
        columns: Feature columns to keep (all others dropped)

    Returns:
        DataFrame with the label column (if any) followed by the features

    Raises:
        FileNotFoundError: If *path* does not exist
        InvalidArgumentError: If a requested column is missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    if label_column is None:
        frame = pd.read_csv(path, index_col=0)
    else:
        frame = pd.read_csv(path)
        if label_column not in frame.columns:
            raise InvalidArgumentError(
                f"label column {label_column!r} not found in {list(frame.columns)}"
            )

    if columns is not None:
        missing = [c for c in columns if c not in frame.columns]
        if missing:
            raise InvalidArgumentError(f"columns not found: {missing}")
        keep: List[str] = ([label_column] if label_column else []) + list(columns)
        frame = frame[keep]

    logger.info("Loaded %d rows x %d columns from %s", frame.shape[0], frame.shape[1], path)
    return frame


def drop_missing(frame: pd.DataFrame, label_column: Optional[str] = None) -> pd.DataFrame:
    """Drop rows with any missing feature value, logging how many were removed."""
    features = [c for c in frame.columns if c != label_column]
    cleaned = frame.dropna(subset=features)
    dropped = len(frame) - len(cleaned)
    if dropped:
        logger.warning("Dropped %d of %d rows with missing values", dropped, len(frame))
    return cleaned


def dataset_from_csv(
    path: Union[str, Path],
    label_column: Optional[str] = None,
    columns: Optional[Sequence[str]] = None,
) -> Dataset:
    """Load a CSV, drop incomplete rows, and return a ``Dataset``."""
    frame = drop_missing(load_table(path, label_column, columns), label_column)
    if frame.empty:
        raise InvalidArgumentError(f"no complete rows left in {path}")
    return Dataset.from_frame(frame, label_column=label_column)
