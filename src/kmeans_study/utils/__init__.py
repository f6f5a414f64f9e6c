"""Utility modules for kmeans_study."""

from .logging_config import get_logger, setup_logging
from .data_loader import load_table, drop_missing, dataset_from_csv

__all__ = [
    "get_logger",
    "setup_logging",
    "load_table",
    "drop_missing",
    "dataset_from_csv",
]
