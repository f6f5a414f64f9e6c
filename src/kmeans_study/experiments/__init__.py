"""Reporting helpers for clustering results."""

from .result_metrics import (
    series_rows,
    series_to_frame,
    run_result_to_dict,
    assignment_frame,
    cluster_profile,
)

__all__ = [
    "series_rows",
    "series_to_frame",
    "run_result_to_dict",
    "assignment_frame",
    "cluster_profile",
]
