"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from kmeans_study.dataset import Dataset


@pytest.fixture
def four_points():
    """Two tight pairs far apart: {(0,0),(0,1)} and {(10,10),(10,11)}."""
    return np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]])


@pytest.fixture
def blobs():
    """Three well-separated 2-D blobs of 20 points each, in blob order."""
    rng = np.random.default_rng(42)
    centers = np.array([[0.0, 0.0], [8.0, 0.0], [0.0, 8.0]])
    X = np.vstack([c + rng.standard_normal((20, 2)) * 0.5 for c in centers])
    truth = np.repeat(np.arange(3), 20)
    return X, truth


@pytest.fixture
def random_data():
    """Unstructured data where k-means needs several iterations."""
    rng = np.random.default_rng(7)
    return rng.standard_normal((50, 3))


@pytest.fixture
def regions_frame():
    """Small labelled table with three groups and one incomplete row."""
    rng = np.random.default_rng(3)
    rows = []
    for g, base in enumerate([(2.0, 50.0, 10.0), (12.0, 200.0, 30.0), (6.0, 120.0, 60.0)]):
        for i in range(5):
            noise = rng.standard_normal(3) * [0.5, 8.0, 2.0]
            rows.append([f"Region {g}-{i}", *(np.array(base) + noise)])
    frame = pd.DataFrame(rows, columns=["Region", "Murder", "Assault", "UrbanPop"])
    frame.loc[3, "Assault"] = np.nan
    return frame


@pytest.fixture
def regions_csv(tmp_path, regions_frame):
    """The regions table written to CSV with the label column first."""
    path = tmp_path / "regions.csv"
    regions_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def four_point_dataset(four_points):
    return Dataset(("a", "b", "c", "d"), ("x", "y"), four_points)
