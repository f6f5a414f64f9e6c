"""
Test suite for kmeans_study.

This package contains all tests organized by component:
- test_algorithms/: Tests for partitioning, scoring, sweeps and pre-processing
- test_experiments/: Tests for result flattening helpers
- test_utils/: Tests for data loading and logging
"""
