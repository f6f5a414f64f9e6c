"""
Tests for k-means partitioning.
"""

import dataclasses

import numpy as np
import pytest

from kmeans_study.algorithms.clustering import (
    RunResult,
    _assign,
    _sq_distances,
    _update_centroids,
    partition,
    run_restart,
    select_best,
    total_within_ss,
)
from kmeans_study.algorithms.scoring import between_ss
from kmeans_study.errors import InvalidArgumentError


def _sorted_rows(a):
    return a[np.lexsort(a.T[::-1])]


# ------------------------------------------------------------------
# Concrete scenarios
# ------------------------------------------------------------------


def test_partition_four_points(four_points):
    """Two tight pairs split into the two obvious clusters."""
    result = partition(four_points, 2, restarts=5, max_iterations=100, rng_seed=0)

    groups = sorted(tuple(idx.tolist()) for idx in result.clusters())
    assert groups == [(0, 1), (2, 3)]
    np.testing.assert_allclose(
        _sorted_rows(np.array(result.centroids)), [[0.0, 0.5], [10.0, 10.5]]
    )
    # Each pair contributes 0.25 + 0.25
    np.testing.assert_allclose(result.within_ss, [0.5, 0.5])
    assert result.total_within_ss == pytest.approx(1.0)
    assert result.converged


def test_partition_accepts_dataset(four_point_dataset, four_points):
    """A Dataset and its bare matrix give the same partition."""
    a = partition(four_point_dataset, 2, restarts=3, rng_seed=11)
    b = partition(four_points, 2, restarts=3, rng_seed=11)
    np.testing.assert_array_equal(a.labels, b.labels)


def test_partition_k_one_is_grand_mean(blobs):
    """k=1 puts everything in one cluster centred on the grand mean."""
    X, _ = blobs
    result = partition(X, 1, restarts=2, rng_seed=0)

    assert np.all(result.labels == 0)
    np.testing.assert_allclose(result.centroids[0], X.mean(axis=0))
    assert result.total_within_ss == pytest.approx(result.total_ss)
    assert result.between_ss == pytest.approx(0.0, abs=1e-9)


def test_partition_k_equals_n_singletons(four_points):
    """k=n gives singleton clusters, zero dispersion, one iteration."""
    result = partition(four_points, 4, restarts=3, rng_seed=5)

    assert sorted(result.sizes.tolist()) == [1, 1, 1, 1]
    assert result.total_within_ss == pytest.approx(0.0)
    assert result.n_iter == 1
    assert result.converged


def test_partition_recovers_blobs(blobs):
    """Well-separated blobs are recovered exactly (up to relabelling)."""
    X, truth = blobs
    result = partition(X, 3, restarts=10, rng_seed=1)
    for c in range(3):
        members = truth[result.labels == c]
        assert len(np.unique(members)) == 1


# ------------------------------------------------------------------
# Properties
# ------------------------------------------------------------------


@pytest.mark.parametrize("k", [1, 2, 3, 5, 8])
def test_partition_k_nonempty_clusters(random_data, k):
    """Exactly k populated clusters whose sizes sum to n."""
    result = partition(random_data, k, restarts=4, rng_seed=3)

    assert result.k == k
    assert result.labels.shape == (random_data.shape[0],)
    assert np.all(result.sizes > 0)
    assert result.sizes.sum() == random_data.shape[0]


def test_within_ss_non_increasing(random_data):
    """Total within SS never goes up from one iteration to the next."""
    for restart in range(5):
        result = run_restart(
            random_data, 6, max_iterations=100, rng_seed=9, restart_index=restart
        )
        history = np.array(result.history)
        assert len(history) == result.n_iter
        assert np.all(np.diff(history) <= 1e-9)


def test_decomposition_identity(random_data):
    """within SS + between SS == total SS."""
    result = partition(random_data, 4, restarts=3, rng_seed=2)
    between = between_ss(random_data, result.labels)

    assert result.total_within_ss + between == pytest.approx(result.total_ss, rel=1e-9)
    assert result.between_ss == pytest.approx(between, rel=1e-9)


def test_partition_deterministic(random_data):
    """Identical inputs give bit-identical results."""
    a = partition(random_data, 4, restarts=6, max_iterations=50, rng_seed=123)
    b = partition(random_data, 4, restarts=6, max_iterations=50, rng_seed=123)

    np.testing.assert_array_equal(a.labels, b.labels)
    np.testing.assert_array_equal(a.centroids, b.centroids)
    assert a.total_within_ss == b.total_within_ss
    assert a.restart_objectives == b.restart_objectives
    assert a.history == b.history
    assert a.n_iter == b.n_iter


def test_partition_workers_do_not_change_result(random_data):
    """Running restarts on threads picks the same restart as running serially."""
    serial = partition(random_data, 5, restarts=8, rng_seed=4)
    threaded = partition(random_data, 5, restarts=8, rng_seed=4, n_workers=4)

    assert threaded.restart_index == serial.restart_index
    np.testing.assert_array_equal(threaded.labels, serial.labels)
    np.testing.assert_array_equal(threaded.centroids, serial.centroids)
    assert threaded.restart_objectives == serial.restart_objectives


def test_best_restart_is_minimum(random_data):
    """The returned run has the smallest objective of all restarts."""
    result = partition(random_data, 5, restarts=10, rng_seed=8)

    assert len(result.restart_objectives) == 10
    assert len(result.restart_labels) == 10
    assert result.total_within_ss == min(result.restart_objectives)
    first_min = result.restart_objectives.index(min(result.restart_objectives))
    assert result.restart_index == first_min


def test_select_best_ties_go_to_lowest_restart(four_points):
    """On equal objectives the earliest restart wins, regardless of order."""
    runs = [
        run_restart(four_points, 2, max_iterations=10, rng_seed=0, restart_index=r)
        for r in range(4)
    ]
    assert len({r.total_within_ss for r in runs}) == 1
    assert select_best(list(reversed(runs))).restart_index == 0


def test_restart_seed_independent_of_restart_count(random_data):
    """Restart r draws the same numbers however many restarts run."""
    one = run_restart(random_data, 3, max_iterations=100, rng_seed=21, restart_index=2)
    many = partition(random_data, 3, restarts=5, rng_seed=21)

    assert many.restart_objectives[2] == one.total_within_ss


def test_non_convergence_is_reported_not_raised(random_data, caplog):
    """Hitting max_iterations returns a flagged result and logs a warning."""
    with caplog.at_level("WARNING", logger="kmeans_study"):
        result = partition(random_data, 5, restarts=1, max_iterations=1, rng_seed=0)

    assert result.n_iter == 1
    assert result.converged is False
    assert "did not converge" in caplog.text


def test_total_within_ss_surfaces_run_value(four_points):
    result = partition(four_points, 2, restarts=2, rng_seed=0)
    assert total_within_ss(result) == pytest.approx(float(np.sum(result.within_ss)))


def test_run_result_is_immutable(four_points):
    result = partition(four_points, 2, restarts=2, rng_seed=0)

    assert isinstance(result, RunResult)
    assert not result.labels.flags.writeable
    assert not result.centroids.flags.writeable
    with pytest.raises(ValueError):
        result.labels[0] = 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.n_iter = 99


# ------------------------------------------------------------------
# Assignment / update steps
# ------------------------------------------------------------------


def test_assign_ties_go_to_lowest_centroid():
    sq = np.array([[4.0, 4.0, 9.0], [9.0, 1.0, 1.0]])
    np.testing.assert_array_equal(_assign(sq), [0, 1])


def test_equidistant_point_goes_to_lower_centroid():
    """A point exactly between two centroids joins the lower-indexed one."""
    X = np.array([[0.0], [1.0], [2.0]])
    centroids = np.array([[0.0], [2.0]])

    labels = _assign(_sq_distances(X, centroids))

    np.testing.assert_array_equal(labels, [0, 0, 1])


def test_update_reseeds_empty_cluster_to_farthest_point():
    X = np.array([[0.0], [1.0], [5.0]])
    labels = np.array([0, 0, 0])
    centroids = np.array([[0.0], [100.0]])
    sq = ((X[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)

    new, reseeded = _update_centroids(X, labels, centroids, sq)

    assert reseeded == [1]
    np.testing.assert_allclose(new[0], [2.0])
    np.testing.assert_allclose(new[1], [5.0])


def test_update_reseeds_several_empty_clusters_with_distinct_points():
    X = np.array([[0.0], [1.0], [5.0], [9.0]])
    labels = np.array([0, 0, 0, 0])
    centroids = np.array([[0.0], [50.0], [60.0]])
    sq = ((X[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)

    new, reseeded = _update_centroids(X, labels, centroids, sq)

    assert reseeded == [1, 2]
    np.testing.assert_allclose(new[1], [9.0])
    np.testing.assert_allclose(new[2], [5.0])


def test_update_keeps_empty_centroid_when_rows_sit_on_centroids():
    """Duplicate rows leave nothing to re-seed with; the empty centroid stays put."""
    X = np.array([[0.0], [0.0], [1.0]])
    centroids = np.array([[1.0], [0.0], [0.0]])
    sq = ((X[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
    labels = _assign(sq)

    new, reseeded = _update_centroids(X, labels, centroids, sq)

    np.testing.assert_array_equal(labels, [1, 1, 0])
    assert reseeded == []
    np.testing.assert_allclose(new, centroids)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_partition_duplicate_rows_converges(seed, caplog):
    """Coinciding centroids from duplicate rows still count as converged."""
    X = np.array([[0.0], [0.0], [1.0]])
    with caplog.at_level("WARNING", logger="kmeans_study"):
        result = partition(X, 3, restarts=1, max_iterations=50, rng_seed=seed)

    assert result.converged
    assert result.n_iter == 1
    assert result.total_within_ss == pytest.approx(0.0)
    assert result.sizes.sum() == 3
    assert "re-seeded" not in caplog.text
    assert "did not converge" not in caplog.text


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


def test_partition_validation(four_points):
    """Bad arguments raise InvalidArgumentError (a ValueError)."""
    with pytest.raises(InvalidArgumentError, match="k must be >= 1"):
        partition(four_points, 0)

    with pytest.raises(ValueError, match="cannot exceed"):
        partition(four_points, 5)

    with pytest.raises(InvalidArgumentError, match="restarts"):
        partition(four_points, 2, restarts=0)

    with pytest.raises(InvalidArgumentError, match="max_iterations"):
        partition(four_points, 2, max_iterations=0)

    with pytest.raises(InvalidArgumentError, match="rng_seed"):
        partition(four_points, 2, rng_seed=-1)

    with pytest.raises(InvalidArgumentError, match="must be an integer"):
        partition(four_points, 2.5)

    with pytest.raises(InvalidArgumentError, match="n_workers"):
        partition(four_points, 2, n_workers=0)


def test_partition_rejects_bad_datasets():
    with pytest.raises(InvalidArgumentError, match="at least one observation"):
        partition(np.empty((0, 2)), 1)

    with pytest.raises(InvalidArgumentError, match="2-D"):
        partition(np.arange(5.0), 1)

    with pytest.raises(InvalidArgumentError, match="non-finite"):
        partition(np.array([[0.0, np.nan], [1.0, 1.0]]), 1)
