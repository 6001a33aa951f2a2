import numpy as np
import pandas as pd
import pytest
from sklearn.metrics import adjusted_rand_score

import statlearn.kmeans as kmeans_module
from statlearn import (
    ConvergenceWarning,
    EmptyClusterError,
    SchemaMismatchError,
    fit_kmeans,
    make_blobs_data,
    predict_kmeans,
)


def test_single_cluster_is_global_mean():
    X, _ = make_blobs_data(n_samples=120, random_state=0)
    model = fit_kmeans(X, k=1, n_restarts=3, random_state=0)

    np.testing.assert_array_equal(model.centroids[0], X.to_numpy().mean(axis=0))
    np.testing.assert_array_equal(model.assignment, np.zeros(len(X)))
    assert model.iterations == 0
    assert model.cost == pytest.approx(float(np.sum((X.to_numpy() - X.to_numpy().mean(axis=0)) ** 2)))


@pytest.mark.parametrize("k", [2, 3, 5])
def test_every_point_in_exactly_one_cluster(k):
    X, _ = make_blobs_data(n_samples=200, centers=3, random_state=1)
    model = fit_kmeans(X, k=k, n_restarts=5, random_state=1, on_empty="skip")

    assert model.assignment.shape == (len(X),)
    assert set(np.unique(model.assignment)) == set(range(k))
    assert model.centroids.shape == (k, 2)


def test_cost_history_is_non_increasing():
    X, _ = make_blobs_data(n_samples=400, centers=6, cluster_std=1.5, random_state=2)
    model = fit_kmeans(X, k=6, n_restarts=4, random_state=2, on_empty="skip")

    history = np.asarray(model.cost_history)
    assert model.converged
    assert np.all(np.diff(history) <= 1e-12 * history[0])
    assert history[-1] == pytest.approx(model.cost)


def test_cost_and_centroids_are_consistent():
    X, _ = make_blobs_data(n_samples=150, random_state=3)
    model = fit_kmeans(X, k=3, n_restarts=5, random_state=3)
    X_arr = X.to_numpy()

    for j in range(3):
        np.testing.assert_allclose(model.centroids[j], X_arr[model.assignment == j].mean(axis=0))
    expected = np.sum((X_arr - model.centroids[model.assignment]) ** 2)
    assert model.cost == pytest.approx(expected)
    np.testing.assert_array_equal(predict_kmeans(model, X), model.assignment)


def test_recovers_well_separated_blobs():
    centers = np.array([[-6.0, 0.0], [6.0, 0.0], [0.0, 8.0]])
    X, blobs = make_blobs_data(n_samples=300, centers=centers, cluster_std=0.5, random_state=4)
    model = fit_kmeans(X, k=3, n_restarts=10, random_state=4, on_empty="skip")
    assert adjusted_rand_score(blobs, model.assignment) == pytest.approx(1.0)


def test_same_seed_same_result():
    X, _ = make_blobs_data(n_samples=200, centers=4, cluster_std=1.2, random_state=5)
    first = fit_kmeans(X, k=4, n_restarts=3, random_state=9, on_empty="skip")
    second = fit_kmeans(X, k=4, n_restarts=3, random_state=9, on_empty="skip")
    np.testing.assert_array_equal(first.assignment, second.assignment)
    assert first.cost == second.cost


def _scripted_restarts(monkeypatch, outcomes):
    calls = iter(outcomes)

    def fake_lloyd(X, k, rng, max_iter):
        outcome = next(calls)
        if isinstance(outcome, Exception):
            raise outcome
        tag, cost = outcome
        assignment = np.arange(X.shape[0]) % k
        centroids = np.full((k, X.shape[1]), float(tag))
        return assignment, centroids, cost, 1, True, [cost]

    monkeypatch.setattr(kmeans_module, "_lloyd", fake_lloyd)


def test_equal_cost_keeps_earlier_restart(monkeypatch):
    _scripted_restarts(monkeypatch, [(1, 5.0), (2, 5.0), (3, 3.0), (4, 3.0), (5, 4.0)])
    X = np.arange(12, dtype=float).reshape(6, 2)
    model = fit_kmeans(X, k=2, n_restarts=5)
    assert model.cost == 3.0
    assert np.all(model.centroids == 3.0)


def test_skip_policy_counts_failed_restarts(monkeypatch):
    _scripted_restarts(monkeypatch, [EmptyClusterError("empty"), (1, 2.0), EmptyClusterError("empty")])
    X = np.arange(12, dtype=float).reshape(6, 2)
    model = fit_kmeans(X, k=2, n_restarts=3, on_empty="skip")
    assert model.n_failed_restarts == 2
    assert model.cost == 2.0


def test_empty_cluster_policies():
    # Any three distinct rows include two copies of the origin, so one cluster ends up empty
    X = pd.DataFrame({"u": [0.0] * 5 + [1.0], "v": [0.0] * 5 + [1.0]})
    with pytest.raises(EmptyClusterError):
        fit_kmeans(X, k=3, n_restarts=4, random_state=0)
    with pytest.raises(EmptyClusterError):
        fit_kmeans(X, k=3, n_restarts=4, random_state=0, on_empty="skip")


def test_invalid_arguments():
    X, _ = make_blobs_data(n_samples=20, random_state=0)
    with pytest.raises(ValueError):
        fit_kmeans(X, k=0)
    with pytest.raises(ValueError):
        fit_kmeans(X, k=21)
    with pytest.raises(ValueError):
        fit_kmeans(X, k=2, n_restarts=0)
    with pytest.raises(ValueError):
        fit_kmeans(X, k=2, on_empty="retry")


def test_predict_schema_and_immutability():
    X, _ = make_blobs_data(n_samples=90, random_state=6)
    model = fit_kmeans(X, k=3, random_state=6)
    np.testing.assert_array_equal(predict_kmeans(model, pd.DataFrame(model.centroids, columns=["x0", "x1"])), [0, 1, 2])
    with pytest.raises(SchemaMismatchError):
        predict_kmeans(model, X.rename(columns={"x0": "lat"}))
    with pytest.raises(ValueError):
        model.assignment[0] = 1


class _FixedChoice:
    def __init__(self, idx):
        self.idx = np.asarray(idx)

    def choice(self, n, size, replace):
        return self.idx[:size]


def test_unsettled_restart_history_ends_at_returned_cost():
    X = np.array([[0.0], [1.0], [2.0], [10.0], [11.0], [12.0]])
    # seeds 0 and 1: the first update puts 1 and 2 with the far group, the next assign pulls them back
    assignment, centroids, cost, iterations, converged, history = kmeans_module._lloyd(
        X, 2, _FixedChoice([0, 1]), max_iter=1
    )

    assert not converged
    assert iterations == 1
    np.testing.assert_array_equal(assignment, [0, 0, 0, 1, 1, 1])
    np.testing.assert_allclose(centroids, [[1.0], [11.0]])
    assert cost == pytest.approx(4.0)
    assert history == pytest.approx([110.8, 4.0])
    assert history[-1] == cost


def test_max_iter_ceiling_warns_and_history_matches(monkeypatch):
    X = np.array([[0.0], [1.0], [2.0], [10.0], [11.0], [12.0]])
    monkeypatch.setattr(kmeans_module.np.random, "default_rng", lambda seed=None: _FixedChoice([0, 1]))
    with pytest.warns(ConvergenceWarning):
        model = fit_kmeans(X, k=2, n_restarts=1, max_iter=1)
    assert not model.converged
    assert model.cost_history[-1] == model.cost
