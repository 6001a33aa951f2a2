from __future__ import annotations

"""
Lloyd's k-means with several random restarts.

Each restart samples k distinct rows as initial centroids, then alternates
ASSIGN (nearest centroid, squared Euclidean distance) and UPDATE (cluster
means) until the assignment stops changing. The cheapest restart wins; a
later restart only replaces the current best when strictly cheaper.
"""

import warnings
from dataclasses import dataclass

import numpy as np

from .constants import EMPTY_CLUSTER_POLICIES, KMEANS_MAX_ITER, KMEANS_N_RESTARTS
from .data_prep import align_features, as_design_matrix, readonly_copy
from .exceptions import ConvergenceWarning, EmptyClusterError


@dataclass(frozen=True, eq=False)
class KMeansFit:
    """
    Best restart found by fit_kmeans.

    assignment holds cluster indices 0..k-1 for every input row; cost_history
    is the cost after each UPDATE step of the winning restart.
    """

    assignment: np.ndarray
    centroids: np.ndarray
    cost: float
    feature_names: tuple[str, ...]
    iterations: int
    converged: bool
    cost_history: tuple[float, ...]
    n_failed_restarts: int = 0


def _squared_distances(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    diff = X[:, None, :] - centroids[None, :, :]
    return np.einsum("nkd,nkd->nk", diff, diff)


def _assign(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    # argmin picks the lowest index on ties
    return np.argmin(_squared_distances(X, centroids), axis=1)


def _cost(X: np.ndarray, centroids: np.ndarray, assignment: np.ndarray) -> float:
    return float(np.sum((X - centroids[assignment]) ** 2))


def _update(X: np.ndarray, assignment: np.ndarray, k: int) -> np.ndarray:
    counts = np.bincount(assignment, minlength=k)
    empty = np.flatnonzero(counts == 0)
    if empty.size:
        raise EmptyClusterError(
            f"Clusters {empty.tolist()} received no points ({k - empty.size} of {k} non-empty)"
        )
    sums = np.zeros((k, X.shape[1]))
    np.add.at(sums, assignment, X)
    return sums / counts[:, None]


def _lloyd(X: np.ndarray, k: int, rng: np.random.Generator, max_iter: int):
    """One restart from a random init to a fixed point (or max_iter rounds)."""
    init_idx = rng.choice(X.shape[0], size=k, replace=False)
    centroids = X[init_idx].copy()
    assignment = _assign(X, centroids)
    history = []
    converged = False
    iteration = 0
    for iteration in range(1, max_iter + 1):
        centroids = _update(X, assignment, k)
        history.append(_cost(X, centroids, assignment))
        new_assignment = _assign(X, centroids)
        if np.array_equal(new_assignment, assignment):
            converged = True
            break
        assignment = new_assignment

    if not converged:
        # last ASSIGN moved points; bring centroids in line with it
        centroids = _update(X, assignment, k)
        history.append(_cost(X, centroids, assignment))
    return assignment, centroids, history[-1], iteration, converged, history


def fit_kmeans(
    X,
    k: int,
    n_restarts: int = KMEANS_N_RESTARTS,
    max_iter: int = KMEANS_MAX_ITER,
    random_state: int | np.random.Generator | None = None,
    on_empty: str = "raise",
    verbose: bool = False,
) -> KMeansFit:
    """
    Cluster the rows of X into k groups.

    on_empty="raise" stops at the first restart that produces an empty cluster
    (EmptyClusterError); on_empty="skip" drops that restart and only raises if
    every restart fails. k == 1 short-circuits to the global mean.

    Cluster indices in the returned assignment are zero-based (0..k-1), so
    cluster j owns row j of centroids.
    """
    frame = as_design_matrix(X)
    X_arr = frame.to_numpy()
    n_samples = X_arr.shape[0]
    feature_names = tuple(frame.columns)

    if not 1 <= k <= n_samples:
        raise ValueError(f"k must be between 1 and n_samples={n_samples}, got {k}")
    if n_restarts < 1:
        raise ValueError(f"n_restarts must be >= 1, got {n_restarts}")
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter}")
    if on_empty not in EMPTY_CLUSTER_POLICIES:
        raise ValueError(f"on_empty must be one of {EMPTY_CLUSTER_POLICIES}, got {on_empty!r}")

    if k == 1:
        assignment = np.zeros(n_samples, dtype=int)
        centroids = X_arr.mean(axis=0, keepdims=True)
        cost = _cost(X_arr, centroids, assignment)
        return KMeansFit(
            assignment=readonly_copy(assignment, dtype=int),
            centroids=readonly_copy(centroids),
            cost=cost,
            feature_names=feature_names,
            iterations=0,
            converged=True,
            cost_history=(cost,),
        )

    rng = np.random.default_rng(random_state)
    best = None
    failed = 0
    for restart in range(1, n_restarts + 1):
        try:
            result = _lloyd(X_arr, k, rng, max_iter)
        except EmptyClusterError:
            if on_empty == "raise":
                raise
            failed += 1
            if verbose:
                print(f"[KMeans] restart={restart}, empty cluster, skipped")
            continue

        cost = result[2]
        if verbose:
            print(f"[KMeans] restart={restart}, iters={result[3]}, cost={cost:.4f}")
        if best is None or cost < best[2]:
            best = result

    if best is None:
        raise EmptyClusterError(f"All {n_restarts} restarts produced an empty cluster")

    assignment, centroids, cost, iterations, converged, history = best
    if not converged:
        warnings.warn(
            f"k-means best restart hit max_iter={max_iter} before assignments settled",
            ConvergenceWarning,
            stacklevel=2,
        )

    return KMeansFit(
        assignment=readonly_copy(assignment, dtype=int),
        centroids=readonly_copy(centroids),
        cost=cost,
        feature_names=feature_names,
        iterations=iterations,
        converged=converged,
        cost_history=tuple(history),
        n_failed_restarts=failed,
    )


def predict_kmeans(model: KMeansFit, X_new) -> np.ndarray:
    """Index of the nearest fitted centroid for each row of X_new."""
    return _assign(align_features(X_new, model.feature_names), model.centroids)
