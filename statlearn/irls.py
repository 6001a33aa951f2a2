from __future__ import annotations

"""
Logistic regression fitted by Iteratively Reweighted Least Squares (IRLS).

Each iteration linearizes the log-likelihood around the current beta and
solves a weighted least squares problem:

    p = sigmoid(X beta),  w = p (1 - p),  z = X beta + (y - p) / w
    beta_new = argmin_b  sum_i w_i (z_i - x_i^T b)^2

which is exactly one Newton step. The loop stops once the score
X^T (y - p) evaluated at beta_new has norm below tol. No intercept column is
added; use data_prep.add_intercept when one is wanted.
"""

import warnings
from dataclasses import dataclass
from typing import Hashable

import numpy as np
import pandas as pd

from .constants import IRLS_MAX_ITER, IRLS_TOL, PROB_CLIP
from .data_prep import align_features, as_design_matrix, as_response, readonly_copy
from .exceptions import ConvergenceWarning, SingularMatrixError


@dataclass(frozen=True, eq=False)
class IRLSFit:
    """Fitted logistic model. factor_levels[1] is the class coded as 1."""

    coefficients: np.ndarray
    feature_names: tuple[str, ...]
    factor_levels: tuple[Hashable, Hashable]
    iterations: int
    converged: bool
    final_gradient_norm: float

    def coef_series(self) -> pd.Series:
        return pd.Series(self.coefficients, index=list(self.feature_names))


def _sigmoid(z: np.ndarray) -> np.ndarray:
    z = np.clip(z, -500, 500)
    return 1.0 / (1.0 + np.exp(-z))


def _probabilities(eta: np.ndarray) -> np.ndarray:
    return np.clip(_sigmoid(eta), PROB_CLIP, 1.0 - PROB_CLIP)


def _factor_levels(y_raw: np.ndarray, y) -> tuple[Hashable, Hashable]:
    """Two observed levels; categorical order wins, otherwise sorted values."""
    observed = list(pd.unique(y_raw))
    if isinstance(y, pd.Series) and isinstance(y.dtype, pd.CategoricalDtype):
        levels = [c for c in y.cat.categories if c in observed]
    else:
        try:
            levels = sorted(observed)
        except TypeError:
            levels = observed
    if len(levels) != 2:
        raise ValueError(
            f"Logistic regression needs exactly two response levels, got {len(levels)}: {levels}"
        )
    return levels[0], levels[1]


def _weighted_least_squares(X: np.ndarray, z: np.ndarray, w: np.ndarray) -> np.ndarray:
    sqrt_w = np.sqrt(w)
    Xw = X * sqrt_w[:, None]
    try:
        beta, _, rank, _ = np.linalg.lstsq(Xw, z * sqrt_w, rcond=None)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError(f"Weighted least squares failed: {exc}") from exc
    if rank < X.shape[1]:
        raise SingularMatrixError(
            f"Weighted design matrix is rank-deficient (rank {rank} < {X.shape[1]})"
        )
    return beta


def fit_irls(
    X,
    y,
    beta0=None,
    tol: float = IRLS_TOL,
    max_iter: int = IRLS_MAX_ITER,
    verbose: bool = False,
) -> IRLSFit:
    """
    Fit a binary logistic regression with IRLS.

    Running out of iterations is not an error: the latest estimate is returned
    with converged=False and a ConvergenceWarning is emitted.
    """
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter}")

    frame = as_design_matrix(X)
    X_arr = frame.to_numpy()
    n_samples, n_features = X_arr.shape
    y_raw = as_response(y, n_samples, numeric=False)
    levels = _factor_levels(y_raw, y)
    y_arr = (y_raw == levels[1]).astype(float)

    if beta0 is None:
        beta = np.zeros(n_features)
    else:
        beta = np.array(beta0, dtype=float).reshape(-1)
        if beta.shape != (n_features,):
            raise ValueError(f"beta0 must have {n_features} entries, got {beta.size}")

    eta = X_arr @ beta
    converged = False
    grad_norm = float("inf")
    iteration = 0
    for iteration in range(1, max_iter + 1):
        p = _probabilities(eta)
        w = p * (1.0 - p)
        z = eta + (y_arr - p) / w
        beta = _weighted_least_squares(X_arr, z, w)

        eta = X_arr @ beta
        # score uses the unclipped probabilities; the clip only protects w and z
        grad = X_arr.T @ (y_arr - _sigmoid(eta))
        grad_norm = float(np.linalg.norm(grad))

        if verbose:
            print(f"[IRLS] iter={iteration}, grad_norm={grad_norm:.3e}")
        if grad_norm < tol:
            converged = True
            break

    if not converged:
        warnings.warn(
            f"IRLS did not converge in {max_iter} iterations "
            f"(gradient norm {grad_norm:.3e} >= tol {tol:.1e})",
            ConvergenceWarning,
            stacklevel=2,
        )

    return IRLSFit(
        coefficients=readonly_copy(beta),
        feature_names=tuple(frame.columns),
        factor_levels=levels,
        iterations=iteration,
        converged=converged,
        final_gradient_norm=grad_norm,
    )


def decision_function(model: IRLSFit, X_new) -> np.ndarray:
    """Log-odds x_i^T beta for every row of X_new."""
    return align_features(X_new, model.feature_names) @ model.coefficients


def predict_irls(model: IRLSFit, X_new) -> np.ndarray:
    """Hard labels: factor_levels[1] where the log-odds are >= 0, else factor_levels[0]."""
    eta = decision_function(model, X_new)
    levels = np.empty(2, dtype=object)
    levels[0], levels[1] = model.factor_levels
    return levels[(eta >= 0).astype(int)]
