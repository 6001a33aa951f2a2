from __future__ import annotations

"""
Cyclic (Gauss-Seidel) coordinate descent for least squares with an optional
ridge penalty: minimize ||y - X beta||^2 + lam * ||beta||^2.

Each coordinate has the closed-form update beta_j = X_j^T r_j / (||X_j||^2 + lam),
where r_j is the partial residual. This relies on the penalty being separable
across coordinates, so it does not apply to e.g. the lasso without a
soft-threshold step.
"""

import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .constants import CD_MAX_ITER, CD_TOL
from .data_prep import align_features, as_design_matrix, as_response, readonly_copy
from .exceptions import ConvergenceWarning, SingularMatrixError


@dataclass(frozen=True, eq=False)
class CoordinateDescentFit:
    success: bool
    iterations: int
    coefficients: np.ndarray
    feature_names: tuple[str, ...]
    lam: float
    max_change: float

    def coef_series(self) -> pd.Series:
        return pd.Series(self.coefficients, index=list(self.feature_names))


def fit_coordinate_descent(
    X,
    y,
    lam: float = 0.0,
    beta0=None,
    tol: float = CD_TOL,
    max_iter: int = CD_MAX_ITER,
    verbose: bool = False,
) -> CoordinateDescentFit:
    """
    Fit beta by full sweeps over the coordinates; iterations counts sweeps.

    A sweep is accepted as converged when the largest coefficient change is
    below tol * max(1, max|beta|), i.e. absolute for small coefficients and
    relative for large ones. After max_iter sweeps the latest beta is returned
    with success=False and a ConvergenceWarning.
    """
    if lam < 0:
        raise ValueError(f"lam must be non-negative, got {lam}")
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter}")

    frame = as_design_matrix(X)
    X_arr = frame.to_numpy()
    n_samples, n_features = X_arr.shape
    y_arr = as_response(y, n_samples)

    if beta0 is None:
        beta = np.zeros(n_features)
    else:
        beta = np.array(beta0, dtype=float).reshape(-1)
        if beta.shape != (n_features,):
            raise ValueError(f"beta0 must have {n_features} entries, got {beta.size}")

    denom = np.einsum("ij,ij->j", X_arr, X_arr) + lam
    zero_cols = [frame.columns[j] for j in np.flatnonzero(denom == 0)]
    if zero_cols:
        raise SingularMatrixError(
            f"Columns {zero_cols} are identically zero and lam == 0; no unique minimizer"
        )

    # Full residual y - X beta, kept current after every coordinate update
    resid = y_arr - X_arr @ beta
    success = False
    max_change = float("inf")
    sweep = 0
    for sweep in range(1, max_iter + 1):
        max_change = 0.0
        for j in range(n_features):
            x_j = X_arr[:, j]
            partial = resid + x_j * beta[j]
            new_beta_j = (x_j @ partial) / denom[j]
            resid = partial - x_j * new_beta_j
            max_change = max(max_change, abs(new_beta_j - beta[j]))
            beta[j] = new_beta_j

        scale = max(1.0, float(np.max(np.abs(beta))))
        if verbose:
            print(f"[CD] sweep={sweep}, max_change={max_change:.3e}")
        if max_change < tol * scale:
            success = True
            break

    if not success:
        warnings.warn(
            f"Coordinate descent did not converge in {max_iter} sweeps "
            f"(last max change {max_change:.3e})",
            ConvergenceWarning,
            stacklevel=2,
        )

    return CoordinateDescentFit(
        success=success,
        iterations=sweep,
        coefficients=readonly_copy(beta),
        feature_names=tuple(frame.columns),
        lam=float(lam),
        max_change=float(max_change),
    )


def predict_coordinate_descent(model: CoordinateDescentFit, X_new) -> np.ndarray:
    return align_features(X_new, model.feature_names) @ model.coefficients
