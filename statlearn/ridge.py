from __future__ import annotations

"""
Closed-form ridge regression on a column-centered design matrix.
The intercept is left out of the penalty and recovered after the solve.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .data_prep import align_features, as_design_matrix, as_response, readonly_copy
from .exceptions import SingularMatrixError


@dataclass(frozen=True, eq=False)
class RidgeFit:
    """Fitted ridge model; coefficients are read-only and ordered like feature_names."""

    intercept: float
    coefficients: np.ndarray
    feature_names: tuple[str, ...]
    lam: float
    n_samples: int

    def coef_series(self) -> pd.Series:
        return pd.Series(self.coefficients, index=list(self.feature_names))


def fit_ridge(X, y, lam: float = 0.0) -> RidgeFit:
    """
    Solve (Xc^T Xc + n * lam * I) beta = Xc^T y, with Xc the centered design.

    lam is scaled by n so one value gives comparable shrinkage across sample
    sizes. Raises SingularMatrixError when the system has no unique solution,
    which can only happen for lam == 0 and a rank-deficient design.
    """
    if lam < 0:
        raise ValueError(f"lam must be non-negative, got {lam}")

    frame = as_design_matrix(X)
    X_arr = frame.to_numpy()
    n_samples, n_features = X_arr.shape
    y_arr = as_response(y, n_samples)

    x_mean = X_arr.mean(axis=0)
    Xc = X_arr - x_mean

    if lam == 0 and np.linalg.matrix_rank(Xc) < n_features:
        raise SingularMatrixError(
            "X^T X is singular: centered design is rank-deficient and lam == 0"
        )

    A = Xc.T @ Xc + n_samples * lam * np.eye(n_features)
    b = Xc.T @ y_arr
    try:
        beta = np.linalg.solve(A, b)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError(f"Ridge normal equations are singular: {exc}") from exc

    # Fitted on centered X, so shift the intercept back by the column means
    intercept = float(y_arr.mean() - beta @ x_mean)

    return RidgeFit(
        intercept=intercept,
        coefficients=readonly_copy(beta),
        feature_names=tuple(frame.columns),
        lam=float(lam),
        n_samples=n_samples,
    )


def predict_ridge(model: RidgeFit, X_new) -> np.ndarray:
    """X_new @ coefficients + intercept, with columns matched by name."""
    X_arr = align_features(X_new, model.feature_names)
    return X_arr @ model.coefficients + model.intercept
