from __future__ import annotations

"""
Design-matrix handling shared by every solver, plus the synthetic datasets and
splits used by main.py and the tests.
"""

from typing import Hashable, Sequence

import numpy as np
import pandas as pd
from sklearn.datasets import make_blobs
from sklearn.model_selection import train_test_split

from .constants import DEFAULT_RANDOM_STATE, DEFAULT_TEST_SIZE
from .exceptions import SchemaMismatchError


def _default_names(n_features: int) -> list[str]:
    return [f"x{j}" for j in range(n_features)]


def as_design_matrix(X) -> pd.DataFrame:
    """
    Coerce X into a float DataFrame with string column names.

    Arrays get positional names x0..x{p-1}. The input is never modified.
    """
    if isinstance(X, pd.DataFrame):
        frame = X.copy()
        frame.columns = [str(c) for c in frame.columns]
    else:
        arr = np.asarray(X)
        if arr.ndim != 2:
            raise ValueError(f"Design matrix must be 2-D, got shape {arr.shape}")
        frame = pd.DataFrame(arr, columns=_default_names(arr.shape[1]))

    if frame.columns.duplicated().any():
        dupes = list(frame.columns[frame.columns.duplicated()])
        raise ValueError(f"Duplicate feature names: {dupes}")
    if frame.shape[1] == 0:
        raise ValueError("Design matrix has no columns")

    try:
        frame = frame.astype(float)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Design matrix must be numeric: {exc}") from exc

    if not np.isfinite(frame.to_numpy()).all():
        raise ValueError("Design matrix contains NaN or infinite values")
    return frame


def as_response(y, n_samples: int, numeric: bool = True) -> np.ndarray:
    """1-D response of length n_samples; float unless numeric=False."""
    arr = y.to_numpy() if isinstance(y, (pd.Series, pd.Index)) else np.asarray(y)
    arr = arr.reshape(-1) if arr.ndim == 2 and 1 in arr.shape else arr
    if arr.ndim != 1:
        raise ValueError(f"Response must be 1-D, got shape {arr.shape}")
    if len(arr) != n_samples:
        raise ValueError(f"Response has {len(arr)} entries, design matrix has {n_samples} rows")
    if numeric:
        arr = arr.astype(float)
        if not np.isfinite(arr).all():
            raise ValueError("Response contains NaN or infinite values")
    return arr


def align_features(X_new, feature_names: Sequence[str]) -> np.ndarray:
    """
    Return X_new as a float array with columns in fitted order.

    Columns are matched by name; any missing or unexpected column raises
    SchemaMismatchError instead of being reinterpreted positionally.
    """
    frame = as_design_matrix(X_new)
    expected = list(feature_names)
    missing = [c for c in expected if c not in frame.columns]
    unexpected = [c for c in frame.columns if c not in expected]
    if missing or unexpected:
        raise SchemaMismatchError(
            f"Feature mismatch: missing={missing}, unexpected={unexpected}"
        )
    return frame[expected].to_numpy(dtype=float)


def add_intercept(X, name: str = "intercept") -> pd.DataFrame:
    """Prepend a column of ones (IRLS and coordinate descent never add one)."""
    frame = as_design_matrix(X)
    if name in frame.columns:
        raise ValueError(f"Column {name!r} already present")
    frame.insert(0, name, 1.0)
    return frame


def make_linear_data(
    n_samples: int = 200,
    coef: Sequence[float] = (2.0, -1.5, 0.5),
    intercept: float = 3.0,
    noise: float = 0.5,
    random_state: int | None = DEFAULT_RANDOM_STATE,
) -> tuple[pd.DataFrame, pd.Series]:
    """Gaussian features with y = intercept + X @ coef + noise."""
    rng = np.random.default_rng(random_state)
    coef_arr = np.asarray(coef, dtype=float)
    X = pd.DataFrame(
        rng.normal(size=(n_samples, len(coef_arr))),
        columns=_default_names(len(coef_arr)),
    )
    y = intercept + X.to_numpy() @ coef_arr + rng.normal(0.0, noise, size=n_samples)
    return X, pd.Series(y, name="y")


def make_separable_classes(
    n_samples: int = 100,
    center: float = 2.5,
    spread: float = 0.5,
    labels: tuple[Hashable, Hashable] = ("negative", "positive"),
    random_state: int | None = DEFAULT_RANDOM_STATE,
) -> tuple[pd.DataFrame, pd.Series]:
    """
    Two 2-D classes around (-center, -center) and (center, center).

    Noise is clipped to +/- 2 * spread, so with center > 2 * spread the classes
    are strictly separated by the line x0 + x1 = 0.
    """
    rng = np.random.default_rng(random_state)
    n_neg = n_samples // 2
    n_pos = n_samples - n_neg
    noise = np.clip(rng.normal(0.0, spread, size=(n_samples, 2)), -2 * spread, 2 * spread)
    means = np.vstack([np.full((n_neg, 2), -center), np.full((n_pos, 2), center)])
    X = pd.DataFrame(means + noise, columns=_default_names(2))
    y = pd.Series([labels[0]] * n_neg + [labels[1]] * n_pos, name="label")
    return X, y


def make_blobs_data(
    n_samples: int = 300,
    centers: int | np.ndarray = 3,
    cluster_std: float = 0.6,
    random_state: int | None = DEFAULT_RANDOM_STATE,
) -> tuple[pd.DataFrame, pd.Series]:
    """Isotropic Gaussian blobs (scikit-learn) with the generating labels."""
    X_arr, labels = make_blobs(
        n_samples=n_samples,
        centers=centers,
        cluster_std=cluster_std,
        random_state=random_state,
    )
    X = pd.DataFrame(X_arr, columns=_default_names(X_arr.shape[1]))
    return X, pd.Series(labels, name="blob")


def make_train_test_split(
    X: pd.DataFrame,
    y: pd.Series,
    test_size: float = DEFAULT_TEST_SIZE,
    random_state: int | None = DEFAULT_RANDOM_STATE,
    stratify: bool = False,
):
    """Random row split, optionally stratified on y."""
    return train_test_split(
        X,
        y,
        test_size=test_size,
        random_state=random_state,
        stratify=y if stratify else None,
    )


def readonly_copy(values, dtype=float) -> np.ndarray:
    """Private copy that cannot be written to; fitted models hold these."""
    arr = np.array(values, dtype=dtype, copy=True)
    arr.setflags(write=False)
    return arr
