from __future__ import annotations

"""
Metric helpers used by main.py to compare the scratch solvers with scikit-learn.
"""

from typing import Hashable

import numpy as np
import pandas as pd
from sklearn import metrics


def compute_classification_metrics(
    y_true: np.ndarray | pd.Series,
    y_pred: np.ndarray | pd.Series,
    positive_label: Hashable,
):
    """Standard binary metrics on hard labels; positive_label marks the 1 class."""
    true_bin = (np.asarray(y_true, dtype=object) == positive_label).astype(int)
    pred_bin = (np.asarray(y_pred, dtype=object) == positive_label).astype(int)
    precision, recall, f1, _ = metrics.precision_recall_fscore_support(
        true_bin, pred_bin, average="binary", zero_division=0
    )
    return {
        "accuracy": metrics.accuracy_score(true_bin, pred_bin),
        "precision": precision,
        "recall": recall,
        "f1": f1,
        "confusion_matrix": metrics.confusion_matrix(true_bin, pred_bin, labels=[0, 1]),
    }


def compute_regression_metrics(y_true: np.ndarray | pd.Series, y_pred: np.ndarray):
    return {
        "r2": metrics.r2_score(y_true, y_pred),
        "mse": metrics.mean_squared_error(y_true, y_pred),
        "mae": metrics.mean_absolute_error(y_true, y_pred),
    }


def summarize_coefficients(
    coef: np.ndarray | pd.Series, feature_names: list[str] | None = None, top_k: int = 8
) -> dict[str, pd.Series]:
    """Largest positive and most negative coefficients, by feature name."""
    if isinstance(coef, pd.Series):
        coef_series = coef
    else:
        coef_series = pd.Series(coef, index=feature_names)
    coef_sorted = coef_series.sort_values()
    return {
        "positive": coef_sorted[coef_sorted > 0].tail(top_k)[::-1],
        "negative": coef_sorted[coef_sorted < 0].head(top_k),
    }
