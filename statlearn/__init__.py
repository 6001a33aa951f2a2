"""
Scratch implementations of four statistical learning routines: closed-form
ridge regression, IRLS logistic regression, cyclic coordinate descent and
Lloyd's k-means, plus the data helpers and metrics used by main.py.
"""

from .coordinate_descent import (
    CoordinateDescentFit,
    fit_coordinate_descent,
    predict_coordinate_descent,
)
from .data_prep import (
    add_intercept,
    make_blobs_data,
    make_linear_data,
    make_separable_classes,
    make_train_test_split,
)
from .exceptions import (
    ConvergenceWarning,
    EmptyClusterError,
    SchemaMismatchError,
    SingularMatrixError,
    StatLearnError,
)
from .irls import IRLSFit, decision_function, fit_irls, predict_irls
from .kmeans import KMeansFit, fit_kmeans, predict_kmeans
from .metrics import (
    compute_classification_metrics,
    compute_regression_metrics,
    summarize_coefficients,
)
from .ridge import RidgeFit, fit_ridge, predict_ridge

__all__ = [
    "CoordinateDescentFit",
    "fit_coordinate_descent",
    "predict_coordinate_descent",
    "add_intercept",
    "make_blobs_data",
    "make_linear_data",
    "make_separable_classes",
    "make_train_test_split",
    "ConvergenceWarning",
    "EmptyClusterError",
    "SchemaMismatchError",
    "SingularMatrixError",
    "StatLearnError",
    "IRLSFit",
    "decision_function",
    "fit_irls",
    "predict_irls",
    "KMeansFit",
    "fit_kmeans",
    "predict_kmeans",
    "compute_classification_metrics",
    "compute_regression_metrics",
    "summarize_coefficients",
    "RidgeFit",
    "fit_ridge",
    "predict_ridge",
]
