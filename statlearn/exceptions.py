"""
Error taxonomy for the solvers.

Solve failures and schema mismatches are raised; running out of iterations is
only a warning (``ConvergenceWarning``) because a usable estimate still exists.
"""

import numpy as np
from sklearn.exceptions import ConvergenceWarning


class StatLearnError(Exception):
    """Base class for every error raised by statlearn."""


class SingularMatrixError(StatLearnError, np.linalg.LinAlgError):
    """A linear solve has no unique solution (rank-deficient design)."""


class EmptyClusterError(StatLearnError):
    """A k-means assignment left at least one cluster without points."""


class SchemaMismatchError(StatLearnError, ValueError):
    """Prediction-time columns differ from the ones the model was fitted on."""


__all__ = [
    "ConvergenceWarning",
    "EmptyClusterError",
    "SchemaMismatchError",
    "SingularMatrixError",
    "StatLearnError",
]
