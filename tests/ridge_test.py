import dataclasses

import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import Ridge

from statlearn import SchemaMismatchError, SingularMatrixError, fit_ridge, make_linear_data, predict_ridge


def _collinear_frame(n_samples=60, seed=0):
    rng = np.random.default_rng(seed)
    x = rng.normal(size=n_samples)
    return pd.DataFrame({"a": x, "b": 2 * x, "c": 3 * x}), pd.Series(x + rng.normal(size=n_samples))


@pytest.mark.parametrize("lam", [0.0, 1e-10])
def test_small_lambda_matches_ols(lam):
    X, y = make_linear_data(n_samples=300, random_state=1)
    model = fit_ridge(X, y, lam=lam)

    Xb = np.c_[np.ones(len(X)), X.to_numpy()]
    beta_ols, *_ = np.linalg.lstsq(Xb, y.to_numpy(), rcond=None)

    np.testing.assert_allclose(model.intercept, beta_ols[0], atol=1e-6)
    np.testing.assert_allclose(model.coefficients, beta_ols[1:], atol=1e-6)


def test_prediction_is_exactly_linear():
    X, y = make_linear_data(n_samples=120, random_state=3)
    model = fit_ridge(X, y, lam=0.05)

    expected = X.to_numpy() @ model.coefficients + model.intercept
    np.testing.assert_allclose(predict_ridge(model, X), expected, rtol=0, atol=1e-12)


@pytest.mark.parametrize("lam", [0.01, 0.5])
def test_matches_sklearn_with_scaled_alpha(lam):
    X, y = make_linear_data(n_samples=200, random_state=7)
    model = fit_ridge(X, y, lam=lam)
    sk = Ridge(alpha=len(X) * lam).fit(X, y)

    np.testing.assert_allclose(model.coefficients, sk.coef_, atol=1e-8)
    np.testing.assert_allclose(model.intercept, sk.intercept_, atol=1e-8)


def test_penalty_shrinks_coefficients():
    X, y = make_linear_data(n_samples=200, random_state=11)
    norms = [np.linalg.norm(fit_ridge(X, y, lam=lam).coefficients) for lam in (0.0, 0.1, 1.0, 10.0)]
    assert all(a > b for a, b in zip(norms, norms[1:]))


def test_collinear_columns_singular_without_penalty():
    X, y = _collinear_frame()
    with pytest.raises(SingularMatrixError):
        fit_ridge(X, y, lam=0.0)

    model = fit_ridge(X, y, lam=0.1)
    assert np.all(np.isfinite(model.coefficients))
    assert np.isfinite(model.intercept)


def test_singular_error_is_a_linalg_error():
    X, y = _collinear_frame()
    with pytest.raises(np.linalg.LinAlgError):
        fit_ridge(X, y)


def test_predict_matches_columns_by_name():
    X, y = make_linear_data(n_samples=80, random_state=5)
    model = fit_ridge(X, y, lam=0.1)

    reordered = X[["x2", "x0", "x1"]]
    np.testing.assert_allclose(predict_ridge(model, reordered), predict_ridge(model, X))


@pytest.mark.parametrize(
    "transform",
    [
        lambda X: X.drop(columns=["x1"]),
        lambda X: X.rename(columns={"x1": "other"}),
        lambda X: X.assign(extra=1.0),
    ],
)
def test_predict_schema_mismatch(transform):
    X, y = make_linear_data(n_samples=50, random_state=2)
    model = fit_ridge(X, y, lam=0.1)
    with pytest.raises(SchemaMismatchError):
        predict_ridge(model, transform(X))


def test_array_input_uses_positional_names():
    X, y = make_linear_data(n_samples=50, random_state=2)
    model = fit_ridge(X.to_numpy(), y.to_numpy(), lam=0.1)
    assert model.feature_names == ("x0", "x1", "x2")
    np.testing.assert_allclose(predict_ridge(model, X), predict_ridge(model, X.to_numpy()))

    named = fit_ridge(X.rename(columns=lambda c: f"f_{c}"), y, lam=0.1)
    with pytest.raises(SchemaMismatchError):
        predict_ridge(named, X.to_numpy())


def test_model_is_immutable_and_inputs_untouched():
    X, y = make_linear_data(n_samples=50, random_state=4)
    X_before, y_before = X.copy(), y.copy()
    model = fit_ridge(X, y, lam=0.2)

    pd.testing.assert_frame_equal(X, X_before)
    pd.testing.assert_series_equal(y, y_before)
    with pytest.raises(ValueError):
        model.coefficients[0] = 0.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        model.intercept = 0.0


def test_invalid_arguments():
    X, y = make_linear_data(n_samples=30, random_state=0)
    with pytest.raises(ValueError):
        fit_ridge(X, y, lam=-1.0)
    with pytest.raises(ValueError):
        fit_ridge(X, y.iloc[:-1])
    with pytest.raises(ValueError):
        fit_ridge(X.assign(x0=np.nan), y)
