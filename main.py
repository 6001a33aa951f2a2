from __future__ import annotations

"""
CLI entrypoint for the solver experiments. Pick experiment via --experiment:
ridge, irls, cd (coordinate descent), kmeans, or all. Every experiment runs
on synthetic data and compares the scratch routine with scikit-learn.
"""

import argparse

import numpy as np
from sklearn.cluster import KMeans
from sklearn.linear_model import LinearRegression, LogisticRegression, Ridge
from sklearn.metrics import adjusted_rand_score

from statlearn import (
    add_intercept,
    compute_classification_metrics,
    compute_regression_metrics,
    fit_coordinate_descent,
    fit_irls,
    fit_kmeans,
    fit_ridge,
    make_blobs_data,
    make_linear_data,
    make_separable_classes,
    make_train_test_split,
    predict_coordinate_descent,
    predict_irls,
    predict_ridge,
    summarize_coefficients,
)
from statlearn.constants import (
    CD_MAX_ITER,
    CD_TOL,
    DEFAULT_RANDOM_STATE,
    DEFAULT_RIDGE_LAMBDA,
    DEFAULT_TEST_SIZE,
    IRLS_MAX_ITER,
    IRLS_TOL,
    KMEANS_MAX_ITER,
    KMEANS_N_RESTARTS,
)


def print_regression_metrics(label: str, metrics: dict):
    print(f"[{label}] R^2 {metrics['r2']:.4f} | MSE {metrics['mse']:.4f} | MAE {metrics['mae']:.4f}")


def print_classification_metrics(label: str, metrics: dict):
    """Nicely format the metric dict produced by compute_classification_metrics."""
    cm = metrics["confusion_matrix"]
    print(
        f"[{label}] Acc {metrics['accuracy']:.3f} | "
        f"Prec {metrics['precision']:.3f} | Rec {metrics['recall']:.3f} | "
        f"F1 {metrics['f1']:.3f}"
    )
    print(f"    Confusion matrix [[TN, FP], [FN, TP]]: {cm.tolist()}")


def build_arg_parser():
    """CLI parser with knobs for data, solver params, and experiment choice."""
    parser = argparse.ArgumentParser(
        description="Run the scratch ridge / IRLS / coordinate descent / k-means solvers."
    )
    parser.add_argument(
        "--experiment",
        choices=["ridge", "irls", "cd", "kmeans", "all"],
        default="all",
        help="Which solver to exercise against its scikit-learn counterpart.",
    )
    parser.add_argument("--n-samples", type=int, default=400)
    parser.add_argument("--test-size", type=float, default=DEFAULT_TEST_SIZE)
    parser.add_argument("--noise", type=float, default=0.5, help="Noise std for regression data.")
    parser.add_argument(
        "--lam", type=float, default=DEFAULT_RIDGE_LAMBDA, help="Ridge penalty (ridge and cd)."
    )
    parser.add_argument("--irls-tol", type=float, default=IRLS_TOL)
    parser.add_argument("--irls-max-iter", type=int, default=IRLS_MAX_ITER)
    parser.add_argument("--cd-tol", type=float, default=CD_TOL)
    parser.add_argument("--cd-max-iter", type=int, default=CD_MAX_ITER)
    parser.add_argument("--k", type=int, default=3, help="Number of clusters for k-means.")
    parser.add_argument("--n-restarts", type=int, default=KMEANS_N_RESTARTS)
    parser.add_argument("--kmeans-max-iter", type=int, default=KMEANS_MAX_ITER)
    parser.add_argument(
        "--skip-empty",
        action="store_true",
        help="Skip k-means restarts that produce an empty cluster instead of failing.",
    )
    parser.add_argument("--verbose", action="store_true", help="Print per-iteration progress.")
    parser.add_argument(
        "--random-state",
        type=int,
        default=DEFAULT_RANDOM_STATE,
        help="Random seed for data generation, splits and k-means restarts.",
    )
    return parser


def run_ridge(args: argparse.Namespace):
    """Closed-form ridge vs sklearn Ridge with alpha = n * lam."""
    X, y = make_linear_data(
        n_samples=args.n_samples, noise=args.noise, random_state=args.random_state
    )
    X_train, X_test, y_train, y_test = make_train_test_split(
        X, y, test_size=args.test_size, random_state=args.random_state
    )

    model = fit_ridge(X_train, y_train, lam=args.lam)
    print_regression_metrics("Scratch ridge", compute_regression_metrics(y_test, predict_ridge(model, X_test)))

    sk_model = Ridge(alpha=len(X_train) * args.lam).fit(X_train, y_train)
    print_regression_metrics("sklearn Ridge", compute_regression_metrics(y_test, sk_model.predict(X_test)))

    print(f"    intercept: scratch {model.intercept:.4f} vs sklearn {float(sk_model.intercept_):.4f}")
    print(f"    coefficients (scratch): {np.round(model.coefficients, 4)}")
    print(f"    coefficients (sklearn): {np.round(sk_model.coef_, 4)}")
    top = summarize_coefficients(model.coef_series(), top_k=3)
    print(f"    strongest positive: {top['positive'].to_dict()}")
    print(f"    strongest negative: {top['negative'].to_dict()}")


def run_irls(args: argparse.Namespace):
    """IRLS logistic regression vs (effectively unpenalized) sklearn LogisticRegression."""
    X, y = make_separable_classes(
        n_samples=args.n_samples,
        center=1.0,
        spread=1.0,
        labels=("no", "yes"),
        random_state=args.random_state,
    )
    X = add_intercept(X)
    X_train, X_test, y_train, y_test = make_train_test_split(
        X, y, test_size=args.test_size, random_state=args.random_state, stratify=True
    )

    model = fit_irls(
        X_train, y_train, tol=args.irls_tol, max_iter=args.irls_max_iter, verbose=args.verbose
    )
    print(
        f"IRLS converged={model.converged} after {model.iterations} iterations "
        f"(|grad|={model.final_gradient_norm:.2e}), levels={model.factor_levels}"
    )
    positive = model.factor_levels[1]
    print_classification_metrics(
        "Scratch IRLS",
        compute_classification_metrics(y_test, predict_irls(model, X_test), positive),
    )

    sk_model = LogisticRegression(C=1e12, fit_intercept=False, max_iter=5000)
    sk_model.fit(X_train, y_train)
    print_classification_metrics(
        "sklearn LogisticRegression",
        compute_classification_metrics(y_test, sk_model.predict(X_test), positive),
    )
    print(f"    coefficients (scratch): {np.round(model.coefficients, 4)}")
    print(f"    coefficients (sklearn): {np.round(sk_model.coef_[0], 4)}")


def run_coordinate_descent(args: argparse.Namespace):
    """Coordinate descent vs the closed form (X^T X + lam I)^{-1} X^T y."""
    X, y = make_linear_data(
        n_samples=args.n_samples, noise=args.noise, random_state=args.random_state
    )
    X = add_intercept(X)
    X_train, X_test, y_train, y_test = make_train_test_split(
        X, y, test_size=args.test_size, random_state=args.random_state
    )

    model = fit_coordinate_descent(
        X_train,
        y_train,
        lam=args.lam,
        tol=args.cd_tol,
        max_iter=args.cd_max_iter,
        verbose=args.verbose,
    )
    print(f"CD success={model.success} after {model.iterations} sweeps (lam={model.lam})")
    print_regression_metrics(
        "Scratch coordinate descent",
        compute_regression_metrics(y_test, predict_coordinate_descent(model, X_test)),
    )

    if args.lam == 0:
        sk_model = LinearRegression(fit_intercept=False).fit(X_train, y_train)
        label = "sklearn LinearRegression"
    else:
        sk_model = Ridge(alpha=args.lam, fit_intercept=False).fit(X_train, y_train)
        label = "sklearn Ridge"
    print_regression_metrics(label, compute_regression_metrics(y_test, sk_model.predict(X_test)))
    gap = float(np.max(np.abs(model.coefficients - sk_model.coef_)))
    print(f"    max |beta_cd - beta_sklearn| = {gap:.2e}")


def run_kmeans(args: argparse.Namespace):
    """Multi-start Lloyd's k-means vs sklearn KMeans (same k and restarts)."""
    X, blobs = make_blobs_data(
        n_samples=args.n_samples, centers=args.k, random_state=args.random_state
    )

    model = fit_kmeans(
        X,
        k=args.k,
        n_restarts=args.n_restarts,
        max_iter=args.kmeans_max_iter,
        random_state=args.random_state,
        on_empty="skip" if args.skip_empty else "raise",
        verbose=args.verbose,
    )
    print(
        f"[Scratch k-means] cost {model.cost:.3f} | iters {model.iterations} | "
        f"failed restarts {model.n_failed_restarts} | "
        f"ARI vs blobs {adjusted_rand_score(blobs, model.assignment):.3f}"
    )
    print(f"    centroids:\n{np.round(model.centroids, 3)}")

    km = KMeans(
        n_clusters=args.k,
        n_init=args.n_restarts,
        init="random",
        max_iter=args.kmeans_max_iter,
        random_state=args.random_state,
    )
    km.fit(X)
    print(
        f"[sklearn KMeans] inertia {float(km.inertia_):.3f} | "
        f"ARI vs blobs {adjusted_rand_score(blobs, km.labels_):.3f}"
    )


EXPERIMENTS = {
    "ridge": run_ridge,
    "irls": run_irls,
    "cd": run_coordinate_descent,
    "kmeans": run_kmeans,
}


def main(args: argparse.Namespace | None = None):
    """Dispatch to the selected experiment (or all of them)."""
    args = args or build_arg_parser().parse_args()

    selected = list(EXPERIMENTS) if args.experiment == "all" else [args.experiment]
    for name in selected:
        print(f"\n=== {name} ===")
        EXPERIMENTS[name](args)


if __name__ == "__main__":
    main()
