"""
Default hyperparameters and numerical guards shared by the solvers and main.py.
"""

# IRLS logistic regression
IRLS_TOL = 1e-6
IRLS_MAX_ITER = 1000

# Cyclic coordinate descent
CD_TOL = 1e-4
CD_MAX_ITER = 1000

# Lloyd's k-means
KMEANS_N_RESTARTS = 10
KMEANS_MAX_ITER = 300
EMPTY_CLUSTER_POLICIES = ("raise", "skip")

# Probabilities are kept inside [PROB_CLIP, 1 - PROB_CLIP] so IRLS weights never hit 0
PROB_CLIP = 1e-10

# Experiment runner
DEFAULT_RANDOM_STATE = 42
DEFAULT_TEST_SIZE = 0.2
DEFAULT_RIDGE_LAMBDA = 0.1
