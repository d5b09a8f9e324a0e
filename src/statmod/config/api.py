"""Default values and schema of statmod configuration files.

Each block maps onto the keyword arguments of one entry point, e.g.

    cfg = load_config("analysis.yaml")
    decomposition = principal_components(x, **cfg["pca"])
"""

# Default values of every recognized block
DEFAULTS = {
    "base": {
        "verbosity": "info",
    },
    "pca": {
        "standardize": False,
        "tie_tolerance": 1e-12,
        "zero_variance_tolerance": 1e-14,
    },
    "moments": {
        "cond_threshold": 1e12,
        "instability": "error",
    },
    "regression": {
        "n_folds": 10,
        "seed": 0,
    },
}

# Valid values
VALID_VERBOSITIES = {"debug", "info", "warning", "error", "critical"}
VALID_INSTABILITY_MODES = {"error", "warn"}

# Keys which must hold positive numbers
POSITIVE_KEYS = {
    "pca": ("tie_tolerance", "zero_variance_tolerance"),
    "moments": ("cond_threshold",),
}
