"""Affine transforms which impose an exact sample mean and covariance.

Given a sample `x` with mean `x_bar` and covariance `S_x = R_x^T R_x`, and a
target mean `mu` and covariance `S = R^T R` (both upper-triangular Cholesky
factorizations), the transform

    y = A x + b,  with  A = (R_x^{-1} R)^T  and  b = mu - A x_bar,

yields a sample whose empirical mean is exactly `mu` and whose empirical
covariance is exactly `S`.
"""

import warnings
from dataclasses import dataclass

import numpy as np
from scipy import linalg

from statmod.errors import (
    InvalidInputError,
    NumericalInstabilityError,
    NumericalInstabilityWarning,
)
from statmod.math import mean
from statmod.math.linalg import condition_number, cov
from statmod.utils.logger import logger
from statmod.utils.validation import check_covariance, check_dataset, check_vector

__all__ = [
    "AffineTransform",
    "fit_moment_transform",
    "match_moments",
    "sample_with_moments",
]

INSTABILITY_MODES = ("error", "warn")


@dataclass(eq=False)
class AffineTransform:
    """Row-wise affine transform `y = A x + b`.

    Attributes
    ----------
    matrix : np.ndarray
        (D, D) Linear part of the transform, A
    offset : np.ndarray
        (D) Translation part of the transform, b
    """

    matrix: np.ndarray
    offset: np.ndarray

    @property
    def n_features(self):
        """Dimension of the space the transform acts on, D."""
        return len(self.offset)

    def apply(self, x):
        """Applies the transform to every row of a dataset.

        Parameters
        ----------
        x : array_like
            (N, D) Observations

        Returns
        -------
        np.ndarray
            (N, D) Transformed observations
        """
        x = check_dataset(x, min_samples=1)
        if x.shape[1] != self.n_features:
            raise InvalidInputError(
                f"The dataset has {x.shape[1]} feature(s), the transform "
                f"acts on {self.n_features}."
            )

        return x @ self.matrix.T + self.offset


def _upper_cholesky(a, name):
    """Upper-triangular Cholesky factor R of a matrix, such that a = R^T R."""
    try:
        return linalg.cholesky(a, lower=False)
    except linalg.LinAlgError as err:
        raise InvalidInputError(f"The {name} is not positive definite.") from err


def fit_moment_transform(x, mean_vector, cov_matrix, cond_threshold=1e12, instability="error"):
    """Builds the affine transform which gives a sample exact moments.

    Parameters
    ----------
    x : array_like
        (N, D) Sample, with N > D so that its covariance can be full rank
    mean_vector : array_like
        (D) Target mean, mu
    cov_matrix : array_like
        (D, D) Target covariance, symmetric positive definite
    cond_threshold : float, default 1e12
        Largest condition number of the sample covariance which is
        tolerated
    instability : str, default "error"
        What to do when the sample covariance is ill-conditioned: raise a
        :class:`NumericalInstabilityError` ("error") or issue a
        :class:`NumericalInstabilityWarning` ("warn")

    Returns
    -------
    AffineTransform
        Transform which maps the sample onto one with the target moments

    Raises
    ------
    InvalidInputError
        If the inputs are malformed, if N <= D, if the sample covariance is
        singular or if the target covariance is not positive definite
    NumericalInstabilityError
        If the sample covariance is ill-conditioned in "error" mode
    """
    # Check input
    if instability not in INSTABILITY_MODES:
        raise InvalidInputError(
            f"Instability mode not recognized: {instability}. "
            f"Must be one of {INSTABILITY_MODES}."
        )
    x = check_dataset(x)
    num_samples, num_features = x.shape
    if num_samples <= num_features:
        raise InvalidInputError(
            f"Need more observations ({num_samples}) than features "
            f"({num_features}) for the sample covariance to be full rank."
        )
    mean_vector = check_vector(mean_vector, num_features, "target mean")
    cov_matrix = check_covariance(cov_matrix, num_features, "target covariance")

    # Compute the sample moments
    x_mean = mean(x, 0)
    x_cov = cov(x)

    # Check that the sample covariance is invertible and well-conditioned
    cond = condition_number(x_cov)
    if not np.isfinite(cond) or cond * np.finfo(np.float64).eps >= 1.0:
        raise InvalidInputError("The sample covariance is singular.")
    if cond > cond_threshold:
        if instability == "error":
            raise NumericalInstabilityError("sample covariance", cond, cond_threshold)
        warnings.warn(
            f"The sample covariance is ill-conditioned (condition number "
            f"{cond:.3e} exceeds {cond_threshold:.3e}).",
            NumericalInstabilityWarning,
            stacklevel=2,
        )

    # Factorize both covariance matrices
    r_x = _upper_cholesky(x_cov, "sample covariance")
    r = _upper_cholesky(cov_matrix, "target covariance")

    # Build the transform
    matrix = linalg.solve_triangular(r_x, r, lower=False).T
    offset = mean_vector - matrix @ x_mean

    logger.debug(
        "Built a moment-matching transform for a (%d, %d) sample "
        "(condition number %.3e).",
        num_samples,
        num_features,
        cond,
    )

    return AffineTransform(matrix=matrix, offset=offset)


def match_moments(x, mean_vector, cov_matrix, **kwargs):
    """Transforms a sample so that it has an exact mean and covariance.

    Parameters
    ----------
    x : array_like
        (N, D) Sample, with N > D
    mean_vector : array_like
        (D) Target mean
    cov_matrix : array_like
        (D, D) Target covariance, symmetric positive definite
    **kwargs : dict, optional
        Additional arguments passed to :func:`fit_moment_transform`

    Returns
    -------
    np.ndarray
        (N, D) Transformed sample with the target mean and covariance
    """
    return fit_moment_transform(x, mean_vector, cov_matrix, **kwargs).apply(x)


def sample_with_moments(mean_vector, cov_matrix, n_samples, seed=None, **kwargs):
    """Draws a random sample with an exact mean and covariance.

    A standard normal sample is drawn and transformed with
    :func:`match_moments`, so the sample moments match the targets
    exactly rather than only in expectation.

    Parameters
    ----------
    mean_vector : array_like
        (D) Target mean
    cov_matrix : array_like
        (D, D) Target covariance, symmetric positive definite
    n_samples : int
        Number of observations to draw, N > D
    seed : int, optional
        Seed of the random number generator
    **kwargs : dict, optional
        Additional arguments passed to :func:`fit_moment_transform`

    Returns
    -------
    np.ndarray
        (N, D) Sample with the target mean and covariance
    """
    mean_vector = np.asarray(mean_vector, dtype=np.float64)
    if mean_vector.ndim != 1 or not len(mean_vector):
        raise InvalidInputError("The target mean must be a non-empty vector.")
    if int(n_samples) != n_samples or n_samples <= len(mean_vector):
        raise InvalidInputError(
            f"The number of samples must be an integer larger than the "
            f"dimension ({len(mean_vector)}), got {n_samples}."
        )

    rng = np.random.default_rng(seed)
    z = rng.standard_normal((int(n_samples), len(mean_vector)))

    return match_moments(z, mean_vector, cov_matrix, **kwargs)
