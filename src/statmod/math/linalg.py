"""Numba JIT compiled implementation of linear algebra routines."""

import numba as nb
import numpy as np

from .base import mean

__all__ = ["center", "cov", "condition_number", "orthonormality_error"]


@nb.njit(cache=True)
def center(x: nb.float64[:, :]) -> nb.float64[:, :]:
    """Subtracts the column means from every row of a matrix.

    Parameters
    ----------
    x : np.ndarray
        (N, D) array of observations

    Returns
    -------
    np.ndarray
        (N, D) array of centered observations
    """
    meanx = mean(x, 0)
    xc = np.empty_like(x)
    for i in range(x.shape[0]):
        xc[i] = x[i] - meanx

    return xc


@nb.njit(cache=True)
def cov(x: nb.float64[:, :]) -> nb.float64[:, :]:
    """Numba implementation of `np.cov(x.T)`.

    The covariance is normalized by N - 1, i.e. this is the unbiased
    sample covariance of the observations.

    Parameters
    ----------
    x : np.ndarray
        (N, D) array of observations

    Returns
    -------
    np.ndarray
        (D, D) sample covariance matrix
    """
    assert x.shape[0] > 1, "Need at least two observations."
    xc = center(x)
    covx = np.dot(xc.T, xc) / (x.shape[0] - 1)

    # Enforce exact symmetry
    return 0.5 * (covx + covx.T)


@nb.njit(cache=True)
def condition_number(a: nb.float64[:, :]) -> nb.float64:
    """Computes the 2-norm condition number of a square matrix.

    Parameters
    ----------
    a : np.ndarray
        (D, D) matrix

    Returns
    -------
    float
        Ratio of the largest to the smallest singular value. Infinite if
        the matrix is exactly singular.
    """
    _, s, _ = np.linalg.svd(a)
    if s[-1] == 0.0:
        return np.inf

    return s[0] / s[-1]


@nb.njit(cache=True)
def orthonormality_error(v: nb.float64[:, :]) -> nb.float64:
    """Measures how far the columns of a matrix are from being orthonormal.

    Parameters
    ----------
    v : np.ndarray
        (D, K) matrix of column vectors

    Returns
    -------
    float
        Maximum absolute deviation of `v.T @ v` from the (K, K) identity
    """
    gram = np.dot(v.T, v)

    return np.max(np.abs(gram - np.eye(v.shape[1])))
