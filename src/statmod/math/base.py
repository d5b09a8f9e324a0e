"""Numba JIT compiled implementation of basic column statistics.

These are implemented here because vanilla numba does not support the
`axis` or `ddof` arguments of the corresponding numpy functions.
"""

import numba as nb
import numpy as np

__all__ = ["mean", "std", "all_finite"]


@nb.njit(cache=True)
def mean(x: nb.float64[:, :], axis: nb.int32) -> nb.float64[:]:
    """Numba implementation of `np.mean(x, axis)`.

    Parameters
    ----------
    x : np.ndarray
        (N,M) array of values
    axis : int
        Array axis ID

    Returns
    -------
    np.ndarray
        (N) or (M) array of `mean` values
    """
    assert axis == 0 or axis == 1
    meanx = np.empty(x.shape[1 - axis], dtype=x.dtype)
    if axis == 0:
        for i in range(len(meanx)):
            meanx[i] = np.mean(x[:, i])
    else:
        for i in range(len(meanx)):
            meanx[i] = np.mean(x[i])

    return meanx


@nb.njit(cache=True)
def std(x: nb.float64[:, :], axis: nb.int32, ddof: nb.int32 = 1) -> nb.float64[:]:
    """Numba implementation of `np.std(x, axis, ddof=ddof)`.

    Parameters
    ----------
    x : np.ndarray
        (N,M) array of values
    axis : int
        Array axis ID
    ddof : int, default 1
        Delta degrees of freedom. The default gives the sample standard
        deviation.

    Returns
    -------
    np.ndarray
        (N) or (M) array of `std` values
    """
    assert axis == 0 or axis == 1
    n = x.shape[axis]
    assert n > ddof, "Not enough values for the requested degrees of freedom."
    meanx = mean(x, axis)
    stdx = np.empty(x.shape[1 - axis], dtype=x.dtype)
    if axis == 0:
        for i in range(len(stdx)):
            stdx[i] = np.sqrt(np.sum((x[:, i] - meanx[i]) ** 2) / (n - ddof))
    else:
        for i in range(len(stdx)):
            stdx[i] = np.sqrt(np.sum((x[i] - meanx[i]) ** 2) / (n - ddof))

    return stdx


@nb.njit(cache=True)
def all_finite(x: nb.float64[:, :]) -> bool:
    """Checks that none of the entries of an array are NaN or infinite.

    Parameters
    ----------
    x : np.ndarray
        (N,M) array of values

    Returns
    -------
    bool
        `True` if all the values are finite
    """
    for i in range(x.shape[0]):
        for j in range(x.shape[1]):
            if not np.isfinite(x[i, j]):
                return False

    return True
