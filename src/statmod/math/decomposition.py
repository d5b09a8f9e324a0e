"""Numba JIT compiled implementation of decomposition routines."""

import numba as nb
import numpy as np

__all__ = ["svd_components", "descending_order", "align_signs"]


@nb.njit(cache=True)
def descending_order(s: nb.float64[:], tolerance: nb.float64) -> nb.int64[:]:
    """Sorts values in descending order with a deterministic tie-break.

    Values which differ by no more than `tolerance` are considered equal.
    Within a run of equal values, the original index order is preserved.

    Parameters
    ----------
    s : np.ndarray
        (K) Values to sort
    tolerance : float
        Absolute difference below which two values are tied

    Returns
    -------
    np.ndarray
        (K) Indexes which sort the values
    """
    order = np.argsort(-s, kind="mergesort")
    n = len(order)
    start = 0
    for i in range(1, n + 1):
        if i == n or s[order[start]] - s[order[i]] > tolerance:
            order[start:i] = np.sort(order[start:i])
            start = i

    return order


@nb.njit(cache=True)
def align_signs(vt: nb.float64[:, :]) -> nb.float64[:, :]:
    """Flips row vectors so that their largest-magnitude entry is positive.

    Parameters
    ----------
    vt : np.ndarray
        (K, D) Row vectors

    Returns
    -------
    np.ndarray
        (K, D) Row vectors with a fixed sign convention
    """
    for i in range(vt.shape[0]):
        j = np.argmax(np.abs(vt[i]))
        if vt[i, j] < 0.0:
            vt[i] = -vt[i]

    return vt


@nb.njit(cache=True)
def svd_components(
    x: nb.float64[:, :], full_basis: nb.boolean, tie_tolerance: nb.float64
) -> (nb.float64[:], nb.float64[:, :]):
    """Computes the right singular vectors of a centered data matrix.

    The singular value decomposition is performed directly on the data,
    without forming the covariance matrix.

    Parameters
    ----------
    x : np.ndarray
        (N, D) Centered (and optionally scaled) observations
    full_basis : bool
        If `True`, return D singular vectors even if N < D. The vectors
        beyond the rank of the matrix are associated with a zero singular
        value.
    tie_tolerance : float
        Singular values closer than this fraction of the largest singular
        value are considered tied

    Returns
    -------
    np.ndarray
        (K) Singular values in descending order
    np.ndarray
        (K, D) Right singular vectors (row-ordered), paired with the
        singular values
    """
    _, s, vt = np.linalg.svd(x, full_matrices=full_basis)

    # Pad the singular values of the missing directions with zeros
    sv = np.zeros(vt.shape[0], dtype=x.dtype)
    sv[: len(s)] = s

    # Order the components, keep the pairing with their vectors
    order = descending_order(sv, tie_tolerance * np.max(sv))
    vt = align_signs(np.ascontiguousarray(vt[order]))

    return sv[order], vt
