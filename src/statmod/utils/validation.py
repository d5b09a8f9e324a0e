"""Input validation shared by the decomposition, transform and regression
routines.

All checks convert their input to a contiguous `float64` array, which is
what the JIT-compiled kernels in :mod:`statmod.math` expect, and raise
:class:`~statmod.errors.InvalidInputError` on failure.
"""

import numpy as np

from statmod.errors import InvalidInputError
from statmod.math.base import all_finite

__all__ = [
    "check_dataset",
    "check_vector",
    "check_covariance",
    "check_outcome",
    "check_component_count",
]


def check_dataset(x, min_samples: int = 2, name: str = "dataset") -> np.ndarray:
    """Checks that an array is a well-formed (N, D) dataset.

    Parameters
    ----------
    x : array_like
        (N, D) Observations, one per row
    min_samples : int, default 2
        Minimum number of observations N
    name : str, default "dataset"
        Name of the array used in error messages

    Returns
    -------
    np.ndarray
        (N, D) Contiguous `float64` copy of the input

    Raises
    ------
    InvalidInputError
        If the array is not 2D, has too few rows, no columns or non-finite
        entries
    """
    try:
        x = np.ascontiguousarray(x, dtype=np.float64)
    except (TypeError, ValueError) as err:
        raise InvalidInputError(f"The {name} must be a numeric array.") from err

    if x.ndim != 2:
        raise InvalidInputError(
            f"The {name} must be a 2D array, got {x.ndim} dimension(s)."
        )
    if x.shape[0] < min_samples:
        raise InvalidInputError(
            f"The {name} must contain at least {min_samples} observation(s), "
            f"got {x.shape[0]}."
        )
    if x.shape[1] < 1:
        raise InvalidInputError(f"The {name} must contain at least one feature.")
    if not all_finite(x):
        raise InvalidInputError(f"The {name} contains non-finite values.")

    return x


def check_vector(v, length: int, name: str = "vector") -> np.ndarray:
    """Checks that an array is a finite vector of a given length.

    Parameters
    ----------
    v : array_like
        (D) Vector to check
    length : int
        Expected length, D
    name : str, default "vector"
        Name of the array used in error messages

    Returns
    -------
    np.ndarray
        (D) Contiguous `float64` copy of the input
    """
    try:
        v = np.ascontiguousarray(v, dtype=np.float64)
    except (TypeError, ValueError) as err:
        raise InvalidInputError(f"The {name} must be a numeric array.") from err

    if v.shape != (length,):
        raise InvalidInputError(
            f"The {name} must have shape ({length},), got {v.shape}."
        )
    if not np.all(np.isfinite(v)):
        raise InvalidInputError(f"The {name} contains non-finite values.")

    return v


def check_covariance(
    a, size: int, name: str = "covariance matrix", tolerance: float = 1e-10
) -> np.ndarray:
    """Checks that an array is a finite, symmetric (D, D) matrix.

    Positive definiteness is not checked here, it is established by the
    Cholesky factorization which consumes the matrix.

    Parameters
    ----------
    a : array_like
        (D, D) Matrix to check
    size : int
        Expected size, D
    name : str, default "covariance matrix"
        Name of the array used in error messages
    tolerance : float, default 1e-10
        Largest asymmetry tolerated, relative to the largest entry

    Returns
    -------
    np.ndarray
        (D, D) Contiguous `float64` copy of the input, exactly symmetrized
    """
    try:
        a = np.ascontiguousarray(a, dtype=np.float64)
    except (TypeError, ValueError) as err:
        raise InvalidInputError(f"The {name} must be a numeric array.") from err

    if a.shape != (size, size):
        raise InvalidInputError(
            f"The {name} must have shape ({size}, {size}), got {a.shape}."
        )
    if not np.all(np.isfinite(a)):
        raise InvalidInputError(f"The {name} contains non-finite values.")

    scale = max(np.max(np.abs(a)), 1.0)
    if np.max(np.abs(a - a.T)) > tolerance * scale:
        raise InvalidInputError(f"The {name} is not symmetric.")

    return np.ascontiguousarray(0.5 * (a + a.T))


def check_outcome(y, n_samples: int, name: str = "outcome") -> np.ndarray:
    """Checks that an outcome vector matches the number of observations.

    Parameters
    ----------
    y : array_like
        (N) Outcome values
    n_samples : int
        Number of observations, N
    name : str, default "outcome"
        Name of the array used in error messages

    Returns
    -------
    np.ndarray
        (N) Contiguous `float64` copy of the input
    """
    y = np.asarray(y)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y[:, 0]

    return check_vector(y, n_samples, name)


def check_component_count(k, max_components: int) -> int:
    """Checks that a number of components lies in [1, max_components].

    Parameters
    ----------
    k : int
        Requested number of components
    max_components : int
        Number of components available

    Returns
    -------
    int
        Number of components as a python integer
    """
    if isinstance(k, (bool, np.bool_)) or not isinstance(k, (int, np.integer)):
        raise InvalidInputError(
            f"The number of components must be an integer, got {k!r}."
        )
    if k < 1 or k > max_components:
        raise InvalidInputError(
            f"The number of components must be between 1 and "
            f"{max_components}, got {k}."
        )

    return int(k)
