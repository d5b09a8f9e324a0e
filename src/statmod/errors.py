"""Typed exceptions for statmod numerical routines.

Every failure is reported synchronously at the point of the failing call.
Nothing is recovered internally: callers decide whether to adjust their
input (e.g. drop a zero-variance column) and retry.
"""


class StatModError(Exception):
    """Base exception for all statmod numerical errors."""


class InvalidInputError(StatModError, ValueError):
    """Raised when an input array is malformed or violates a precondition.

    This covers wrong shapes, non-finite entries, zero-variance columns
    when standardizing, out-of-range component counts, target covariance
    matrices which are not symmetric positive definite and singular
    empirical covariance matrices.
    """


class NumericalInstabilityError(StatModError, ArithmeticError):
    """Raised when a matrix is too ill-conditioned to be trusted."""

    def __init__(self, name: str, cond: float, threshold: float):
        """Initialize with the offending condition number.

        Parameters
        ----------
        name : str
            Name of the ill-conditioned matrix
        cond : float
            Condition number of the matrix
        threshold : float
            Largest condition number tolerated
        """
        self.name = name
        self.cond = cond
        self.threshold = threshold
        super().__init__(
            f"The {name} is ill-conditioned (condition number {cond:.3e} "
            f"exceeds the threshold of {threshold:.3e})."
        )


class NumericalInstabilityWarning(UserWarning):
    """Issued instead of :class:`NumericalInstabilityError` in `warn` mode."""
