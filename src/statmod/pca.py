"""Principal component analysis of a numeric dataset.

The decomposition is computed from the singular value decomposition of the
centered (and optionally standardized) data matrix. The result can then be
used to project the observations onto a subset of the components, to
reconstruct the observations from that subset and to quantify how much of
the total variance each component explains.
"""

from dataclasses import dataclass

import numpy as np

from statmod.errors import InvalidInputError
from statmod.math import mean, std
from statmod.math.decomposition import svd_components
from statmod.utils.logger import logger
from statmod.utils.validation import check_component_count, check_dataset

__all__ = [
    "PCADecomposition",
    "principal_components",
    "project",
    "reconstruct",
    "transform",
    "inverse_transform",
    "reconstruction_error",
    "explained_variance_ratio",
    "cumulative_explained_variance",
    "n_components_for_variance",
]


@dataclass(eq=False)
class PCADecomposition:
    """Principal component decomposition of an (N, D) dataset.

    All arrays are read-only views of the decomposition; they are never
    modified by the functions of this module.

    Attributes
    ----------
    mean : np.ndarray
        (D) Column means of the dataset
    loadings : np.ndarray
        (D, K) Orthonormal loading vectors, one per column, ordered by
        descending variance
    variances : np.ndarray
        (K) Variance of the data along each loading vector
    scores : np.ndarray
        (N, K) Centered observations expressed in the loading basis
    singular_values : np.ndarray
        (K) Singular values of the centered data matrix
    total_variance : float
        Sum of the variances over all D components, including those which
        were not retained
    scale : np.ndarray, optional
        (D) Column standard deviations, if the data was standardized
    """

    mean: np.ndarray
    loadings: np.ndarray
    variances: np.ndarray
    scores: np.ndarray
    singular_values: np.ndarray
    total_variance: float
    scale: np.ndarray = None

    @property
    def n_samples(self):
        """Number of observations the decomposition was computed from."""
        return self.scores.shape[0]

    @property
    def n_features(self):
        """Number of features of the observations, D."""
        return self.loadings.shape[0]

    @property
    def n_components(self):
        """Number of components retained, K."""
        return self.loadings.shape[1]

    @property
    def standardized(self):
        """Whether the columns were scaled to unit variance."""
        return self.scale is not None

    @property
    def explained_variance_ratio(self):
        """Fraction of the total variance explained by each component."""
        return explained_variance_ratio(self)

    @property
    def cumulative_explained_variance(self):
        """Fraction of the total variance explained by the first components."""
        return cumulative_explained_variance(self)


def principal_components(
    x,
    standardize=False,
    n_components=None,
    tie_tolerance=1e-12,
    zero_variance_tolerance=1e-14,
):
    """Computes the principal components of a dataset.

    The columns are centered (and optionally scaled to unit variance)
    before the centered matrix is decomposed by SVD. The variance along
    component k is related to its singular value by
    `variance_k = sigma_k ** 2 / (N - 1)`.

    Components are ordered by descending singular value. Singular values
    which agree to within `tie_tolerance` (relative to the largest one)
    are kept in the order in which the SVD returns them. Each loading is
    flipped so that its largest-magnitude entry is positive, but callers
    should not rely on the sign of a component.

    Parameters
    ----------
    x : array_like
        (N, D) Dataset with N >= 2 observations of D >= 1 features
    standardize : bool, default False
        If `True`, divide each centered column by its sample standard
        deviation before the decomposition
    n_components : int, optional
        Number of components to retain, K. All D components are retained
        by default, even if N < D (the components beyond the rank of the
        data then carry no variance).
    tie_tolerance : float, default 1e-12
        Relative tolerance under which two singular values are tied
    zero_variance_tolerance : float, default 1e-14
        Relative cutoff under which a column is considered constant when
        standardizing: the spread of its values (max - min) is compared to
        this fraction of its largest absolute value. The default allows
        a few tens of ulp of rounding noise.

    Returns
    -------
    PCADecomposition
        Decomposition of the dataset

    Raises
    ------
    InvalidInputError
        If the dataset is malformed, if `n_components` is out of range or
        if a column has zero variance while standardizing
    """
    # Check input
    x = check_dataset(x)
    num_samples, num_features = x.shape
    if n_components is not None:
        n_components = check_component_count(n_components, num_features)

    # Center the data
    meanx = mean(x, 0)
    xc = x - meanx

    # Scale the data to unit variance, if requested
    scale = None
    if standardize:
        scale = std(x, 0, 1)
        spread = np.ptp(x, axis=0)
        constant = spread <= zero_variance_tolerance * np.max(np.abs(x), axis=0)
        if np.any(constant):
            raise InvalidInputError(
                "Cannot standardize a dataset with zero-variance column(s): "
                f"{np.where(constant)[0].tolist()}."
            )
        xc = xc / scale

    # Decompose the data, keep a complete basis unless it is truncated
    full_basis = num_samples < num_features and (
        n_components is None or n_components > num_samples
    )
    sv, vt = svd_components(np.ascontiguousarray(xc), full_basis, tie_tolerance)

    variances = sv**2 / (num_samples - 1)
    total_variance = float(np.cumsum(variances)[-1])

    # Narrow down the components, if requested
    if n_components is not None:
        sv, vt, variances = sv[:n_components], vt[:n_components], variances[:n_components]

    # Express the observations in the loading basis
    loadings = np.ascontiguousarray(vt.T)
    scores = xc @ loadings

    logger.debug(
        "Decomposed a (%d, %d) dataset into %d principal components.",
        num_samples,
        num_features,
        loadings.shape[1],
    )

    return PCADecomposition(
        mean=meanx,
        loadings=loadings,
        variances=variances,
        scores=scores,
        singular_values=sv,
        total_variance=total_variance,
        scale=scale,
    )


def project(decomposition, k):
    """Returns the scores of the observations on the first `k` components.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition
    k : int
        Number of components to project onto, 1 <= k <= K

    Returns
    -------
    np.ndarray
        (N, k) Scores of the observations
    """
    k = check_component_count(k, decomposition.n_components)

    return decomposition.scores[:, :k].copy()


def inverse_transform(decomposition, scores):
    """Maps component scores back to the original feature space.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition
    scores : array_like
        (M, k) Scores on the first k components

    Returns
    -------
    np.ndarray
        (M, D) Observations in the original feature space
    """
    scores = check_dataset(scores, min_samples=1, name="score matrix")
    k = check_component_count(scores.shape[1], decomposition.n_components)

    x = scores @ decomposition.loadings[:, :k].T
    if decomposition.scale is not None:
        x *= decomposition.scale

    return x + decomposition.mean


def reconstruct(decomposition, k):
    """Approximates the original observations using the first `k` components.

    The reconstruction error is non-increasing in `k` and vanishes when
    all the components of a complete decomposition are used.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition
    k : int
        Number of components to use, 1 <= k <= K

    Returns
    -------
    np.ndarray
        (N, D) Approximation of the original observations
    """
    return inverse_transform(decomposition, project(decomposition, k))


def transform(decomposition, x, k=None):
    """Projects new observations onto the first `k` components.

    The observations are centered (and scaled) with the statistics of the
    dataset the decomposition was computed from.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition
    x : array_like
        (M, D) New observations
    k : int, optional
        Number of components to project onto. Defaults to all of them.

    Returns
    -------
    np.ndarray
        (M, k) Scores of the new observations
    """
    x = check_dataset(x, min_samples=1, name="observation matrix")
    if x.shape[1] != decomposition.n_features:
        raise InvalidInputError(
            f"The observations have {x.shape[1]} feature(s), the decomposition "
            f"expects {decomposition.n_features}."
        )
    if k is None:
        k = decomposition.n_components
    k = check_component_count(k, decomposition.n_components)

    xc = x - decomposition.mean
    if decomposition.scale is not None:
        xc /= decomposition.scale

    return xc @ decomposition.loadings[:, :k]


def reconstruction_error(decomposition, x, k):
    """Sum of squared differences between a dataset and its reconstruction.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition of `x`
    x : array_like
        (N, D) Dataset the decomposition was computed from
    k : int
        Number of components used in the reconstruction

    Returns
    -------
    float
        Sum of squared residuals
    """
    x = check_dataset(x)
    if x.shape != (decomposition.n_samples, decomposition.n_features):
        raise InvalidInputError(
            f"The dataset has shape {x.shape}, the decomposition was computed "
            f"from a ({decomposition.n_samples}, {decomposition.n_features}) "
            "dataset."
        )

    return float(np.sum((x - reconstruct(decomposition, k)) ** 2))


def explained_variance_ratio(decomposition):
    """Fraction of the total variance explained by each component.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition

    Returns
    -------
    np.ndarray
        (K) Explained variance ratios, each in [0, 1]
    """
    if decomposition.total_variance <= 0.0:
        raise InvalidInputError(
            "The explained variance is undefined for a dataset with no variance."
        )

    return decomposition.variances / decomposition.total_variance


def cumulative_explained_variance(decomposition, k=None):
    """Fraction of the total variance explained by the first components.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition
    k : int, optional
        If specified, only return the fraction explained by the first `k`
        components

    Returns
    -------
    Union[np.ndarray, float]
        (K) Cumulative explained variance ratios, non-decreasing and equal
        to 1 once all D components are included. If `k` is specified, the
        value for the first `k` components only.
    """
    if decomposition.total_variance <= 0.0:
        raise InvalidInputError(
            "The explained variance is undefined for a dataset with no variance."
        )

    # The total variance is the last partial sum, so the full ratio is exactly 1
    cumulative = np.minimum(
        np.cumsum(decomposition.variances) / decomposition.total_variance, 1.0
    )
    if k is not None:
        k = check_component_count(k, decomposition.n_components)
        return float(cumulative[k - 1])

    return cumulative


def n_components_for_variance(decomposition, fraction):
    """Smallest number of components which explains a fraction of the variance.

    Parameters
    ----------
    decomposition : PCADecomposition
        Principal component decomposition
    fraction : float
        Target fraction of the total variance, in (0, 1]

    Returns
    -------
    int
        Smallest k such that the first k components explain at least
        `fraction` of the total variance
    """
    if not 0.0 < fraction <= 1.0:
        raise InvalidInputError(
            f"The variance fraction must be in (0, 1], got {fraction}."
        )

    cumulative = cumulative_explained_variance(decomposition)
    reached = np.where(cumulative >= fraction)[0]
    if not len(reached):
        raise InvalidInputError(
            f"The {decomposition.n_components} retained component(s) only "
            f"explain {cumulative[-1]:.3%} of the variance."
        )

    return int(reached[0]) + 1
