"""Top-level module of the statmod source code.

Numerical routines used throughout the statistical modelling course notes:
- `pca`: principal component decomposition, projection and reconstruction
- `moments`: affine transforms which impose an exact mean and covariance
- `regression`: least-squares and principal component regression
"""

from .errors import (
    InvalidInputError,
    NumericalInstabilityError,
    NumericalInstabilityWarning,
    StatModError,
)
from .moments import (
    AffineTransform,
    fit_moment_transform,
    match_moments,
    sample_with_moments,
)
from .pca import (
    PCADecomposition,
    cumulative_explained_variance,
    explained_variance_ratio,
    principal_components,
    project,
    reconstruct,
    transform,
)
from .version import __version__
