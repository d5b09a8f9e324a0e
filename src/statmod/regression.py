"""Linear regression on raw features and on principal component scores.

Principal component regression (PCR) regresses an outcome on the scores of
the first few principal components of the predictors. Because the scores
are centered, mutually orthogonal and ordered by descending variance, the
number of components acts as a regularization knob, which is tuned by
K-fold cross-validation.
"""

from dataclasses import dataclass

import numpy as np

from statmod.errors import InvalidInputError
from statmod.pca import PCADecomposition, principal_components, transform
from statmod.utils.logger import logger
from statmod.utils.validation import (
    check_component_count,
    check_dataset,
    check_outcome,
)

__all__ = [
    "LinearFit",
    "PCRModel",
    "CrossValidation",
    "least_squares",
    "pcr_fit",
    "cross_validate_pcr",
]


@dataclass(eq=False)
class LinearFit:
    """Ordinary least-squares fit `y = intercept + x @ coef`.

    Attributes
    ----------
    intercept : float
        Fitted intercept
    coef : np.ndarray
        (D) Fitted slope of each predictor
    rss : float
        Residual sum of squares on the training data
    r_squared : float
        Coefficient of determination on the training data. NaN if the
        outcome is constant.
    """

    intercept: float
    coef: np.ndarray
    rss: float
    r_squared: float

    def predict(self, x):
        """Predicts the outcome of new observations.

        Parameters
        ----------
        x : array_like
            (M, D) Predictors

        Returns
        -------
        np.ndarray
            (M) Predicted outcomes
        """
        x = check_dataset(x, min_samples=1, name="predictor matrix")
        if x.shape[1] != len(self.coef):
            raise InvalidInputError(
                f"The predictors have {x.shape[1]} feature(s), the fit "
                f"expects {len(self.coef)}."
            )

        return self.intercept + x @ self.coef


def least_squares(x, y):
    """Fits an ordinary least-squares regression with an intercept.

    Parameters
    ----------
    x : array_like
        (N, D) Predictors
    y : array_like
        (N) Outcome

    Returns
    -------
    LinearFit
        Fitted regression
    """
    x = check_dataset(x, name="predictor matrix")
    y = check_outcome(y, x.shape[0])

    # Solve the least-squares problem with a column of 1s for the intercept
    design = np.c_[np.ones(x.shape[0]), x]
    beta, _, _, _ = np.linalg.lstsq(design, y, rcond=None)

    residuals = y - design @ beta
    rss = float(residuals @ residuals)
    tss = float(np.sum((y - np.mean(y)) ** 2))
    r_squared = 1.0 - rss / tss if tss > 0.0 else np.nan

    return LinearFit(intercept=float(beta[0]), coef=beta[1:], rss=rss, r_squared=r_squared)


@dataclass(eq=False)
class PCRModel:
    """Principal component regression model.

    Attributes
    ----------
    decomposition : PCADecomposition
        Decomposition of the training predictors
    fit : LinearFit
        Least-squares fit of the outcome on the first `n_components` scores
    n_components : int
        Number of components used as regressors
    """

    decomposition: PCADecomposition
    fit: LinearFit
    n_components: int

    @property
    def coef(self):
        """(D) Regression slopes expressed in terms of the original features."""
        coef = self.decomposition.loadings[:, : self.n_components] @ self.fit.coef
        if self.decomposition.scale is not None:
            coef = coef / self.decomposition.scale

        return coef

    @property
    def intercept(self):
        """Regression intercept expressed in terms of the original features."""
        return self.fit.intercept - float(self.decomposition.mean @ self.coef)

    def predict(self, x):
        """Predicts the outcome of new observations.

        Parameters
        ----------
        x : array_like
            (M, D) Predictors in the original feature space

        Returns
        -------
        np.ndarray
            (M) Predicted outcomes
        """
        return self.fit.predict(transform(self.decomposition, x, self.n_components))


def pcr_fit(x, y, n_components, standardize=False, **kwargs):
    """Fits a principal component regression.

    Parameters
    ----------
    x : array_like
        (N, D) Predictors
    y : array_like
        (N) Outcome
    n_components : int
        Number of leading components used as regressors
    standardize : bool, default False
        If `True`, scale the predictors to unit variance before the
        decomposition
    **kwargs : dict, optional
        Additional arguments passed to :func:`principal_components`

    Returns
    -------
    PCRModel
        Fitted model
    """
    x = check_dataset(x, name="predictor matrix")
    y = check_outcome(y, x.shape[0])
    n_components = check_component_count(n_components, x.shape[1])

    decomposition = principal_components(
        x, standardize=standardize, n_components=n_components, **kwargs
    )
    fit = least_squares(decomposition.scores, y)

    return PCRModel(decomposition=decomposition, fit=fit, n_components=n_components)


@dataclass(eq=False)
class CrossValidation:
    """Cross-validated prediction error of principal component regressions.

    Attributes
    ----------
    n_components : np.ndarray
        (K) Number of components of each candidate model, 1 to K
    rmsep : np.ndarray
        (K) Root mean squared error of prediction of each candidate model
    n_folds : int
        Number of cross-validation folds
    """

    n_components: np.ndarray
    rmsep: np.ndarray
    n_folds: int

    @property
    def best(self):
        """Number of components with the lowest prediction error."""
        return int(self.n_components[np.argmin(self.rmsep)])


def cross_validate_pcr(
    x, y, max_components=None, n_folds=10, seed=0, standardize=False, **kwargs
):
    """Estimates the prediction error of PCR models by K-fold cross-validation.

    The observations are shuffled and split into `n_folds` folds of
    near-equal size. Each fold is predicted in turn by models trained on
    the remaining folds, for every number of components from 1 to
    `max_components`.

    Parameters
    ----------
    x : array_like
        (N, D) Predictors
    y : array_like
        (N) Outcome
    max_components : int, optional
        Largest number of components to evaluate. Defaults to the number
        of features, capped so that each training fold has more
        observations than regressors.
    n_folds : int, default 10
        Number of folds, between 2 and N
    seed : int, default 0
        Seed used to shuffle the observations
    standardize : bool, default False
        If `True`, scale the predictors to unit variance (using the
        statistics of each training fold)
    **kwargs : dict, optional
        Additional arguments passed to :func:`principal_components`

    Returns
    -------
    CrossValidation
        Prediction error of each candidate model
    """
    # Check input
    x = check_dataset(x, name="predictor matrix")
    y = check_outcome(y, x.shape[0])
    num_samples, num_features = x.shape
    if isinstance(n_folds, bool) or not isinstance(n_folds, (int, np.integer)):
        raise InvalidInputError(f"The number of folds must be an integer, got {n_folds!r}.")
    if n_folds < 2 or n_folds > num_samples:
        raise InvalidInputError(
            f"The number of folds must be between 2 and {num_samples}, got {n_folds}."
        )

    # Split the shuffled observations into folds
    rng = np.random.default_rng(seed)
    folds = np.array_split(rng.permutation(num_samples), n_folds)
    min_train = num_samples - max(len(f) for f in folds)
    if min_train < 2:
        raise InvalidInputError(
            "Each training fold must contain at least two observations."
        )

    if max_components is None:
        max_components = max(1, min(num_features, min_train - 1))
    max_components = check_component_count(max_components, num_features)

    # Accumulate the squared prediction errors of each candidate model
    sse = np.zeros(max_components)
    for test_index in folds:
        train_mask = np.ones(num_samples, dtype=bool)
        train_mask[test_index] = False

        decomposition = principal_components(
            x[train_mask],
            standardize=standardize,
            n_components=max_components,
            **kwargs,
        )
        test_scores = transform(decomposition, x[test_index])
        for k in range(1, max_components + 1):
            fit = least_squares(decomposition.scores[:, :k], y[train_mask])
            residuals = y[test_index] - fit.predict(test_scores[:, :k])
            sse[k - 1] += residuals @ residuals

    rmsep = np.sqrt(sse / num_samples)
    logger.debug(
        "Cross-validated %d PCR model(s) over %d folds, best RMSEP %.4g.",
        max_components,
        n_folds,
        np.min(rmsep),
    )

    return CrossValidation(
        n_components=np.arange(1, max_components + 1), rmsep=rmsep, n_folds=n_folds
    )
