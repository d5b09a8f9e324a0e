"""Tests for statmod.moments module."""

import numpy as np
import pytest
from scipy import linalg

from statmod.errors import (
    InvalidInputError,
    NumericalInstabilityError,
    NumericalInstabilityWarning,
)
from statmod.moments import (
    AffineTransform,
    fit_moment_transform,
    match_moments,
    sample_with_moments,
)


def random_covariance(rng, size):
    """Random symmetric positive definite matrix."""
    a = rng.normal(size=(size, size))
    return a @ a.T + size * np.eye(size)


class TestMatchMoments:
    """Test transforms which impose an exact mean and covariance."""

    @pytest.mark.parametrize("num_features", [1, 2, 5])
    def test_exact_moments(self, rng, num_features):
        """Test that the output has exactly the target moments."""
        x = rng.exponential(size=(num_features + 10, num_features)) * 7.0 - 3.0
        target_mean = rng.normal(size=num_features)
        target_cov = random_covariance(rng, num_features)

        y = match_moments(x, target_mean, target_cov)
        assert y.shape == x.shape
        assert np.allclose(y.mean(axis=0), target_mean, rtol=1e-6, atol=1e-9)
        assert np.allclose(
            np.cov(y.T).reshape(num_features, num_features),
            target_cov,
            rtol=1e-6,
            atol=1e-9,
        )

    def test_scenario(self, rng):
        """Test a small 2D sample with target mean (1, 1)."""
        target_cov = np.array([[2.0, 1.0], [1.0, 3.0]])
        y = match_moments(rng.normal(size=(10, 2)), [1.0, 1.0], target_cov)
        assert np.allclose(y.mean(axis=0), [1.0, 1.0], rtol=1e-6, atol=1e-9)
        assert np.allclose(np.cov(y.T), target_cov, rtol=1e-6, atol=1e-9)

    def test_transform_matrix(self, rng):
        """Test that the linear part is built from the Cholesky factors."""
        x = rng.normal(size=(30, 3))
        target_mean = np.array([1.0, -2.0, 0.5])
        target_cov = random_covariance(rng, 3)

        transform = fit_moment_transform(x, target_mean, target_cov)
        assert isinstance(transform, AffineTransform)
        assert transform.n_features == 3

        r_x = linalg.cholesky(np.cov(x.T), lower=False)
        r = linalg.cholesky(target_cov, lower=False)
        assert np.allclose(transform.matrix, (np.linalg.inv(r_x) @ r).T)
        assert np.allclose(transform.offset, target_mean - transform.matrix @ x.mean(axis=0))

        # The transform maps the sample covariance onto the target
        covx = np.cov(x.T)
        assert np.allclose(transform.matrix @ covx @ transform.matrix.T, target_cov)

    def test_apply(self, rng):
        """Test that the transform applies row by row to any dataset."""
        x = rng.normal(size=(20, 2))
        transform = fit_moment_transform(x, [0.0, 0.0], np.eye(2))

        row = rng.normal(size=(1, 2))
        expected = transform.matrix @ row[0] + transform.offset
        assert np.allclose(transform.apply(row)[0], expected)

        with pytest.raises(InvalidInputError):
            transform.apply(rng.normal(size=(4, 3)))

    def test_input_not_modified(self, rng):
        """Test that the input sample is left untouched."""
        x = rng.normal(size=(12, 2))
        original = x.copy()
        match_moments(x, [1.0, 1.0], [[2.0, 1.0], [1.0, 3.0]])
        assert np.array_equal(x, original)

    def test_already_matching(self, rng):
        """Test that a sample with the target moments is left unchanged."""
        x = match_moments(rng.normal(size=(15, 2)), [1.0, 1.0], [[2.0, 1.0], [1.0, 3.0]])
        y = match_moments(x, [1.0, 1.0], [[2.0, 1.0], [1.0, 3.0]])
        assert np.allclose(x, y)

    def test_too_few_samples(self, rng):
        """Test that N <= D is rejected."""
        with pytest.raises(InvalidInputError, match="more observations"):
            match_moments(rng.normal(size=(3, 3)), np.zeros(3), np.eye(3))

    def test_singular_sample(self, rng):
        """Test that a sample with a constant feature is rejected."""
        x = rng.normal(size=(10, 2))
        x[:, 1] = 4.0
        with pytest.raises(InvalidInputError, match="singular"):
            match_moments(x, [0.0, 0.0], np.eye(2))

    @pytest.mark.parametrize(
        "target_cov",
        [
            [[1.0, 2.0], [2.0, 1.0]],
            [[1.0, 0.0], [0.0, 0.0]],
            [[-1.0, 0.0], [0.0, 1.0]],
        ],
    )
    def test_not_positive_definite(self, rng, target_cov):
        """Test that the target covariance must be positive definite."""
        with pytest.raises(InvalidInputError, match="positive definite"):
            match_moments(rng.normal(size=(10, 2)), [0.0, 0.0], target_cov)

    @pytest.mark.parametrize(
        "target_mean, target_cov",
        [
            ([0.0], np.eye(2)),
            ([0.0, np.nan], np.eye(2)),
            ([0.0, 0.0], np.eye(3)),
            ([0.0, 0.0], [[1.0, 0.5], [0.0, 1.0]]),
            ([0.0, 0.0], [[1.0, np.inf], [np.inf, 1.0]]),
        ],
    )
    def test_invalid_targets(self, rng, target_mean, target_cov):
        """Test that malformed targets are rejected."""
        with pytest.raises(InvalidInputError):
            match_moments(rng.normal(size=(10, 2)), target_mean, target_cov)

    def test_invalid_sample(self):
        """Test that malformed samples are rejected."""
        with pytest.raises(InvalidInputError):
            match_moments([[1.0, np.nan], [2.0, 3.0], [0.0, 1.0]], [0.0, 0.0], np.eye(2))
        with pytest.raises(InvalidInputError):
            match_moments([1.0, 2.0, 3.0], [0.0], np.eye(1))


class TestConditioning:
    """Test the handling of ill-conditioned sample covariance matrices."""

    @staticmethod
    def collinear_sample(rng):
        """Sample of two nearly collinear features."""
        x1 = rng.normal(size=50)
        return np.column_stack([x1, x1 + 1e-3 * rng.normal(size=50)])

    def test_error_mode(self, rng):
        """Test that an ill-conditioned sample raises in error mode."""
        x = self.collinear_sample(rng)
        with pytest.raises(NumericalInstabilityError) as excinfo:
            match_moments(x, [0.0, 0.0], np.eye(2), cond_threshold=1e3)

        assert excinfo.value.cond > 1e3
        assert excinfo.value.threshold == 1e3

    def test_warn_mode(self, rng):
        """Test that an ill-conditioned sample warns in warn mode, and that
        the transform is still computed."""
        x = self.collinear_sample(rng)
        with pytest.warns(NumericalInstabilityWarning):
            y = match_moments(
                x, [0.0, 0.0], np.eye(2), cond_threshold=1e3, instability="warn"
            )

        assert np.allclose(y.mean(axis=0), 0.0, atol=1e-6)
        assert np.allclose(np.cov(y.T), np.eye(2), atol=1e-6)

    def test_default_threshold(self, rng):
        """Test that a moderately conditioned sample passes by default."""
        x = self.collinear_sample(rng)
        y = match_moments(x, [0.0, 0.0], np.eye(2))
        assert np.allclose(np.cov(y.T), np.eye(2), atol=1e-6)

    def test_invalid_mode(self, rng):
        """Test that unknown instability modes are rejected."""
        with pytest.raises(InvalidInputError):
            match_moments(rng.normal(size=(10, 2)), [0.0, 0.0], np.eye(2), instability="ignore")


class TestSampleWithMoments:
    """Test random samples with exact moments."""

    def test_moments(self, seed):
        """Test that the sample has the requested shape and moments."""
        target_cov = [[5.0, 2.0], [2.0, 2.0]]
        x = sample_with_moments([1.0, 1.0], target_cov, 100, seed=seed)
        assert x.shape == (100, 2)
        assert np.allclose(x.mean(axis=0), [1.0, 1.0])
        assert np.allclose(np.cov(x.T), target_cov)

    def test_reproducible(self, seed):
        """Test that a fixed seed gives the same sample."""
        first = sample_with_moments([0.0, 0.0, 0.0], np.eye(3), 10, seed=seed)
        second = sample_with_moments([0.0, 0.0, 0.0], np.eye(3), 10, seed=seed)
        assert np.array_equal(first, second)

    @pytest.mark.parametrize("n_samples", [2, -1, 10.5])
    def test_invalid_size(self, n_samples):
        """Test that too few samples are rejected."""
        with pytest.raises(InvalidInputError):
            sample_with_moments([0.0, 0.0], np.eye(2), n_samples)

    def test_invalid_mean(self):
        """Test that the target mean must be a non-empty vector."""
        with pytest.raises(InvalidInputError):
            sample_with_moments([], np.eye(1), 10)
        with pytest.raises(InvalidInputError):
            sample_with_moments([[0.0, 0.0]], np.eye(2), 10)
