"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import numpy as np
import pytest


def pytest_addoption(parser):
    """Defines testing command line arguments that can be passed to any
    test scripts inside the general test directory.
    """
    # Optional command line argument to specify one or several random seeds
    parser.addoption(
        "--seed",
        type=int,
        nargs="+",
        action="store",
        default=[0, 1, 2],
        help="Random seed(s) used to generate test datasets (default: 0 1 2)",
    )


def pytest_generate_tests(metafunc):
    """Appends general parameters to all tests."""
    # If a test requires the fixture seed, use the command line option.
    if "seed" in metafunc.fixturenames:
        metafunc.parametrize("seed", metafunc.config.getoption("--seed"))


@pytest.fixture(name="rng")
def fixture_rng(seed):
    """Random number generator seeded with the command line seed(s).

    Parameters
    ----------
    seed : int
       Random seed
    """
    return np.random.default_rng(seed)


@pytest.fixture(name="dataset")
def fixture_dataset(rng):
    """Correlated (50, 4) dataset with features on different scales.

    Parameters
    ----------
    rng : np.random.Generator
       Seeded random number generator
    """
    mixing = rng.normal(size=(4, 4))
    scales = np.array([1.0, 10.0, 0.1, 3.0])

    return (rng.normal(size=(50, 4)) @ mixing) * scales + rng.normal(size=4)


def _match_signs(reference, other):
    """Flip the columns of `other` to match the sign of `reference`.

    Singular vectors are only defined up to a sign, so comparisons between
    two decompositions must allow for a sign flip of each component.

    Parameters
    ----------
    reference : np.ndarray
        (D, K) Reference column vectors
    other : np.ndarray
        (D, K) Column vectors to align

    Returns
    -------
    np.ndarray
        (D, K) Aligned copy of `other`
    """
    signs = np.sign(np.sum(reference * other, axis=0))
    signs[signs == 0] = 1.0

    return other * signs


@pytest.fixture(name="match_signs")
def fixture_match_signs():
    """Provides the sign alignment helper to the tests."""
    return _match_signs
