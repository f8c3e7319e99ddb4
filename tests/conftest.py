"""
Test configuration and fixtures for dictionary learning tests.

Provides common data generators and assertion helpers for all test modules.
"""

import numpy as np
import pytest
from scipy import linalg


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducible tests."""
    return 42


@pytest.fixture
def tolerance():
    """Standard numerical tolerance."""
    return 1e-6


def make_cluster_signals(n_features=6, per_cluster=4, scale=2.0, noise=0.01,
                         active_features=None, seed=0):
    """
    Two well separated clusters of signals around orthonormal centroids.

    Returns (signals, centroids) with signals of shape
    (n_features, 2 * per_cluster); the first ``per_cluster`` columns belong to
    centroid 0. With ``active_features`` only the leading features carry
    signal or noise and the rest are exactly zero.
    """
    rng = np.random.default_rng(seed)
    used = n_features if active_features is None else active_features

    Q, _ = linalg.qr(rng.standard_normal((used, 2)), mode='economic')
    centroids = np.zeros((n_features, 2))
    centroids[:used] = Q

    signals = np.zeros((n_features, 2 * per_cluster))
    for c in range(2):
        for i in range(per_cluster):
            col = c * per_cluster + i
            signals[:, col] = scale * centroids[:, c]
            if noise > 0:
                signals[:used, col] += noise * rng.standard_normal(used)
    return signals, centroids


@pytest.fixture
def cluster_data():
    """Eight six-dimensional signals in two clusters of four."""
    signals, centroids = make_cluster_signals()
    return {'signals': signals, 'centroids': centroids}


@pytest.fixture
def synthetic_data(random_seed):
    """Signals generated from a sparse code over a random unit-norm dictionary."""
    rng = np.random.default_rng(random_seed)
    n_features, n_components, n_samples = 10, 5, 60

    true_dict = rng.standard_normal((n_features, n_components))
    true_dict /= np.linalg.norm(true_dict, axis=0, keepdims=True)

    true_codes = rng.laplace(scale=1.0, size=(n_components, n_samples))
    true_codes[np.abs(true_codes) < 0.8] = 0

    signals = true_dict @ true_codes + 0.01 * rng.standard_normal((n_features, n_samples))

    return {
        'signals': signals,
        'true_codes': true_codes,
        'true_dict': true_dict,
        'n_features': n_features,
        'n_components': n_components,
        'n_samples': n_samples,
    }


def assert_atoms_bounded(D, eps=1e-6):
    """Every dictionary column has norm at most 1 + eps."""
    norms = np.linalg.norm(D, axis=0)
    assert np.all(norms <= 1.0 + eps), f"Atom norms exceed 1: {norms}"


def assert_lasso_kkt(D, x, z, lambda1, lambda2=0.0, atol=1e-6):
    """Optimality conditions of 0.5||x - Dz||² + λ1||z||₁ + 0.5 λ2||z||²."""
    correlation = D.T @ (x - D @ z) - lambda2 * z
    active = z != 0
    np.testing.assert_allclose(correlation[active], lambda1 * np.sign(z[active]), atol=atol)
    assert np.all(np.abs(correlation[~active]) <= lambda1 + atol)
