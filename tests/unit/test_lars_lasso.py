"""
Unit tests for the LARS/LASSO code solver.

Checks solutions against the LASSO optimality conditions and against
scikit-learn's coordinate descent Lasso.
"""

import numpy as np
import pytest
from sklearn.linear_model import Lasso
from sparse_dictionary import LarsLasso, sparse_encode
from tests.conftest import assert_lasso_kkt


@pytest.fixture
def problem():
    rng = np.random.default_rng(3)
    D = rng.standard_normal((12, 8))
    D /= np.linalg.norm(D, axis=0, keepdims=True)
    z_true = np.zeros(8)
    z_true[[1, 5]] = [1.5, -2.0]
    x = D @ z_true + 0.05 * rng.standard_normal(12)
    return D, x


class TestLarsLasso:

    def test_lasso_optimality(self, problem):
        D, x = problem
        z = LarsLasso(D.T @ D, lambda1=0.1).regress(D, x)

        assert z.shape == (8,)
        assert_lasso_kkt(D, x, z, 0.1)

    def test_matches_coordinate_descent(self, problem):
        D, x = problem
        lambda1 = 0.2
        z = LarsLasso(D.T @ D, lambda1=lambda1).regress(D, x)

        # sklearn scales the data term by 1/(2 n_samples)
        cd = Lasso(alpha=lambda1 / D.shape[0], fit_intercept=False, tol=1e-12, max_iter=100000)
        cd.fit(D, x)

        np.testing.assert_allclose(z, cd.coef_, atol=1e-5)

    def test_elastic_net_optimality(self, problem):
        D, x = problem
        z = LarsLasso(D.T @ D, lambda1=0.1, lambda2=0.5).regress(D, x)
        assert_lasso_kkt(D, x, z, 0.1, lambda2=0.5)

    def test_elastic_net_shrinks_more_than_lasso(self, problem):
        D, x = problem
        gram = D.T @ D
        z_l1 = LarsLasso(gram, lambda1=0.1).regress(D, x)
        z_en = LarsLasso(gram, lambda1=0.1, lambda2=1.0).regress(D, x)
        assert np.linalg.norm(z_en) < np.linalg.norm(z_l1)

    def test_large_lambda_gives_zero_code(self, problem):
        D, x = problem
        lambda1 = np.max(np.abs(D.T @ x)) + 1.0
        z = LarsLasso(D.T @ D, lambda1=lambda1).regress(D, x)
        np.testing.assert_array_equal(z, 0.0)

    def test_shared_gram_not_modified(self, problem):
        D, x = problem
        gram = D.T @ D
        before = gram.copy()
        LarsLasso(gram, lambda1=0.1, lambda2=0.3).regress(D, x)
        np.testing.assert_array_equal(gram, before)

    def test_writes_into_code_column(self, problem):
        D, x = problem
        codes = np.zeros((8, 3))
        column = codes[:, 1]

        result = LarsLasso(D.T @ D, lambda1=0.1).regress(D, x, out=column)

        assert result is column
        assert np.count_nonzero(codes[:, 1]) > 0
        np.testing.assert_array_equal(codes[:, [0, 2]], 0.0)
        np.testing.assert_allclose(codes[:, 1], LarsLasso(D.T @ D, 0.1).regress(D, x))

    def test_without_precomputed_gram(self, problem):
        D, x = problem
        z_gram = LarsLasso(D.T @ D, lambda1=0.1, lambda2=0.2).regress(D, x)
        z_plain = LarsLasso(None, lambda1=0.1, lambda2=0.2, use_cholesky=False).regress(D, x)
        np.testing.assert_allclose(z_gram, z_plain, atol=1e-10)


class TestSparseEncode:

    def test_columns_solved_independently(self, problem):
        D, _ = problem
        X = np.random.default_rng(8).standard_normal((12, 5))
        Z = sparse_encode(D, X, lambda1=0.1)

        assert Z.shape == (8, 5)
        for i in range(5):
            np.testing.assert_allclose(Z[:, i], LarsLasso(D.T @ D, 0.1).regress(D, X[:, i]))

    def test_parallel_matches_sequential(self, problem):
        D, _ = problem
        X = np.random.default_rng(9).standard_normal((12, 23))
        Z_seq = sparse_encode(D, X, lambda1=0.05, lambda2=0.1)
        Z_par = sparse_encode(D, X, lambda1=0.05, lambda2=0.1, n_jobs=3)
        np.testing.assert_allclose(Z_par, Z_seq)

    def test_out_is_filled_in_place(self, problem):
        D, _ = problem
        X = np.random.default_rng(10).standard_normal((12, 4))
        out = np.full((8, 4), 7.0)
        result = sparse_encode(D, X, lambda1=0.1, out=out)
        assert result is out
        np.testing.assert_allclose(out, sparse_encode(D, X, lambda1=0.1))


def test_solver_satisfies_protocol(problem):
    from sparse_dictionary.core.interfaces import CodeSolver
    D, _ = problem
    assert isinstance(LarsLasso(D.T @ D, lambda1=0.1), CodeSolver)


def test_threaded_encode_writes_into_caller_buffer(problem):
    D, _ = problem
    X = np.random.default_rng(11).standard_normal((12, 9))
    out = np.full((8, 9), np.nan)

    result = sparse_encode(D, X, lambda1=0.1, out=out, n_jobs=3)

    assert result is out
    assert not np.any(np.isnan(out))
    np.testing.assert_allclose(out, sparse_encode(D, X, lambda1=0.1))
