"""
Property-based tests for invariants of the dictionary learning building blocks.

Uses Hypothesis to generate matrices and regularization weights and checks
properties that must hold for every input:
1. Row removal keeps the remaining rows in order
2. Projection bounds atom norms and is idempotent
3. The objective matches its closed form
4. LARS codes satisfy the LASSO optimality conditions
"""

import numpy as np
from hypothesis import given, strategies as st, settings
from hypothesis.extra.numpy import arrays
from sparse_dictionary import SparseCoding, FixedInitializer, LarsLasso, remove_rows
from tests.conftest import assert_atoms_bounded, assert_lasso_kkt

finite_floats = st.floats(min_value=-10.0, max_value=10.0, allow_nan=False, allow_infinity=False)


@st.composite
def matrix_and_rows(draw):
    """A matrix plus a sorted subset of its row indices."""
    n_rows = draw(st.integers(min_value=1, max_value=12))
    n_cols = draw(st.integers(min_value=1, max_value=6))
    matrix = draw(arrays(np.float64, (n_rows, n_cols), elements=finite_floats))
    rows = sorted(draw(st.sets(st.integers(min_value=0, max_value=n_rows - 1))))
    return matrix, rows


@st.composite
def coding_problem(draw):
    """Seeded data, a starting dictionary and regularization weights."""
    atoms = draw(st.integers(min_value=1, max_value=4))
    n_features = draw(st.integers(min_value=atoms + 2, max_value=9))
    n_signals = draw(st.integers(min_value=atoms, max_value=12))
    seed = draw(st.integers(min_value=0, max_value=2**31 - 1))
    lambda1 = draw(st.floats(min_value=0.01, max_value=2.0))
    lambda2 = draw(st.sampled_from([0.0, 0.1, 1.0]))

    rng = np.random.default_rng(seed)
    X = rng.standard_normal((n_features, n_signals))
    D = rng.standard_normal((n_features, atoms)) * rng.uniform(0.2, 3.0, size=atoms)
    return X, D, lambda1, lambda2


class TestRemoveRowsProperties:

    @given(matrix_and_rows())
    @settings(max_examples=100, deadline=None)
    def test_remaining_rows_in_order(self, case):
        matrix, rows = case
        out = remove_rows(matrix, rows)

        kept = [i for i in range(matrix.shape[0]) if i not in set(rows)]
        assert out.shape == (len(kept), matrix.shape[1])
        np.testing.assert_array_equal(out, matrix[kept])


class TestModelProperties:

    @given(coding_problem())
    @settings(max_examples=30, deadline=None)
    def test_projection_bounds_and_is_idempotent(self, problem):
        X, D, lambda1, lambda2 = problem
        model = SparseCoding(X, atoms=D.shape[1], lambda1=lambda1, lambda2=lambda2,
                             initializer=FixedInitializer(D))

        norms_before = np.linalg.norm(D, axis=0)
        once = model.project_dictionary().copy()
        twice = model.project_dictionary()

        assert_atoms_bounded(once, eps=1e-12)
        np.testing.assert_allclose(twice, once)
        short = norms_before <= 1
        np.testing.assert_array_equal(once[:, short], D[:, short])

    @given(coding_problem())
    @settings(max_examples=30, deadline=None)
    def test_objective_closed_form(self, problem):
        X, D, lambda1, lambda2 = problem
        model = SparseCoding(X, atoms=D.shape[1], lambda1=lambda1, lambda2=lambda2,
                             initializer=FixedInitializer(D))
        model.optimize_code()

        Z = model.codes
        expected = (0.5 * np.sum((X - D @ Z) ** 2) + lambda1 * np.sum(np.abs(Z))
                    + 0.5 * lambda2 * np.sum(Z ** 2))
        np.testing.assert_allclose(model.objective(), expected, rtol=1e-10)

    @given(coding_problem())
    @settings(max_examples=30, deadline=None)
    def test_codes_satisfy_optimality(self, problem):
        X, D, lambda1, lambda2 = problem
        solver = LarsLasso(D.T @ D, lambda1=lambda1, lambda2=lambda2)

        for i in range(X.shape[1]):
            z = solver.regress(D, X[:, i])
            assert_lasso_kkt(D, X[:, i], z, lambda1, lambda2, atol=1e-5)
