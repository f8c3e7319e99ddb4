"""
LARS/LASSO sparse regression against a fixed dictionary.

Solves, for one signal x at a time:

    minimize_z  0.5||x - D z||² + λ1||z||₁ + 0.5 λ2||z||²

The elastic-net case (λ2 > 0) is the LASSO on the augmented system
[D; sqrt(λ2) I] with target [x; 0]. That system has Gram matrix DᵀD + λ2 I and
correlation vector Dᵀx, so only the Gram diagonal changes. The active-set
path with Cholesky updates comes from scikit-learn's ``lars_path_gram``.

References:
    Efron, Hastie, Johnstone & Tibshirani (2004). Least Angle Regression.
    Zou & Hastie (2005). Regularization and variable selection via the elastic net.
"""

from __future__ import annotations
import logging
from typing import Optional
import numpy as np
from joblib import Parallel, delayed, effective_n_jobs
from sklearn.linear_model import lars_path_gram

logger = logging.getLogger(__name__)


class LarsLasso:
    """
    Gram-based LARS solver for the (elastic-net) LASSO.

    The Gram matrix DᵀD is computed once by the caller and shared by every
    signal encoded against the same dictionary; it is never modified.

    Args:
        gram: DᵀD for the dictionary that will be passed to ``regress``
        lambda1: L1 weight (>= 0)
        lambda2: L2 weight (>= 0)
        use_cholesky: Solve with the precomputed Gram matrix. When False the
            Gram matrix is rebuilt from the dictionary on every call.
    """

    def __init__(self, gram: Optional[np.ndarray], lambda1: float, lambda2: float = 0.0,
                 use_cholesky: bool = True):
        self.lambda1 = float(lambda1)
        self.lambda2 = float(lambda2)
        self.use_cholesky = use_cholesky
        self._gram = None if gram is None else self._augment(np.asarray(gram, dtype=float))

    def _augment(self, gram: np.ndarray) -> np.ndarray:
        if self.lambda2 > 0:
            gram = gram + self.lambda2 * np.eye(gram.shape[0])
        return gram

    def regress(self, dictionary: np.ndarray, signal: np.ndarray,
                out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Compute the sparse coefficients of ``signal`` over ``dictionary``.

        Args:
            dictionary: Dictionary matrix (n_features, n_atoms)
            signal: Target signal (n_features,)
            out: Optional (n_atoms,) buffer, e.g. a column view of a code
                matrix; the solution is written into it and it is returned

        Returns:
            Coefficient vector of length n_atoms
        """
        n_features, n_atoms = dictionary.shape
        if self.use_cholesky and self._gram is not None:
            gram = self._gram
        else:
            gram = self._augment(dictionary.T @ dictionary)

        xy = dictionary.T @ signal

        # lars_path_gram scales the data term by 1/n_samples
        _, _, coef = lars_path_gram(
            xy,
            gram,
            n_samples=n_features,
            alpha_min=self.lambda1 / n_features,
            method="lasso",
            copy_Gram=True,
            return_path=False,
        )
        coef = np.asarray(coef, dtype=float).reshape(n_atoms)

        if out is None:
            return coef
        out[:] = coef
        return out


def _encode_columns(dictionary, data, gram, lambda1, lambda2, out, lo, hi):
    solver = LarsLasso(gram, lambda1, lambda2)
    for i in range(lo, hi):
        if (i % 100) == 0:
            logger.debug("Optimization at point %d.", i)
        solver.regress(dictionary, data[:, i], out=out[:, i])


def sparse_encode(
    dictionary: np.ndarray,
    data: np.ndarray,
    lambda1: float,
    lambda2: float = 0.0,
    gram: Optional[np.ndarray] = None,
    out: Optional[np.ndarray] = None,
    n_jobs: Optional[int] = 1,
) -> np.ndarray:
    """
    Encode every column of ``data`` against ``dictionary``.

    Columns are independent problems sharing one read-only Gram matrix. With
    ``n_jobs != 1`` they are split into contiguous chunks and solved on a
    joblib thread pool; each worker writes its own column range of ``out``.

    Args:
        dictionary: Dictionary matrix (n_features, n_atoms)
        data: Signals as columns (n_features, n_signals)
        lambda1: L1 weight
        lambda2: L2 weight
        gram: Precomputed DᵀD (computed here if None)
        out: Optional (n_atoms, n_signals) array receiving the codes in place
        n_jobs: joblib worker count (1 runs in the calling thread)

    Returns:
        Code matrix (n_atoms, n_signals), ``out`` itself when given
    """
    dictionary = np.asarray(dictionary, dtype=float)
    data = np.asarray(data, dtype=float)
    if gram is None:
        gram = dictionary.T @ dictionary

    n_atoms, n_signals = dictionary.shape[1], data.shape[1]
    if out is None:
        out = np.zeros((n_atoms, n_signals))

    if n_jobs is None or n_jobs == 1 or n_signals < 2:
        _encode_columns(dictionary, data, gram, lambda1, lambda2, out, 0, n_signals)
        return out

    n_chunks = min(effective_n_jobs(n_jobs), n_signals)
    bounds = np.linspace(0, n_signals, n_chunks + 1).astype(int)
    chunks = [(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]

    Parallel(n_jobs=n_jobs, backend="threading")(
        delayed(_encode_columns)(dictionary, data, gram, lambda1, lambda2, out, lo, hi)
        for lo, hi in chunks
    )
    return out
