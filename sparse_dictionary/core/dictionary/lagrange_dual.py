"""
Dictionary update by Newton's method on the Lagrange dual.

With the codes Z fixed, the dictionary step solves

    minimize_D  0.5||X - D Z||_F²   subject to  ||d_j||₂ = 1 for every atom j

Introducing one multiplier u_j per atom, the minimizing dictionary for given
multipliers is

    Dᵀ = (Z Zᵀ + diag(u))⁻¹ Z Xᵀ

and the multipliers minimize the negated dual

    f(u) = trace((Z Xᵀ)ᵀ (Z Zᵀ + diag(u))⁻¹ Z Xᵀ) + Σ u_j

whose gradient is 1 - ||row_j(M)||² and Hessian 2 (M Mᵀ) ⊙ A⁻¹, with
A = Z Zᵀ + diag(u) and M = A⁻¹ Z Xᵀ. Newton steps are damped with an Armijo
backtracking line search.

Reference: Lee, Battle, Raina & Ng (2007). Efficient sparse coding algorithms.
"""

from __future__ import annotations
import logging
from typing import Sequence, Tuple
import numpy as np
from scipy import linalg

from ...exceptions import DegenerateStateError, NewtonConvergenceError
from ..matrix import normalize_columns

logger = logging.getLogger(__name__)


def dual_objective(codes_xt: np.ndarray, codes_zt: np.ndarray, dual_vars: np.ndarray) -> float:
    """Negated Lagrange dual f(u) for the multipliers ``dual_vars``."""
    solution = linalg.solve(codes_zt + np.diag(dual_vars), codes_xt, assume_a="sym")
    return float(np.sum(codes_xt * solution) + np.sum(dual_vars))


class LagrangeDualNewton:
    """
    Newton solver for the dictionary step on active atoms.

    Args:
        tolerance: Stop once one Newton step improves the dual by less than this
        max_iterations: Safety cap on Newton iterations
        armijo_c: Sufficient decrease constant of the line search
        armijo_rho: Step shrink factor of the line search
        min_step: Smallest step the line search tries before giving up
    """

    def __init__(self,
                 tolerance: float = 1e-6,
                 max_iterations: int = 100,
                 armijo_c: float = 1e-4,
                 armijo_rho: float = 0.9,
                 min_step: float = 1e-10):
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.armijo_c = armijo_c
        self.armijo_rho = armijo_rho
        self.min_step = min_step
        self.n_iter_ = 0

    def solve(self, codes: np.ndarray, data: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Solve the dictionary step for the atoms whose code rows are given.

        Args:
            codes: Code rows of the active atoms (n_active, n_signals)
            data: Data matrix (n_features, n_signals)

        Returns:
            (dictionary, dual_vars): dictionary of shape (n_features, n_active)
            and the final multipliers of shape (n_active,)

        Raises:
            NewtonConvergenceError: If ``max_iterations`` steps do not converge
            numpy.linalg.LinAlgError: If a linear system is singular
        """
        codes_xt = codes @ data.T
        codes_zt = codes @ codes.T
        n_active = codes.shape[0]

        dual_vars = np.zeros(n_active)
        improvement = np.inf

        logger.debug("Solving Dual via Newton's Method.")
        for t in range(1, self.max_iterations + 1):
            a = codes_zt + np.diag(dual_vars)
            a_inv_zxt = linalg.solve(a, codes_xt, assume_a="sym")

            gradient = -(np.sum(a_inv_zxt ** 2, axis=1) - 1.0)
            hessian = 2.0 * (a_inv_zxt @ a_inv_zxt.T) * linalg.inv(a)
            search_direction = -linalg.solve(hessian, gradient, assume_a="sym")

            step, improvement = self._line_search(
                codes_xt, codes_zt, dual_vars, a_inv_zxt, gradient, search_direction
            )
            dual_vars = dual_vars + step

            logger.debug("Newton Method iteration %d:", t)
            logger.debug("  Gradient norm: %.6e.", np.linalg.norm(gradient))
            logger.debug("  Improvement: %.6e.", improvement)

            if improvement < self.tolerance:
                self.n_iter_ = t
                break
        else:
            self.n_iter_ = self.max_iterations
            raise NewtonConvergenceError(self.max_iterations, improvement)

        dictionary = linalg.solve(codes_zt + np.diag(dual_vars), codes_xt, assume_a="sym").T
        return dictionary, dual_vars

    def _line_search(self, codes_xt, codes_zt, dual_vars, a_inv_zxt, gradient, direction):
        """Armijo backtracking; returns the accepted step and the objective decrease."""
        sum_dual = float(np.sum(dual_vars))
        f_old = float(np.sum(codes_xt * a_inv_zxt)) + sum_dual
        sufficient_decrease = self.armijo_c * float(gradient @ direction)

        alpha = 1.0
        while alpha >= self.min_step:
            f_new = dual_objective(codes_xt, codes_zt, dual_vars + alpha * direction)
            if f_new <= f_old + alpha * sufficient_decrease:
                return alpha * direction, f_old - f_new
            alpha *= self.armijo_rho

        logger.debug("Line search found no decrease; keeping current dual variables.")
        return np.zeros_like(dual_vars), 0.0


def reinitialize_atoms(dictionary: np.ndarray,
                       data: np.ndarray,
                       atoms: Sequence[int],
                       rng: np.random.Generator,
                       n_draws: int = 3,
                       max_redraws: int = 100) -> np.ndarray:
    """
    Replace the given atoms in place by normalized sums of random data signals.

    Each atom gets ``n_draws`` independent uniform draws (with replacement) of
    data columns; their sum is scaled to unit norm. Sums that vanish (zero
    columns, or signals cancelling out) are drawn again.

    Raises:
        DegenerateStateError: If every data column is zero, or a sum keeps
            vanishing after ``max_redraws`` attempts
    """
    atoms = np.asarray(atoms, dtype=np.intp)
    if atoms.size == 0:
        return dictionary
    if not np.any(data):
        raise DegenerateStateError("Cannot draw atoms from data whose columns are all zero")

    n_signals = data.shape[1]
    fresh = np.zeros((data.shape[0], atoms.size))
    pending = np.arange(atoms.size)
    for _ in range(max_redraws):
        fresh[:, pending] = 0.0
        for _ in range(n_draws):
            fresh[:, pending] += data[:, rng.integers(0, n_signals, size=pending.size)]
        pending = pending[np.linalg.norm(fresh[:, pending], axis=0) < 1e-12]
        if pending.size == 0:
            break
    else:
        raise DegenerateStateError(
            f"{pending.size} atoms still have zero norm after {max_redraws} redraws"
        )

    dictionary[:, atoms] = normalize_columns(fresh)
    return dictionary
