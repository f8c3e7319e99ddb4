"""
Sparse coding with dictionary learning under L1 (LASSO) or L1+L2 (elastic
net) regularization.

Learns a dictionary D and codes Z for data X by alternating minimization of

    0.5||X - D Z||_F² + λ1||Z||₁ + 0.5 λ2||Z||_F²    s.t. ||d_j||₂ <= 1

- Code step: one LARS/LASSO regression per signal with D fixed.
- Dictionary step: Newton's method on the Lagrange dual with Z fixed;
  atoms no signal uses are re-drawn from the data.

References:
    Lee, Battle, Raina & Ng (2007). Efficient sparse coding algorithms.
    Efron, Hastie, Johnstone & Tibshirani (2004). Least Angle Regression.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple, Union
import numpy as np

from .config import SparseCodingConfig
from .core.dictionary.lagrange_dual import LagrangeDualNewton, reinitialize_atoms
from .core.inference.lars_lasso import sparse_encode
from .core.initializers import FixedInitializer, resolve_initializer
from .core.interfaces import DictionaryInitializer
from .core.matrix import normalize_columns, remove_rows
from .exceptions import DegenerateStateError, InvalidConfigurationError
from .penalties import penalty_for

logger = logging.getLogger(__name__)

Adjacencies = Tuple[np.ndarray, np.ndarray]


class SparseCoding:
    """
    Dictionary learning with LARS code steps and dual Newton dictionary steps.

    Args:
        data: Data matrix (n_features, n_signals), signals as columns. Kept by
            reference and never modified.
        atoms: Number of dictionary atoms K (1 <= K <= n_signals)
        lambda1: L1 regularization weight (>= 0)
        lambda2: L2 regularization weight (>= 0); 0 gives the plain LASSO
        initializer: Dictionary initialization strategy, or the registered
            name of one ('data_dependent', 'random', 'sample'). Defaults to
            'data_dependent'.
        objective_tolerance: ``encode`` stops once an iteration improves the
            objective by less than this
        newton_tolerance: Dual Newton solver stops once a step improves the
            dual by less than this
        max_newton_iterations: Cap on Newton iterations per dictionary step
        n_jobs: joblib worker count for the per-signal code step
        random_state: Seed or ``np.random.Generator`` for initialization and
            dead atom re-initialization

    Raises:
        InvalidConfigurationError: For unusable data or parameters

    Example:
        >>> model = SparseCoding(X, atoms=16, lambda1=0.1, random_state=0)
        >>> model.encode(max_iterations=20)
        >>> D, Z = model.dictionary, model.codes
    """

    def __init__(
        self,
        data,
        atoms: int,
        lambda1: float = 0.0,
        lambda2: float = 0.0,
        initializer: Optional[Union[str, DictionaryInitializer]] = None,
        objective_tolerance: float = 1e-2,
        newton_tolerance: float = 1e-6,
        max_newton_iterations: int = 100,
        n_jobs: Optional[int] = 1,
        random_state: Optional[Union[int, np.random.Generator]] = None,
    ):
        data = np.asarray(data, dtype=float)
        self._validate(data, atoms, lambda1, lambda2, objective_tolerance,
                       newton_tolerance, max_newton_iterations)

        self._data = data
        self._atoms = int(atoms)
        self._lambda1 = float(lambda1)
        self._lambda2 = float(lambda2)
        self.objective_tolerance = float(objective_tolerance)
        self.newton_tolerance = float(newton_tolerance)
        self.max_newton_iterations = int(max_newton_iterations)
        self.n_jobs = n_jobs
        self._rng = np.random.default_rng(random_state)

        self._codes = np.zeros((self._atoms, data.shape[1]))

        self.initializer = resolve_initializer(initializer)
        dictionary = np.asarray(
            self.initializer.initialize(data, self._atoms, self._rng), dtype=float
        )
        if dictionary.shape != (data.shape[0], self._atoms):
            raise InvalidConfigurationError(
                f"Initializer produced a dictionary of shape {dictionary.shape}, "
                f"expected {(data.shape[0], self._atoms)}"
            )
        self._dictionary = dictionary

        self.n_iter_ = 0
        self.dual_vars_ = np.zeros(0)
        self.inactive_atoms_ = np.zeros(0, dtype=np.intp)
        self.history_: Dict[str, List[Any]] = {
            'objective': [],
            'sparsity': [],
            'inactive_atoms': [],
        }

    @staticmethod
    def _validate(data, atoms, lambda1, lambda2, objective_tolerance,
                  newton_tolerance, max_newton_iterations):
        if data.ndim != 2 or data.size == 0:
            raise InvalidConfigurationError(
                f"Data must be a non-empty 2-D matrix (n_features, n_signals), got shape {data.shape}"
            )
        if not np.all(np.isfinite(data)):
            raise InvalidConfigurationError("Data contains NaN or infinite values")
        if int(atoms) != atoms or atoms < 1:
            raise InvalidConfigurationError(f"Number of atoms must be a positive integer, got {atoms}")
        if atoms > data.shape[1]:
            raise InvalidConfigurationError(
                f"Cannot learn {atoms} atoms from {data.shape[1]} signals; "
                f"use at most as many atoms as signals"
            )
        for name, value in (("lambda1", lambda1), ("lambda2", lambda2)):
            if not np.isfinite(value) or value < 0:
                raise InvalidConfigurationError(f"{name} must be finite and >= 0, got {value}")
        for name, value in (("objective_tolerance", objective_tolerance),
                            ("newton_tolerance", newton_tolerance)):
            if not value > 0:
                raise InvalidConfigurationError(f"{name} must be > 0, got {value}")
        if max_newton_iterations < 1:
            raise InvalidConfigurationError(
                f"max_newton_iterations must be >= 1, got {max_newton_iterations}"
            )

    @classmethod
    def from_config(
        cls,
        data,
        config: Union[SparseCodingConfig, Dict[str, Any]],
        initial_dictionary: Optional[np.ndarray] = None,
    ) -> "SparseCoding":
        """
        Build a model from a ``SparseCodingConfig`` (or a dict of its fields).

        ``initial_dictionary`` overrides ``config.initializer`` with a fixed
        starting dictionary. With ``config.normalize`` every data column is
        scaled to unit norm first.
        """
        if not isinstance(config, SparseCodingConfig):
            config = SparseCodingConfig(**config)

        data = np.asarray(data, dtype=float)
        if config.normalize:
            data = normalize_columns(data)

        initializer: Union[str, DictionaryInitializer] = config.initializer
        if initial_dictionary is not None:
            initializer = FixedInitializer(initial_dictionary)

        return cls(
            data,
            atoms=config.atoms,
            lambda1=config.lambda1,
            lambda2=config.lambda2,
            initializer=initializer,
            objective_tolerance=config.objective_tolerance,
            newton_tolerance=config.newton_tolerance,
            max_newton_iterations=config.max_newton_iterations,
            n_jobs=config.n_jobs,
            random_state=config.seed,
        )

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def dictionary(self) -> np.ndarray:
        """Current dictionary (n_features, atoms). Do not modify in place."""
        return self._dictionary

    @property
    def codes(self) -> np.ndarray:
        """Current codes (atoms, n_signals). Do not modify in place."""
        return self._codes

    @property
    def atoms(self) -> int:
        return self._atoms

    @property
    def lambda1(self) -> float:
        return self._lambda1

    @property
    def lambda2(self) -> float:
        return self._lambda2

    def adjacencies(self) -> Adjacencies:
        """(atom indices, signal indices) of every nonzero code entry."""
        return np.nonzero(self._codes)

    def encode(self, max_iterations: int, tolerance: Optional[float] = None) -> "SparseCoding":
        """
        Run alternating minimization for at most ``max_iterations`` rounds.

        The first round is a code step only; every further round is a
        dictionary step followed by a code step. The loop ends early when the
        objective improves by less than ``tolerance`` (defaults to
        ``objective_tolerance``) or gets worse. Running out of iterations is a
        normal exit; inspect ``objective()`` or ``history_`` to judge convergence.

        Returns:
            self
        """
        if int(max_iterations) != max_iterations or max_iterations < 1:
            raise InvalidConfigurationError(
                f"max_iterations must be a positive integer, got {max_iterations}"
            )
        tolerance = self.objective_tolerance if tolerance is None else float(tolerance)
        n_total = self._atoms * self._data.shape[1]

        last_objective = np.inf

        logger.info("Initial Coding Step.")
        self.optimize_code()
        adjacencies = self.adjacencies()
        sparsity = 100.0 * adjacencies[0].size / n_total
        objective = self.objective()
        logger.info("  Sparsity level: %.4f%%.", sparsity)
        logger.info("  Objective value: %f.", objective)
        self._record(objective, sparsity, 0)
        self.n_iter_ = 1

        for t in range(1, int(max_iterations)):
            logger.info("Iteration %d of %d.", t, max_iterations)

            logger.info("Performing dictionary step... ")
            self.optimize_dictionary(adjacencies)
            if logger.isEnabledFor(logging.INFO):
                logger.info("  Objective value: %f.", self.objective())

            logger.info("Performing coding step...")
            self.optimize_code()
            adjacencies = self.adjacencies()
            sparsity = 100.0 * adjacencies[0].size / n_total
            logger.info("  Sparsity level: %.4f%%.", sparsity)

            objective = self.objective()
            improvement = last_objective - objective
            logger.info("  Objective value: %f (improvement %.6e).", objective, improvement)
            self._record(objective, sparsity, self.inactive_atoms_.size)
            self.n_iter_ = t + 1

            if improvement < 0:
                logger.warning(
                    "Objective increased by %.6e in iteration %d; stopping.", -improvement, t
                )
                break

            if improvement < tolerance:
                logger.info("Converged within tolerance %g.", tolerance)
                break

            last_objective = objective

        return self

    def _record(self, objective: float, sparsity: float, n_inactive: int) -> None:
        self.history_['objective'].append(objective)
        self.history_['sparsity'].append(sparsity)
        self.history_['inactive_atoms'].append(int(n_inactive))

    def optimize_code(self) -> np.ndarray:
        """
        Recompute every code column with the dictionary held fixed.

        DᵀD is formed once and shared by all per-signal LARS problems; the
        solutions are written straight into the code matrix.
        """
        gram = self._dictionary.T @ self._dictionary
        sparse_encode(
            self._dictionary, self._data, self._lambda1, self._lambda2,
            gram=gram, out=self._codes, n_jobs=self.n_jobs,
        )
        return self._codes

    def optimize_dictionary(
        self,
        adjacencies: Optional[Adjacencies] = None,
        newton_tolerance: Optional[float] = None,
        max_newton_iterations: Optional[int] = None,
    ) -> np.ndarray:
        """
        Update the dictionary with the codes held fixed.

        Atoms with an all-zero code row are inactive: they are left out of the
        dual problem and replaced by normalized sums of three random data
        signals afterwards.

        Args:
            adjacencies: Nonzero code positions from ``adjacencies()``; only
                used for the neighbor-count diagnostic
            newton_tolerance: Overrides the model's Newton tolerance
            max_newton_iterations: Overrides the model's Newton iteration cap

        Raises:
            DegenerateStateError: If no atom is active
            NewtonConvergenceError: If the dual solver hits its iteration cap
        """
        if adjacencies is None:
            adjacencies = self.adjacencies()

        n_signals = self._data.shape[1]
        neighbor_counts = np.bincount(np.asarray(adjacencies[1], dtype=np.intp),
                                      minlength=n_signals)
        logger.debug("Atomic neighbors per point: mean %.3f, max %d.",
                     neighbor_counts.mean(), neighbor_counts.max())

        used = np.any(self._codes != 0, axis=1)
        active_atoms = np.flatnonzero(used)
        inactive_atoms = np.flatnonzero(~used)

        if active_atoms.size == 0:
            raise DegenerateStateError(
                "Every atom has an all-zero code row; the dictionary step has no "
                f"active atoms (lambda1={self._lambda1} may be too large)"
            )

        if inactive_atoms.size == 0:
            active_codes = self._codes
        else:
            active_codes = remove_rows(self._codes, inactive_atoms)
            logger.warning(
                "There are %d inactive atoms. They will be re-initialized randomly.",
                inactive_atoms.size,
            )

        solver = LagrangeDualNewton(
            tolerance=self.newton_tolerance if newton_tolerance is None else newton_tolerance,
            max_iterations=(self.max_newton_iterations if max_newton_iterations is None
                            else max_newton_iterations),
        )
        active_dictionary, dual_vars = solver.solve(active_codes, self._data)

        dictionary = np.zeros((self._data.shape[0], self._atoms))
        dictionary[:, active_atoms] = active_dictionary
        reinitialize_atoms(dictionary, self._data, inactive_atoms, self._rng)

        self._dictionary = dictionary
        self.dual_vars_ = dual_vars
        self.inactive_atoms_ = inactive_atoms
        return self._dictionary

    def objective(self) -> float:
        """
        0.5||X - D Z||_F² + λ1||Z||₁, plus 0.5 λ2||Z||_F² when λ2 > 0.
        """
        residual = np.linalg.norm(self._data - self._dictionary @ self._codes, 'fro')
        penalty = penalty_for(self._lambda1, self._lambda2)
        return 0.5 * residual ** 2 + penalty.value(self._codes)

    def project_dictionary(self) -> np.ndarray:
        """Shrink every atom with norm above 1 back onto the unit sphere."""
        norms = np.linalg.norm(self._dictionary, axis=0)
        for j in np.flatnonzero(norms > 1):
            logger.info("Norm of atom %d exceeds 1 (%.6e).  Shrinking...", j, norms[j])
            self._dictionary[:, j] /= norms[j]
        return self._dictionary

    def reconstruct(self) -> np.ndarray:
        """D Z for the current dictionary and codes."""
        return self._dictionary @ self._codes
