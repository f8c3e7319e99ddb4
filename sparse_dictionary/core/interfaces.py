"""
Protocol interfaces for the pluggable parts of dictionary learning.
"""

from typing import Protocol, Optional, runtime_checkable
import numpy as np


@runtime_checkable
class DictionaryInitializer(Protocol):
    """
    Dictionary initialization strategy, used once when a model is constructed.
    """

    def initialize(self, data: np.ndarray, atoms: int, rng: np.random.Generator) -> np.ndarray:
        """
        Build the starting dictionary.

        Args:
            data: Data matrix (n_features, n_signals)
            atoms: Number of dictionary atoms
            rng: Random generator shared with the model

        Returns:
            Dictionary (n_features, atoms)
        """
        ...


@runtime_checkable
class CodeSolver(Protocol):
    """
    Per-signal sparse regression against a fixed dictionary.

    Solves: argmin_z 0.5||x - D z||² + λ1||z||₁ + 0.5 λ2||z||²
    """

    def regress(self, dictionary: np.ndarray, signal: np.ndarray,
                out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Args:
            dictionary: Dictionary matrix (n_features, n_atoms)
            signal: Target signal (n_features,)
            out: Optional buffer of shape (n_atoms,) receiving the solution

        Returns:
            Coefficient vector (``out`` itself when given)
        """
        ...
