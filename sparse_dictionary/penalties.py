from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass
class Penalty:
    """
    Regularization term on the code matrix.

    Subclasses evaluate the penalty for the objective; the code step itself is
    solved by LARS, so no proximal operator is needed here.
    """

    def value(self, a: np.ndarray) -> float:
        """
        Evaluate penalty function at point a.

        Parameters
        ----------
        a : np.ndarray
            Code matrix or vector

        Returns
        -------
        penalty_value : float
        """
        raise NotImplementedError("Subclasses must implement value()")


@dataclass
class L1(Penalty):
    lam: float
    def value(self, a): return self.lam * float(np.sum(np.abs(a)))


@dataclass
class ElasticNet(Penalty):
    l1: float; l2: float
    def value(self, a): return self.l1 * float(np.sum(np.abs(a))) + 0.5*self.l2 * float(np.sum(a*a))


def penalty_for(lambda1: float, lambda2: float) -> Penalty:
    """Pick the penalty matching the regularization weights."""
    if lambda2 > 0:
        return ElasticNet(l1=lambda1, l2=lambda2)
    return L1(lam=lambda1)
