"""
Dictionary update for sparse coding with norm-constrained atoms.
"""

from .lagrange_dual import LagrangeDualNewton, dual_objective, reinitialize_atoms

__all__ = [
    'LagrangeDualNewton',
    'dual_objective',
    'reinitialize_atoms',
]
