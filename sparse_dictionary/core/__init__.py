"""
Numerical building blocks: matrix helpers, initializers, the LARS code
solver and the Lagrange dual dictionary update.
"""

from .matrix import remove_rows, normalize_columns
from .interfaces import DictionaryInitializer, CodeSolver
from .inference import LarsLasso, sparse_encode
from .dictionary import LagrangeDualNewton, dual_objective, reinitialize_atoms
from .initializers import (
    DataDependentRandomInitializer, RandomInitializer, DataSampleInitializer,
    FixedInitializer, resolve_initializer
)

__all__ = [
    'remove_rows', 'normalize_columns',
    'DictionaryInitializer', 'CodeSolver',
    'LarsLasso', 'sparse_encode',
    'LagrangeDualNewton', 'dual_objective', 'reinitialize_atoms',
    'DataDependentRandomInitializer', 'RandomInitializer', 'DataSampleInitializer',
    'FixedInitializer', 'resolve_initializer',
]
