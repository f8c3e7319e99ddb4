"""
Sparse inference against a fixed dictionary.

Per-signal (elastic-net) LASSO solved along the LARS path.
"""

from .lars_lasso import LarsLasso, sparse_encode

__all__ = [
    'LarsLasso',
    'sparse_encode',
]
