"""
Deterministic execution for reproducible dictionary learning runs.

Dictionary learning results depend on the initial atoms, on which data
signals replace dead atoms, and on the summation order inside threaded BLAS
kernels. Pinning all three makes repeated runs bit-for-bit comparable.
"""

import os
import random
import numpy as np

_THREAD_VARS = ["OPENBLAS_NUM_THREADS", "OMP_NUM_THREADS", "MKL_NUM_THREADS", "NUMEXPR_NUM_THREADS"]


def set_deterministic(seed: int = 0) -> None:
    """
    Limit BLAS/LAPACK to one thread and seed the global random generators.

    Thread limits only take effect if set before the BLAS library starts its
    thread pool, so call this before the first matrix operation.

    Args:
        seed: Seed for Python's ``random`` and NumPy's legacy global generator.
            Models still take their own ``random_state``.
    """
    for var in _THREAD_VARS:
        os.environ.setdefault(var, "1")

    random.seed(seed)
    np.random.seed(seed)


def is_deterministic() -> bool:
    """True when BLAS threading is pinned to a single thread."""
    return all(os.environ.get(var) == "1" for var in _THREAD_VARS[:3])


def get_reproducibility_info() -> dict:
    """Threading and library versions, for run metadata."""
    return {
        'threading': {var: os.environ.get(var, 'unset') for var in _THREAD_VARS},
        'numpy_version': np.__version__,
        'deterministic_enabled': is_deterministic(),
    }
