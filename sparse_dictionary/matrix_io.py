"""
Loading and saving matrices for the command-line tool.

Matrices are stored as (n_features, n_signals): one signal per column.
``.npy`` files use NumPy's binary format; ``.csv``/``.txt`` files are comma
separated text.
"""

from pathlib import Path
from typing import Union
import numpy as np

_TEXT_SUFFIXES = {".csv", ".txt"}


def load_matrix(path: Union[str, Path]) -> np.ndarray:
    """Load a 2-D float matrix from ``.npy`` or comma separated text."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Matrix file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".npy":
        matrix = np.load(path).astype(float)
    elif suffix in _TEXT_SUFFIXES:
        matrix = np.loadtxt(path, delimiter=",", dtype=float, ndmin=2)
    else:
        raise ValueError(f"Unsupported matrix format '{suffix}' for {path}; use .npy or .csv")

    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix in {path}, got shape {matrix.shape}")
    return matrix


def save_matrix(path: Union[str, Path], matrix: np.ndarray) -> Path:
    """Save ``matrix`` in the format implied by the file suffix; returns the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    suffix = path.suffix.lower()
    if suffix == ".npy":
        np.save(path, np.asarray(matrix, dtype=float))
    elif suffix in _TEXT_SUFFIXES:
        np.savetxt(path, np.asarray(matrix, dtype=float), delimiter=",", fmt="%.18e")
    else:
        raise ValueError(f"Unsupported matrix format '{suffix}' for {path}; use .npy or .csv")
    return path
