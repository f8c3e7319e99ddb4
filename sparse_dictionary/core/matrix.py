"""
Dense matrix helpers shared by the dictionary update and the initializers.
"""

from __future__ import annotations
from typing import Sequence, Union
import numpy as np


def remove_rows(matrix: np.ndarray, rows_to_remove: Union[Sequence[int], np.ndarray]) -> np.ndarray:
    """
    Return a copy of ``matrix`` without the given rows.

    Args:
        matrix: 2-D array
        rows_to_remove: Row indices, sorted ascending and within bounds

    Returns:
        New array of shape (n_rows - len(rows_to_remove), n_cols) holding the
        remaining rows in their original order. Removing nothing returns a copy.

    Raises:
        ValueError: If the indices are unsorted, repeated or out of bounds
    """
    matrix = np.asarray(matrix)
    rows = np.asarray(rows_to_remove, dtype=np.intp).ravel()

    if rows.size == 0:
        return matrix.copy()

    n_rows = matrix.shape[0]
    if np.any(np.diff(rows) <= 0):
        raise ValueError("rows_to_remove must be sorted ascending without repeats")
    if rows[0] < 0 or rows[-1] >= n_rows:
        raise ValueError(
            f"rows_to_remove out of bounds for matrix with {n_rows} rows: {rows.tolist()}"
        )

    keep = np.ones(n_rows, dtype=bool)
    keep[rows] = False
    return matrix[keep].copy()


def normalize_columns(matrix: np.ndarray) -> np.ndarray:
    """Scale every column to unit Euclidean norm; all-zero columns are left as they are."""
    norms = np.linalg.norm(matrix, axis=0, keepdims=True)
    norms = np.where(norms < 1e-12, 1.0, norms)
    return matrix / norms
