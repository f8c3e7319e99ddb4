"""
Exception hierarchy for dictionary learning.

Linear-algebra failures raised by NumPy (``numpy.linalg.LinAlgError``) are
not wrapped; they propagate from the step that hit them.
"""


class SparseCodingError(Exception):
    """Base class for sparse coding specific errors."""
    pass


class InvalidConfigurationError(SparseCodingError, ValueError):
    """Raised when a model is constructed with unusable parameters or data."""
    pass


class NewtonConvergenceError(SparseCodingError, RuntimeError):
    """Raised when the dual Newton solver hits its iteration cap."""

    def __init__(self, iterations: int, improvement: float):
        self.iterations = iterations
        self.improvement = improvement
        super().__init__(
            f"Dual Newton method did not converge after {iterations} iterations "
            f"(last improvement {improvement:.3e})"
        )


class DegenerateStateError(SparseCodingError, RuntimeError):
    """Raised when no atom is used by any signal, so the dictionary step has nothing to solve."""
    pass
