"""
Dictionary initialization strategies.

Each strategy implements the ``DictionaryInitializer`` protocol and is
registered by name so configuration files can select it. All of them return
a (n_features, atoms) float array; the random ones draw exclusively from the
generator handed in by the model so runs are reproducible from one seed.
"""

from __future__ import annotations
from typing import Optional, Union
import numpy as np

from ..api.registry import register, get_registry
from ..exceptions import InvalidConfigurationError
from .interfaces import DictionaryInitializer
from .matrix import normalize_columns
from .dictionary.lagrange_dual import reinitialize_atoms


@register("initializer", "data_dependent")
class DataDependentRandomInitializer:
    """Each atom is the normalized sum of three randomly drawn data signals."""

    def __init__(self, n_draws: int = 3):
        self.n_draws = int(n_draws)

    def initialize(self, data: np.ndarray, atoms: int, rng: np.random.Generator) -> np.ndarray:
        dictionary = np.zeros((data.shape[0], atoms))
        return reinitialize_atoms(dictionary, data, np.arange(atoms), rng, n_draws=self.n_draws)


@register("initializer", "random")
class RandomInitializer:
    """Standard normal atoms scaled to unit norm."""

    def initialize(self, data: np.ndarray, atoms: int, rng: np.random.Generator) -> np.ndarray:
        return normalize_columns(rng.standard_normal((data.shape[0], atoms)))


@register("initializer", "sample")
class DataSampleInitializer:
    """Distinct data signals picked at random, scaled to unit norm."""

    def initialize(self, data: np.ndarray, atoms: int, rng: np.random.Generator) -> np.ndarray:
        n_signals = data.shape[1]
        if atoms > n_signals:
            raise InvalidConfigurationError(
                f"Cannot sample {atoms} distinct atoms from {n_signals} signals"
            )
        idx = rng.choice(n_signals, size=atoms, replace=False)
        return normalize_columns(data[:, idx].copy())


@register("initializer", "fixed")
class FixedInitializer:
    """Use a dictionary supplied by the caller, unchanged."""

    def __init__(self, dictionary):
        self.dictionary = np.array(dictionary, dtype=float)

    def initialize(self, data: np.ndarray, atoms: int, rng: np.random.Generator) -> np.ndarray:
        expected = (data.shape[0], atoms)
        if self.dictionary.shape != expected:
            raise InvalidConfigurationError(
                f"Initial dictionary has shape {self.dictionary.shape}, expected {expected}"
            )
        return self.dictionary.copy()


def resolve_initializer(
    initializer: Optional[Union[str, DictionaryInitializer]] = None
) -> DictionaryInitializer:
    """Turn a registered name (or None for the default) into an initializer instance."""
    if initializer is None:
        return DataDependentRandomInitializer()
    if isinstance(initializer, str):
        try:
            cls = get_registry("initializer", initializer)
        except KeyError as e:
            raise InvalidConfigurationError(str(e.args[0])) from e
        try:
            return cls()
        except TypeError as e:
            raise InvalidConfigurationError(
                f"Initializer '{initializer}' cannot be built without parameters: {e}"
            ) from e
    if not isinstance(initializer, DictionaryInitializer):
        raise InvalidConfigurationError(
            f"Initializer {initializer!r} does not provide initialize(data, atoms, rng)"
        )
    return initializer
