from .__about__ import __version__

from .sparse_coding import SparseCoding
from .config import SparseCodingConfig, load_config, make_metadata
from .exceptions import (
    SparseCodingError, InvalidConfigurationError,
    NewtonConvergenceError, DegenerateStateError
)
from .penalties import L1, ElasticNet

from .core.matrix import remove_rows, normalize_columns
from .core.inference import LarsLasso, sparse_encode
from .core.dictionary import LagrangeDualNewton
from .core.initializers import (
    DataDependentRandomInitializer, RandomInitializer, DataSampleInitializer,
    FixedInitializer
)
from .core.interfaces import DictionaryInitializer

from . import api

__all__ = [
    "__version__",

    "SparseCoding",
    "SparseCodingConfig", "load_config", "make_metadata",

    "SparseCodingError", "InvalidConfigurationError",
    "NewtonConvergenceError", "DegenerateStateError",

    "L1", "ElasticNet",

    "remove_rows", "normalize_columns",
    "LarsLasso", "sparse_encode",
    "LagrangeDualNewton",

    "DictionaryInitializer",
    "DataDependentRandomInitializer", "RandomInitializer", "DataSampleInitializer",
    "FixedInitializer",

    "api",
]
