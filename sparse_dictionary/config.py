from __future__ import annotations
import json
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, PositiveInt


class SparseCodingConfig(BaseModel):
    atoms: PositiveInt
    lambda1: float = Field(0.0, ge=0.0)
    lambda2: float = Field(0.0, ge=0.0)
    max_iterations: PositiveInt = 10
    objective_tolerance: float = Field(1e-2, gt=0.0)
    newton_tolerance: float = Field(1e-6, gt=0.0)
    max_newton_iterations: PositiveInt = 100
    initializer: str = "data_dependent"
    seed: Optional[int] = None
    n_jobs: int = 1
    normalize: bool = False    # scale every data column to unit norm before learning


SCHEMA_VERSION = 1


def load_config_dict(path: Union[str, Path]) -> dict:
    """
    Read a configuration file (.yaml/.yml or .json) into a plain dict.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed or is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        content = fh.read()

    try:
        if path.suffix.lower() == ".json":
            raw = json.loads(content)
        else:
            raw = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config from {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(raw).__name__}")
    return raw


def load_config(path: Union[str, Path]) -> SparseCodingConfig:
    """Load and validate a configuration file; raises pydantic.ValidationError for bad values."""
    return SparseCodingConfig(**load_config_dict(path))


def make_metadata(cfg: SparseCodingConfig, D_shape, Z_shape, extra=None):
    meta = {
        "schema_version": SCHEMA_VERSION,
        "atoms": cfg.atoms,
        "lambda1": cfg.lambda1,
        "lambda2": cfg.lambda2,
        "max_iterations": cfg.max_iterations,
        "objective_tolerance": cfg.objective_tolerance,
        "newton_tolerance": cfg.newton_tolerance,
        "max_newton_iterations": cfg.max_newton_iterations,
        "initializer": cfg.initializer,
        "seed": cfg.seed,
        "normalize": cfg.normalize,
        "shapes": {"D": list(D_shape), "Z": list(Z_shape)},
    }
    if extra: meta.update(extra)
    return meta
