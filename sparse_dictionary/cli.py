import argparse, json, logging
from pathlib import Path
import numpy as np
from pydantic import ValidationError
from .sparse_coding import SparseCoding
from .config import SparseCodingConfig, load_config_dict, make_metadata
from .core.inference.lars_lasso import sparse_encode
from .deterministic import set_deterministic, get_reproducibility_info
from .exceptions import SparseCodingError
from .jsonlog import log
from .matrix_io import load_matrix, save_matrix

logger = logging.getLogger("sparse_dictionary.cli")

# CLI flag -> config field; flags left unset fall back to the config file
_CONFIG_FLAGS = ("atoms", "lambda1", "lambda2", "max_iterations", "objective_tolerance",
                 "newton_tolerance", "max_newton_iterations", "initializer", "seed",
                 "n_jobs")


def _build_config(args):
    raw = load_config_dict(args.config) if args.config else {}
    for name in _CONFIG_FLAGS:
        value = getattr(args, name)
        if value is not None:
            raw[name] = value
    if args.normalize:
        raw["normalize"] = True
    return SparseCodingConfig(**raw)


def _configure_logging(args):
    level = logging.WARNING
    if args.verbose: level = logging.INFO
    if args.debug: level = logging.DEBUG
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")


def cmd_learn(args):
    cfg = _build_config(args)
    if args.deterministic: set_deterministic(cfg.seed or 0)
    X = load_matrix(args.input)
    D0 = load_matrix(args.initial_dictionary) if args.initial_dictionary else None

    log("learn_start", input=args.input, atoms=cfg.atoms, lambda1=cfg.lambda1,
        lambda2=cfg.lambda2, shape=list(X.shape))
    model = SparseCoding.from_config(X, cfg, initial_dictionary=D0)
    model.encode(cfg.max_iterations)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    dict_path = save_matrix(args.dictionary_out or out_dir / "dictionary.npy", model.dictionary)
    codes_path = save_matrix(args.codes_out or out_dir / "codes.npy", model.codes)
    meta = make_metadata(cfg, model.dictionary.shape, model.codes.shape, {
        "objective": model.objective(),
        "iterations": model.n_iter_,
        "history": model.history_,
        "reproducibility": get_reproducibility_info(),
    })
    with open(out_dir / "METADATA.json", "w", encoding="utf-8") as fh:
        json.dump(meta, fh, indent=2)
    log("learn_done", dictionary=str(dict_path), codes=str(codes_path),
        objective=meta["objective"], iterations=model.n_iter_)
    return 0


def cmd_encode(args):
    D = load_matrix(args.dictionary)
    X = load_matrix(args.input)
    if D.shape[0] != X.shape[0]:
        raise ValueError(f"Dictionary has {D.shape[0]} features but data has {X.shape[0]}")
    if args.lambda1 < 0 or args.lambda2 < 0:
        raise ValueError("lambda1 and lambda2 must be >= 0")
    Z = sparse_encode(D, X, args.lambda1, args.lambda2, n_jobs=args.n_jobs)
    save_matrix(args.codes_out, Z)
    log("encode_done", out=args.codes_out,
        sparsity=float(100.0 * np.count_nonzero(Z) / Z.size))
    return 0


def _add_logging_flags(p):
    p.add_argument("--verbose", "-v", action="store_true", help="INFO level progress")
    p.add_argument("--debug", action="store_true", help="DEBUG level traces")


def main(argv=None):
    ap = argparse.ArgumentParser(
        "sparse-dictionary",
        description="Sparse coding with dictionary learning (LASSO / elastic net).")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_l = sub.add_parser("learn", help="Learn a dictionary and codes for a data matrix")
    ap_l.add_argument("--input", "-i", required=True, help="Data matrix (features x signals), .npy or .csv")
    ap_l.add_argument("--config", help="YAML/JSON file with SparseCodingConfig fields")
    ap_l.add_argument("--atoms", "-k", type=int)
    ap_l.add_argument("--lambda1", "-l", type=float)
    ap_l.add_argument("--lambda2", "-L", type=float)
    ap_l.add_argument("--max-iterations", "-n", dest="max_iterations", type=int)
    ap_l.add_argument("--objective-tolerance", dest="objective_tolerance", type=float)
    ap_l.add_argument("--newton-tolerance", dest="newton_tolerance", type=float)
    ap_l.add_argument("--max-newton-iterations", dest="max_newton_iterations", type=int)
    ap_l.add_argument("--initializer", choices=["data_dependent", "random", "sample"])
    ap_l.add_argument("--initial-dictionary", dest="initial_dictionary",
                      help="Starting dictionary (features x atoms); overrides --initializer")
    ap_l.add_argument("--normalize", "-N", action="store_true", help="Scale data columns to unit norm")
    ap_l.add_argument("--seed", "-s", type=int)
    ap_l.add_argument("--n-jobs", dest="n_jobs", type=int)
    ap_l.add_argument("--deterministic", action="store_true")
    ap_l.add_argument("--out", default="out", help="Directory for outputs and METADATA.json")
    ap_l.add_argument("--dictionary-out", "-d", dest="dictionary_out")
    ap_l.add_argument("--codes-out", "-c", dest="codes_out")
    _add_logging_flags(ap_l)
    ap_l.set_defaults(func=cmd_learn)

    ap_e = sub.add_parser("encode", help="Sparse codes for data with a fixed dictionary")
    ap_e.add_argument("--dictionary", required=True)
    ap_e.add_argument("--input", "-i", required=True)
    ap_e.add_argument("--codes-out", "-c", dest="codes_out", required=True)
    ap_e.add_argument("--lambda1", "-l", type=float, default=0.0)
    ap_e.add_argument("--lambda2", "-L", type=float, default=0.0)
    ap_e.add_argument("--n-jobs", dest="n_jobs", type=int, default=1)
    _add_logging_flags(ap_e)
    ap_e.set_defaults(func=cmd_encode)

    args = ap.parse_args(argv)
    _configure_logging(args)
    try:
        return args.func(args)
    except (SparseCodingError, ValidationError, ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        log("error", cmd=args.cmd, message=str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
