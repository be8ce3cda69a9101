"""CLI main module with subcommands for key, build, inspect and sample.

Usage:
    python -m randomfield.cli key --config field.yaml
    python -m randomfield.cli build --config field.yaml
    python -m randomfield.cli inspect output/CachedRandomFields/x_....rfg --dim 1
    python -m randomfield.cli sample --config field.yaml --out sample.npy --seed 0
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from ..cache.codec import load_cache
from ..cache.key import encode_key
from ..core.config import load_config
from ..core.errors import ConfigError, RandomFieldError
from ..core.logging import setup_logging
from ..generator import GeneratorState, UniformGridRandomFieldGenerator

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _ensure_basis(generator: UniformGridRandomFieldGenerator, force: bool = False) -> None:
    if force or not generator.has_basis:
        generator.compute_spectral_basis()
        generator.save_to_cache()


def cmd_key(args: argparse.Namespace) -> int:
    """Print the relative cache key for a config."""
    cfg = load_config(args.config)
    print(encode_key(cfg.grid))
    return EXIT_OK


def cmd_build(args: argparse.Namespace) -> int:
    """Load the cached basis for a config, computing and saving it on a miss."""
    cfg = load_config(args.config)
    generator = UniformGridRandomFieldGenerator.from_config(cfg)
    initial_state = generator.state

    _ensure_basis(generator, force=args.force)

    print("Cache file:", generator.cache_path)
    print("State:     ", initial_state.value)
    if generator.state is GeneratorState.COMPUTED:
        print("Computed and saved", generator.spec.num_eigenvalues, "eigenpairs")
    return EXIT_OK


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the header and eigenvalues stored in a cache file."""
    spec, basis = load_cache(args.path, args.dim)

    print("Cache header:")
    print("-" * 40)
    print("  Lower corner:    ", list(spec.lower_corner))
    print("  Upper corner:    ", list(spec.upper_corner))
    print("  Grid points:     ", list(spec.num_grid_pts))
    print("  Periodicity:     ", list(spec.periodicity))
    print("  Eigenvalues (K): ", spec.num_eigenvalues)
    print("  Length scale:    ", spec.length_scale)
    print()
    print("Eigenvalues:")
    print("-" * 40)
    for i, value in enumerate(basis.eigenvalues):
        print(f"  {i:4d}  {value:.6e}")
    return EXIT_OK


def cmd_sample(args: argparse.Namespace) -> int:
    """Write one field sample, shaped to the grid, to a .npy file."""
    cfg = load_config(args.config)
    generator = UniformGridRandomFieldGenerator.from_config(cfg)
    _ensure_basis(generator)

    seed = args.seed if args.seed is not None else cfg.seed
    field = generator.sample_random_field(np.random.default_rng(seed))

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    np.save(out_path, generator.reshape_to_grid(field))
    print("Wrote", out_path)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="randomfield.cli",
        description="Uniform-grid random field generator CLI",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional JSON lines log file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # Key subcommand
    parser_key = subparsers.add_parser(
        "key",
        help="Print the cache key for a config file",
    )
    parser_key.add_argument(
        "--config",
        "-c",
        type=Path,
        required=True,
        help="Path to YAML/JSON config file",
    )
    parser_key.set_defaults(func=cmd_key)

    # Build subcommand
    parser_build = subparsers.add_parser(
        "build",
        help="Compute and cache the spectral basis for a config file",
    )
    parser_build.add_argument(
        "--config",
        "-c",
        type=Path,
        required=True,
        help="Path to YAML/JSON config file",
    )
    parser_build.add_argument(
        "--force",
        action="store_true",
        help="Recompute and overwrite even if a cache file exists",
    )
    parser_build.set_defaults(func=cmd_build)

    # Inspect subcommand
    parser_inspect = subparsers.add_parser(
        "inspect",
        help="Print the contents of a cache file",
    )
    parser_inspect.add_argument("path", type=Path, help="Path to a .rfg cache file")
    parser_inspect.add_argument(
        "--dim",
        "-d",
        type=int,
        choices=[1, 2, 3],
        required=True,
        help="Spatial dimension the file was written for",
    )
    parser_inspect.set_defaults(func=cmd_inspect)

    # Sample subcommand
    parser_sample = subparsers.add_parser(
        "sample",
        help="Draw one field sample and save it as .npy",
    )
    parser_sample.add_argument(
        "--config",
        "-c",
        type=Path,
        required=True,
        help="Path to YAML/JSON config file",
    )
    parser_sample.add_argument(
        "--out",
        "-o",
        type=Path,
        default=Path("sample.npy"),
        help="Output .npy file (default: sample.npy)",
    )
    parser_sample.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Sampling seed (overrides the config seed)",
    )
    parser_sample.set_defaults(func=cmd_sample)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    try:
        return int(args.func(args) or 0)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except RandomFieldError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
