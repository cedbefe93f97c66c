"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m ordmerkle_cli root <items> [--json]
    python -m ordmerkle_cli prove <items> (--index N | --item VALUE) [--out PATH]
    python -m ordmerkle_cli verify <proof.json> [--root 0x...] [--json]
    python -m ordmerkle_cli show <items>
    python -m ordmerkle_cli config --init | --show

Environment Variables:
    ORDMERKLE_HASH_ALGORITHM    Hash algorithm (default: sha256)
    ORDMERKLE_ITEM_FORMAT       Item file format: lines or jsonl
    ORDMERKLE_OUTPUT_FORMAT     human or json
    ORDMERKLE_LOG_LEVEL         Log level (default: INFO)
    ORDMERKLE_LOG_FILE          Also log to this file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from ordmerkle import __version__
from ordmerkle.config.runtime import (
    ENV_PREFIX,
    RuntimeConfig,
    get_default_config_template,
    load_config,
)
from ordmerkle.schemas.errors import MerkleException
from ordmerkle_cli.commands import prove, root, show, verify
from ordmerkle_cli.items import ItemFileError


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_common_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=None,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="ordmerkle",
        description="Order-preserving Merkle trees - compute roots, generate and verify proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./ordmerkle.json or ~/.config/ordmerkle/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--hash",
        dest="hash_algorithm",
        type=str,
        default=None,
        help="Hash algorithm: sha256, sha512, blake2b, sha3_256, crc32, ... (overrides config)",
    )
    parser.add_argument(
        "--format",
        dest="item_format",
        type=str,
        default=None,
        choices=["lines", "jsonl"],
        help="Items file format (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Compute the root digest of an items file",
    )
    root_parser.add_argument("items", type=str, help="Path to items file")
    _add_common_output_args(root_parser)
    root_parser.set_defaults(func=root.root_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof document",
    )
    prove_parser.add_argument("items", type=str, help="Path to items file")
    target = prove_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--index", type=int, help="Leaf index to prove")
    target.add_argument("--item", type=str, help="Item value to prove (first match)")
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof document here instead of stdout",
    )
    prove_parser.add_argument("--debug", action="store_true", default=False)
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof document offline",
    )
    verify_parser.add_argument("proof", type=str, help="Path to proof document (JSON)")
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Trusted root digest (0x-prefixed hex)",
    )
    _add_common_output_args(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- show command ---
    show_parser = subparsers.add_parser(
        "show",
        help="Draw the tree built from an items file",
    )
    show_parser.add_argument("items", type=str, help="Path to items file")
    show_parser.add_argument(
        "--digest-chars",
        type=int,
        default=8,
        help="Hex characters of each digest to show (default: 8)",
    )
    show_parser.add_argument("--debug", action="store_true", default=False)
    show_parser.set_defaults(func=show.show_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="ordmerkle.json",
        help="Path for config file (default: ordmerkle.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Write a config template (--init) or print the effective config (--show)."""
    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    if not args.init:
        print("Nothing to do: pass --init to write a template or --show to print the effective config")
        return EXIT_SUCCESS

    target = Path(args.path)
    if target.exists():
        print(f"Error: {target} already exists; remove it or choose another --path", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    target.write_text(get_default_config_template())
    print(f"Wrote {target}")
    print(f"Settings can also come from {ENV_PREFIX}* environment variables or a .env file.")
    return EXIT_SUCCESS


def _apply_config(args: argparse.Namespace, config: RuntimeConfig) -> None:
    """Fill unset CLI options from configuration."""
    if args.hash_algorithm is None:
        args.hash_algorithm = config.hash_algorithm
    if args.item_format is None:
        args.item_format = config.item_format
    if getattr(args, "json", False) is None:
        args.json = config.output_format == "json"


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    args.cli_config = config
    _apply_config(args, config)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (MerkleException, ItemFileError) as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        if getattr(args, "json", False) and isinstance(e, MerkleException):
            print(e.to_error_model().model_dump_json(indent=2))
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
