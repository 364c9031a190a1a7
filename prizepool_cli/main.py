"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m prizepool_cli tree build entitlements.yaml [--out tree.json] [--json]
    python -m prizepool_cli tree prove entitlements.yaml 0xabc... [--json]
    python -m prizepool_cli tree verify --root 0x... --account 0xabc... --amount 150 --proof 0x... 0x...
    python -m prizepool_cli simulate scenario.yaml [--json]
    python -m prizepool_cli config --show

Environment Variables:
    PRIZEPOOL_ADMIN             Administrator identity for simulated registries
    PRIZEPOOL_REGISTRY_ADDRESS  Registry account address
    PRIZEPOOL_REENTRANCY_GUARD  Enable per-competition reentrancy guard (default: true)
    PRIZEPOOL_LOG_LEVEL         Log level (default: INFO)
    PRIZEPOOL_LOG_FILE          Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from prizepool_cli import __version__
from prizepool_cli.commands import simulate, tree
from core.config.runtime import RuntimeConfig


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
        force=True,
    )


def load_config(config_path: Path | None) -> RuntimeConfig:
    """Load YAML config if given, then overlay PRIZEPOOL_* environment variables."""
    if config_path is not None:
        return RuntimeConfig.from_yaml(config_path).with_env_overrides()
    return RuntimeConfig.from_env()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="prizepool",
        description="Prizepool CLI - build claim trees, verify proofs, and simulate escrow scenarios.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to a YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- tree command ---
    tree_parser = subparsers.add_parser(
        "tree",
        help="Build claim trees and proofs",
        description="Off-line tooling for batch-proof competitions.",
    )
    tree_subparsers = tree_parser.add_subparsers(dest="tree_command", help="Tree operation")

    tree_build = tree_subparsers.add_parser(
        "build",
        help="Build a claim tree from an entitlements file",
    )
    tree_build.add_argument("entitlements", type=str, help="JSON or YAML file of account -> amount")
    tree_build.add_argument("--out", "-o", type=str, default=None, help="Write root and proofs to this JSON file")
    tree_build.add_argument("--json", action="store_true", default=False, help="JSON output")
    tree_build.set_defaults(func=tree.build_cmd)

    tree_prove = tree_subparsers.add_parser(
        "prove",
        help="Print the proof for one account",
    )
    tree_prove.add_argument("entitlements", type=str, help="JSON or YAML file of account -> amount")
    tree_prove.add_argument("account", type=str, help="Claimant account")
    tree_prove.add_argument("--json", action="store_true", default=False, help="JSON output")
    tree_prove.set_defaults(func=tree.prove_cmd)

    tree_verify = tree_subparsers.add_parser(
        "verify",
        help="Verify a claim proof against a root",
    )
    tree_verify.add_argument("--root", type=str, required=True, help="0x-prefixed claim root")
    tree_verify.add_argument("--account", type=str, required=True, help="Claimant account")
    tree_verify.add_argument("--amount", type=int, required=True, help="Cumulative entitlement")
    tree_verify.add_argument("--proof", type=str, nargs="*", default=[], help="0x-prefixed sibling hashes, bottom-up")
    tree_verify.add_argument("--json", action="store_true", default=False, help="JSON output")
    tree_verify.set_defaults(func=tree.verify_cmd)

    tree_parser.set_defaults(func=lambda args: tree_parser.print_help() or EXIT_SUCCESS)

    # --- simulate command ---
    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Replay a scenario against an in-memory registry",
        description="Run scripted registry operations and report state and events.",
    )
    simulate_parser.add_argument("scenario", type=str, help="Scenario YAML or JSON file")
    simulate_parser.add_argument(
        "--no-guard",
        action="store_true",
        default=False,
        help="Disable the per-competition reentrancy guard",
    )
    simulate_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    simulate_parser.set_defaults(func=simulate.simulate_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Show effective configuration",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: prizepool config --show")
    return EXIT_SUCCESS


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

    setup_logging(level=args.log_level or config.logging.level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
