"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m pitchpool_cli preview --side yes --amount 100 --yes-pool 7000 --no-pool 3000 [--json]
    python -m pitchpool_cli consensus --yes 92 --no 5 --unclear 3 [--json]
    python -m pitchpool_cli lock-time --kickoff 2026-06-01T18:00:00Z --policy halftime [--json]
    python -m pitchpool_cli simulate scenario.yaml [--json]
    python -m pitchpool_cli config --init
    python -m pitchpool_cli serve [--host HOST] [--port PORT]

Environment Variables:
    PITCHPOOL_MIN_STAKE             Minimum stake (default: 1.00)
    PITCHPOOL_PLATFORM_FEE_RATE     Fee on winners' profit (default: 0.05)
    PITCHPOOL_VOTING_WINDOW_SECONDS Oracle voting window (default: 7200)
    PITCHPOOL_WALLET_SEED           Seed for simulated settlement failures
    PITCHPOOL_LOG_LEVEL             Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from core.schemas.poll import LockPolicy, Side
from pitchpool_cli.commands import consensus, lock_time, preview, serve, simulate
from pitchpool_cli.config import DEFAULT_CONFIG_FILENAME, get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2


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


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="pitchpool",
        description="Pitchpool CLI - Preview stakes, classify votes and simulate sports prediction markets.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./pitchpool.json or ~/.config/pitchpool/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- preview command ---
    preview_parser = subparsers.add_parser(
        "preview",
        help="Preview winnings for a stake",
        description="Compute gross winnings, platform fee, net profit and ROI for a prospective stake.",
    )
    preview_parser.add_argument("--side", required=True, choices=[s.value for s in Side])
    preview_parser.add_argument("--amount", required=True, help="Stake amount")
    preview_parser.add_argument("--yes-pool", default="0", help="Current YES pool (default: 0)")
    preview_parser.add_argument("--no-pool", default="0", help="Current NO pool (default: 0)")
    preview_parser.add_argument(
        "--fee-rate",
        default=None,
        help="Platform fee rate on profit (default: from config)",
    )
    preview_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    preview_parser.set_defaults(func=preview.preview_cmd)

    # --- consensus command ---
    consensus_parser = subparsers.add_parser(
        "consensus",
        help="Classify an oracle vote count",
        description="Show vote percentages, consensus level and the resulting resolution path.",
    )
    consensus_parser.add_argument("--yes", type=int, default=0, help="YES votes")
    consensus_parser.add_argument("--no", type=int, default=0, help="NO votes")
    consensus_parser.add_argument("--unclear", type=int, default=0, help="UNCLEAR votes")
    consensus_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    consensus_parser.set_defaults(func=consensus.consensus_cmd)

    # --- lock-time command ---
    lock_parser = subparsers.add_parser(
        "lock-time",
        help="Resolve a lock policy to a timestamp",
        description="Compute when staking closes for a kickoff time and lock policy.",
    )
    lock_parser.add_argument("--kickoff", required=True, help="Kickoff time (ISO-8601)")
    lock_parser.add_argument(
        "--policy",
        default=LockPolicy.KICKOFF.value,
        choices=[p.value for p in LockPolicy],
        help="Lock policy (default: kickoff)",
    )
    lock_parser.add_argument("--at", default=None, help="Explicit lock time for the custom policy")
    lock_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    lock_parser.set_defaults(func=lock_time.lock_time_cmd)

    # --- simulate command ---
    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Run a scripted market scenario",
        description="Replay a YAML or JSON scenario with a frozen clock and a simulated wallet.",
    )
    simulate_parser.add_argument("scenario", type=str, help="Path to scenario file")
    simulate_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    simulate_parser.set_defaults(func=simulate.simulate_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
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
        default=DEFAULT_CONFIG_FILENAME,
        help=f"Path for config file (default: {DEFAULT_CONFIG_FILENAME})",
    )
    config_parser.set_defaults(func=config_cmd)

    # --- serve command ---
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
        description="Start the FastAPI service with uvicorn.",
    )
    serve_parser.add_argument("--host", type=str, default=None, help="Bind host (default: from config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default: from config)")
    serve_parser.add_argument("--reload", action="store_true", default=False, help="Auto-reload on changes")
    serve_parser.set_defaults(func=serve.serve_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (PITCHPOOL_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: pitchpool config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_SUCCESS

    try:
        runtime_config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: could not load configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(args.log_level or runtime_config.log_level, args.log_file)
    args.runtime_config = runtime_config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
