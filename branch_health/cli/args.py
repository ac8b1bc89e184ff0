"""Command-line argument parsing for branch-health."""

import argparse
from typing import Optional, Sequence

from branch_health.__version__ import __version__
from branch_health.constants import DEFAULT_CONFIG_PATH, DEFAULT_OUTPUT_DIR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branch-health",
        description="Analyze remote branches and report on their health",
        epilog="GitHub features need GITHUB_TOKEN (and GITHUB_REPOSITORY unless origin "
        "points at github.com). Without them the analysis runs in local-only mode.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"branch-health {__version__}")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_const",
        const=True,
        help="Preview mode - report what would be done without touching GitHub",
    )
    mode.add_argument(
        "--apply",
        dest="dry_run",
        action="store_const",
        const=False,
        help="Carry out the proposed actions (overrides dryRun in the config)",
    )

    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the policy file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for report files (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument("--repo", default=".", help="Path to the git repository (default: .)")
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for branch analysis (default: auto-detect; 1 is sequential)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
