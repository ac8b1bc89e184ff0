"""Command-line entry point for branch-health"""

import sys
from typing import Optional, Sequence

from rich.console import Console

from branch_health.cli.args import parse_args
from branch_health.config import Config, load_config
from branch_health.core import BranchHealth
from branch_health.logging_config import get_log_file, setup_logging
from branch_health.utils.threading import get_threading_info

console = Console()


def _show_debug_details(config: Config) -> None:
    info = get_threading_info()
    console.print(f"[yellow]Debug log:[/yellow] {get_log_file()}")
    console.print(
        f"[yellow]Runtime:[/yellow] Python {info['python_version']}, "
        f"{info['cpu_count']} CPUs, {info['optimal_workers']} workers by default"
    )
    console.print("[yellow]Effective policy:[/yellow]")
    for key, value in config.to_tree().items():
        console.print(f"  {key}: {value}", markup=False)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a branch health analysis; returns the process exit code."""
    args = parse_args(argv)
    try:
        setup_logging(verbose=args.verbose, debug=args.debug)
        config = load_config(args.config)
        if args.debug:
            _show_debug_details(config)

        BranchHealth(
            args.repo,
            config,
            dry_run=args.dry_run,
            output_dir=args.output,
            workers=args.workers,
            verbose=args.verbose,
        ).run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if args.debug:
            console.print_exception()
        return 1

    console.print("\n[green]Branch health analysis complete[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
