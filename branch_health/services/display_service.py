"""Console display of branch health results"""
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from branch_health.constants import CLI_COLORS, COLUMNS
from branch_health.formatters import format_ahead_behind, format_date, format_age
from branch_health.models.branch import BranchInfo
from branch_health.models.report import Report


class DisplayService:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display_branch_table(self, branches: Sequence[BranchInfo]) -> None:
        """Display a table of classified branches."""
        if not branches:
            self.console.print("No branches to analyze")
            return

        table = Table(title="Branches")
        for col in COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for branch in branches:
            row_style = CLI_COLORS.get(branch.proposed_action.value)
            table.add_row(
                branch.name,
                format_date(branch.last_commit_date),
                format_age(branch.days_since_last_commit),
                format_ahead_behind(branch),
                branch.merge_status.value,
                branch.staleness_level.value,
                branch.proposed_action.value,
                f"#{branch.open_pr_number}" if branch.has_open_pr else "",
                style=row_style,
            )

        self.console.print(table)

    def display_summary(self, report: Report) -> None:
        """Print the run summary and action outcome counts."""
        summary = report.summary
        self.console.print("\n" + "=" * 50)
        self.console.print("[bold]Summary[/bold]")
        self.console.print("=" * 50)
        self.console.print(f"Total branches: {summary.total_branches}")
        self.console.print(f"Active: {summary.active_branches}")
        self.console.print(f"Stale: {summary.stale_branches}")
        self.console.print(f"Merged: {summary.merged_branches}")
        self.console.print(f"Ahead of default: {summary.ahead_branches}")
        self.console.print(f"Behind only: {summary.behind_branches}")
        self.console.print(f"Conflicting: {summary.conflicting_branches}")

        if report.actions:
            successful = sum(1 for a in report.actions if a.success)
            self.console.print(f"\nActions taken: {len(report.actions)}")
            self.console.print(f"[green]Successful: {successful}[/green]")
            failed = len(report.actions) - successful
            if failed:
                self.console.print(f"[red]Failed: {failed}[/red]")
            else:
                self.console.print(f"Failed: {failed}")
