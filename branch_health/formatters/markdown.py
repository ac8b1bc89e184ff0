"""Markdown rendering of reports."""

from typing import List

from branch_health.constants import MAX_LISTED_FILES
from branch_health.formatters.date import format_date, format_timestamp
from branch_health.formatters.status import (
    format_action,
    format_ahead_behind,
    format_result,
    format_status,
)
from branch_health.models.branch import BranchInfo, StalenessLevel
from branch_health.models.report import Report

FOOTER = "*Generated by branch-health*"


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _summary_section(report: Report) -> List[str]:
    summary = report.summary
    return [
        "## Summary",
        "",
        "| Metric | Count |",
        "|--------|-------|",
        f"| Total Branches | {summary.total_branches} |",
        f"| Active (< {report.warning_days} days) | {summary.active_branches} |",
        f"| Stale (>= {report.stale_days} days) | {summary.stale_branches} |",
        f"| Fully Merged | {summary.merged_branches} |",
        f"| Ahead of Default | {summary.ahead_branches} |",
        f"| Behind Only | {summary.behind_branches} |",
        f"| Has Conflicts | {summary.conflicting_branches} |",
        f"| Protected | {summary.protected_branches} |",
        f"| Ignored | {summary.ignored_branches} |",
        "",
    ]


def _branch_table(report: Report) -> List[str]:
    lines = [
        "## Branch Details",
        "",
        "| Branch | Last Commit | Ahead/Behind | Status | Action |",
        "|--------|-------------|--------------|--------|--------|",
    ]
    for branch in report.branches:
        lines.append(
            f"| `{branch.name}` "
            f"| {format_date(branch.last_commit_date)} ({branch.days_since_last_commit}d ago) "
            f"| {format_ahead_behind(branch)} "
            f"| {format_status(branch.merge_status)} "
            f"| {format_action(branch.proposed_action)} |"
        )
    lines.append("")
    return lines


def _actions_table(report: Report) -> List[str]:
    if not report.actions:
        return []
    lines = [
        "## Actions",
        "",
        "| Branch | Action | Result | Message |",
        "|--------|--------|--------|---------|",
    ]
    for action in report.actions:
        lines.append(
            f"| `{action.branch}` | {action.action.value} "
            f"| {format_result(action.success)} | {_escape_cell(action.message)} |"
        )
    lines.append("")
    return lines


def _stale_section(report: Report) -> List[str]:
    stale = [
        b for b in report.branches
        if b.staleness_level in (StalenessLevel.STALE, StalenessLevel.CRITICAL)
    ]
    if not stale:
        return []
    lines = ["## Stale Branches (Require Attention)", ""]
    for branch in stale:
        lines.extend([
            f"### `{branch.name}`",
            "",
            f"- **Last Commit:** {branch.last_commit_date.isoformat()} "
            f"({branch.days_since_last_commit} days ago)",
            f"- **Author:** {branch.last_commit_author}",
            f"- **Message:** {branch.last_commit_message}",
            f"- **Status:** {branch.merge_status.value}",
            f"- **Recommendation:** {branch.proposed_action.value}",
            "",
        ])
    return lines


def _changed_files(branch: BranchInfo) -> List[str]:
    files = branch.changed_files or []
    if not files:
        return []
    lines = [f"- **Changed Files:** {len(files)}"]
    lines.extend(f"  - `{path}`" for path in files[:MAX_LISTED_FILES])
    if len(files) > MAX_LISTED_FILES:
        lines.append(f"  - ... and {len(files) - MAX_LISTED_FILES} more")
    return lines


def _ahead_section(report: Report) -> List[str]:
    ahead = [
        b for b in report.branches
        if b.ahead_count > 0 and not b.is_protected and not b.is_ignored
    ]
    if not ahead:
        return []
    lines = ["## Branches Ahead of Default (May Need Merging)", ""]
    for branch in ahead:
        lines.extend([
            f"### `{branch.name}`",
            "",
            f"- **Ahead:** {branch.ahead_count} commits",
            f"- **Behind:** {branch.behind_count} commits",
            f"- **Status:** {branch.merge_status.value}",
        ])
        if branch.has_open_pr:
            lines.append(f"- **Open PR:** #{branch.open_pr_number}")
        lines.extend(_changed_files(branch))
        lines.append("")
    return lines


def render_markdown(report: Report) -> str:
    """Render a report as a Markdown document."""
    lines = [
        "# Branch Health Report",
        "",
        f"**Generated:** {format_timestamp(report.generated_at)}",
        f"**Repository:** {report.repository}",
        f"**Default Branch:** `{report.default_branch}`",
        f"**Mode:** {report.mode.upper()}",
        "",
    ]
    lines.extend(_summary_section(report))
    lines.extend(_branch_table(report))
    lines.extend(_actions_table(report))
    lines.extend(_stale_section(report))
    lines.extend(_ahead_section(report))
    lines.extend(["---", "", FOOTER])
    return "\n".join(lines)
