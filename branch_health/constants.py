"""Shared constants for branch-health."""

from dataclasses import dataclass
from typing import List


DEFAULT_CONFIG_PATH = ".github/branch-health.yml"
DEFAULT_OUTPUT_DIR = "./branch-health-reports"
JSON_REPORT_NAME = "branch-health-report.json"
MARKDOWN_REPORT_NAME = "branch-health-report.md"

REMOTE_NAME = "origin"
FALLBACK_DEFAULT_BRANCHES = ("main", "master")

# Changed files listed per branch in the Markdown report before truncating
MAX_LISTED_FILES = 10


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    label: str
    width: int = 0  # 0 means auto-width


# Console branch table
COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("Branch", 30),
    ColumnDefinition("Last Commit", 12),
    ColumnDefinition("Age", 6),
    ColumnDefinition("Ahead/Behind", 12),
    ColumnDefinition("Status", 12),
    ColumnDefinition("Staleness", 10),
    ColumnDefinition("Action", 12),
    ColumnDefinition("PR", 6),
]


STATUS_EMOJI = {
    "merged": "✅",
    "unmerged": "🔀",
    "in-conflict": "⚠️",
    "protected": "🔒",
    "ignored": "⏭️",
}

ACTION_EMOJI = {
    "keep": "📌",
    "open-pr": "📝",
    "update-pr": "🔄",
    "auto-merge": "🚀",
    "delete": "🗑️",
    "review": "👀",
}


# Rich colors for console rows, keyed by proposed action
CLI_COLORS = {
    "keep": None,
    "review": "yellow",
    "delete": "red",
    "open-pr": "cyan",
    "update-pr": "cyan",
    "auto-merge": "green",
}
