"""Formatting utilities for branch-health.

This package renders reports and report fragments, organized into modules:
- date: Date and time formatting
- status: Status, action and result formatting
- markdown: Markdown report rendering
- serialization: JSON report rendering
"""

# Date formatters
from .date import format_date, format_timestamp, format_age

# Status formatters
from .status import format_status, format_action, format_ahead_behind, format_result

# Report renderers
from .markdown import render_markdown
from .serialization import render_json

__all__ = [
    # Date
    "format_date",
    "format_timestamp",
    "format_age",
    # Status
    "format_status",
    "format_action",
    "format_ahead_behind",
    "format_result",
    # Reports
    "render_markdown",
    "render_json",
]
