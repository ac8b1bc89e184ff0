"""Date and time formatting utilities."""

from datetime import datetime


def format_date(moment: datetime) -> str:
    """Calendar date of a commit, e.g. 2024-05-01."""
    return moment.strftime("%Y-%m-%d")


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp for report headers, e.g. 2024-05-01 09:30 UTC."""
    return moment.strftime("%Y-%m-%d %H:%M %Z").strip()


def format_age(age_days: int) -> str:
    return f"{age_days}d"
