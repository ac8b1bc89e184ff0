"""Status and action formatting utilities."""

from branch_health.constants import ACTION_EMOJI, STATUS_EMOJI
from branch_health.models.branch import BranchInfo, MergeStatus, ProposedAction


def format_status(status: MergeStatus) -> str:
    """Merge status with its emoji, e.g. '✅ merged'."""
    return f"{STATUS_EMOJI[status.value]} {status.value}"


def format_action(action: ProposedAction) -> str:
    """Proposed action with its emoji, e.g. '🗑️ delete'."""
    return f"{ACTION_EMOJI[action.value]} {action.value}"


def format_ahead_behind(branch: BranchInfo) -> str:
    return f"+{branch.ahead_count}/-{branch.behind_count}"


def format_result(success: bool) -> str:
    return "✅" if success else "❌"
