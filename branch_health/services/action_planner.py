"""Decides the single next action for a classified branch"""

from branch_health.config import Config
from branch_health.models.branch import BranchInfo, MergeStatus, ProposedAction, StalenessLevel


def plan_action(info: BranchInfo, config: Config) -> ProposedAction:
    """
    Pick the proposed action for a branch whose status and staleness are set.

    Rules are evaluated top to bottom and the first match wins:

    1. Protected or ignored branches are kept.
    2. Branches with an open pull request are kept; the PR is where work continues.
    3. Merged branches are deleted when auto-delete is on and the last commit is
       at least ``min_age_days`` old, otherwise flagged for review.
    4. Conflicting branches need review.
    5. Branches ahead of the default branch: diverged ones (also behind) get a
       PR; clean fast-forward candidates are auto-merged when the policy allows,
       otherwise they get a PR as well.
    6. Branches only behind the default branch are deleted once stale or
       critical, otherwise flagged for review.
    7. Anything else matches the default branch and is kept.

    Args:
        info: Classified branch
        config: Effective policy

    Returns:
        The proposed action
    """
    if info.is_protected or info.is_ignored:
        return ProposedAction.KEEP

    if info.has_open_pr:
        return ProposedAction.KEEP

    if info.merge_status == MergeStatus.MERGED:
        if (
            config.auto_delete.enabled
            and info.days_since_last_commit >= config.auto_delete.min_age_days
        ):
            return ProposedAction.DELETE
        return ProposedAction.REVIEW

    if info.merge_status == MergeStatus.IN_CONFLICT:
        return ProposedAction.REVIEW

    if info.ahead_count > 0:
        if info.behind_count > 0:
            return ProposedAction.OPEN_PR
        if config.auto_merge.enabled and config.auto_merge.fast_forward_only:
            return ProposedAction.AUTO_MERGE
        return ProposedAction.OPEN_PR

    if info.behind_count > 0:
        if info.staleness_level in (StalenessLevel.STALE, StalenessLevel.CRITICAL):
            return ProposedAction.DELETE
        return ProposedAction.REVIEW

    return ProposedAction.KEEP
