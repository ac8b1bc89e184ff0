"""Report assembly for branch-health"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from branch_health.config import StalenessThresholds
from branch_health.models.branch import ActionResult, BranchInfo, MergeStatus, StalenessLevel
from branch_health.models.report import Report, Summary


def sort_branches(branches: Sequence[BranchInfo]) -> List[BranchInfo]:
    """Most stale first; branches of equal age keep their input order."""
    return sorted(branches, key=lambda b: b.days_since_last_commit, reverse=True)


def summarize(branches: Sequence[BranchInfo]) -> Summary:
    """Count branches by status, staleness and position relative to default."""
    return Summary(
        total_branches=len(branches),
        active_branches=sum(1 for b in branches if b.staleness_level == StalenessLevel.ACTIVE),
        stale_branches=sum(
            1
            for b in branches
            if b.staleness_level in (StalenessLevel.STALE, StalenessLevel.CRITICAL)
        ),
        merged_branches=sum(1 for b in branches if b.merge_status == MergeStatus.MERGED),
        ahead_branches=sum(1 for b in branches if b.ahead_count > 0),
        behind_branches=sum(1 for b in branches if b.behind_count > 0 and b.ahead_count == 0),
        conflicting_branches=sum(1 for b in branches if b.merge_status == MergeStatus.IN_CONFLICT),
        protected_branches=sum(1 for b in branches if b.is_protected),
        ignored_branches=sum(1 for b in branches if b.is_ignored),
    )


def assemble_report(
    branches: Sequence[BranchInfo],
    actions: Sequence[ActionResult],
    thresholds: StalenessThresholds,
    default_branch: str,
    dry_run: bool,
    repository: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Report:
    """Package classified branches and action results into a Report."""
    ordered = sort_branches(branches)
    return Report(
        generated_at=generated_at or datetime.now(timezone.utc),
        repository=repository or "unknown",
        default_branch=default_branch,
        mode="dry-run" if dry_run else "apply",
        warning_days=thresholds.warning_days,
        stale_days=thresholds.stale_days,
        critical_days=thresholds.critical_days,
        summary=summarize(ordered),
        branches=ordered,
        actions=list(actions),
    )
