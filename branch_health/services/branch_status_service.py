"""Service for classifying branches"""

import re
from dataclasses import replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, Optional, Pattern

from branch_health.config import Config, StalenessThresholds
from branch_health.logging_config import get_logger
from branch_health.models.branch import BranchFacts, BranchInfo, MergeStatus, StalenessLevel
from branch_health.services.action_planner import plan_action

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> Pattern[str]:
    # Only '*' is special; everything else matches literally
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


def matches_pattern(branch_name: str, patterns: Iterable[str]) -> bool:
    """Check whether the branch name matches any glob (whole-string match)."""
    return any(_compile_pattern(pattern).fullmatch(branch_name) for pattern in patterns)


def days_since(commit_date: datetime, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since commit_date, never negative."""
    if now is None:
        now = datetime.now(timezone.utc)
    if commit_date.tzinfo is None:
        commit_date = commit_date.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed = (now - commit_date).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))


def classify_staleness(days_since_last_commit: int, thresholds: StalenessThresholds) -> StalenessLevel:
    """Bucket a commit age; checked from the highest threshold down."""
    if days_since_last_commit >= thresholds.critical_days:
        return StalenessLevel.CRITICAL
    if days_since_last_commit >= thresholds.stale_days:
        return StalenessLevel.STALE
    if days_since_last_commit >= thresholds.warning_days:
        return StalenessLevel.WARNING
    return StalenessLevel.ACTIVE


def classify_status(facts: BranchFacts, config: Config) -> MergeStatus:
    """Get the merge status of a branch.

    The order of checks is significant: protection and ignore rules override
    every other signal, and a merged branch is never reported as conflicting.
    Conflicts only count when the branch has work of its own to merge.
    """
    if facts.is_protected:
        return MergeStatus.PROTECTED
    if matches_pattern(facts.name, config.ignore_patterns):
        return MergeStatus.IGNORED
    if facts.is_fully_merged:
        return MergeStatus.MERGED
    if facts.ahead_count > 0 and facts.has_conflicts:
        return MergeStatus.IN_CONFLICT
    return MergeStatus.UNMERGED


class BranchStatusService:
    """Service for turning branch facts into classified branches."""

    def __init__(self, config: Config):
        """Initialize the service."""
        self.config = config

    def should_ignore_branch(self, branch_name: str) -> bool:
        """Check if a branch should be ignored based on ignore patterns."""
        return matches_pattern(branch_name, self.config.ignore_patterns)

    def classify_one(self, facts: BranchFacts, now: Optional[datetime] = None) -> BranchInfo:
        """Run the full classification pipeline for one branch."""
        age_days = days_since(facts.last_commit_date, now)
        info = BranchInfo.from_facts(
            facts,
            is_ignored=self.should_ignore_branch(facts.name),
            days_since_last_commit=age_days,
            staleness_level=classify_staleness(age_days, self.config.staleness),
            merge_status=classify_status(facts, self.config),
        )
        info = replace(info, proposed_action=plan_action(info, self.config))

        logger.debug(
            f"Branch {info.name}: +{info.ahead_count}/-{info.behind_count}, "
            f"{age_days}d ({info.staleness_level.value}), "
            f"status={info.merge_status.value}, action={info.proposed_action.value}"
        )
        return info
