"""Report models"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from branch_health.models.branch import ActionResult, BranchInfo


@dataclass(frozen=True)
class Summary:
    """Aggregate branch counts for a report."""
    total_branches: int = 0
    active_branches: int = 0
    stale_branches: int = 0  # stale + critical
    merged_branches: int = 0
    ahead_branches: int = 0
    behind_branches: int = 0  # behind and not ahead
    conflicting_branches: int = 0
    protected_branches: int = 0
    ignored_branches: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalBranches": self.total_branches,
            "activeBranches": self.active_branches,
            "staleBranches": self.stale_branches,
            "mergedBranches": self.merged_branches,
            "aheadBranches": self.ahead_branches,
            "behindBranches": self.behind_branches,
            "conflictingBranches": self.conflicting_branches,
            "protectedBranches": self.protected_branches,
            "ignoredBranches": self.ignored_branches,
        }


@dataclass(frozen=True)
class Report:
    """Write-once result of a branch health run."""
    generated_at: datetime
    repository: str
    default_branch: str
    mode: str  # "dry-run" or "apply"
    warning_days: int
    stale_days: int
    critical_days: int
    summary: Summary
    branches: List[BranchInfo] = field(default_factory=list)
    actions: List[ActionResult] = field(default_factory=list)

    @property
    def is_dry_run(self) -> bool:
        return self.mode == "dry-run"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to the JSON document shape."""
        return {
            "generatedAt": self.generated_at.isoformat(),
            "repository": self.repository,
            "defaultBranch": self.default_branch,
            "mode": self.mode,
            "stalenessThresholds": {
                "warning": self.warning_days,
                "stale": self.stale_days,
                "critical": self.critical_days,
            },
            "summary": self.summary.to_dict(),
            "branches": [branch.to_dict() for branch in self.branches],
            "actions": [action.to_dict() for action in self.actions],
        }
