"""Branch models and related enums"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class MergeStatus(Enum):
    """Relationship of a branch to the default branch."""
    MERGED = "merged"
    UNMERGED = "unmerged"
    IN_CONFLICT = "in-conflict"
    PROTECTED = "protected"
    IGNORED = "ignored"


class StalenessLevel(Enum):
    """Age bucket of the last commit on a branch."""
    ACTIVE = "active"
    WARNING = "warning"
    STALE = "stale"
    CRITICAL = "critical"


class ProposedAction(Enum):
    """The single recommended next step for a branch."""
    KEEP = "keep"
    OPEN_PR = "open-pr"
    UPDATE_PR = "update-pr"
    AUTO_MERGE = "auto-merge"
    DELETE = "delete"
    REVIEW = "review"


@dataclass(frozen=True)
class BranchFacts:
    """Raw facts about one remote branch, as gathered from git and GitHub."""
    name: str
    sha: str
    last_commit_date: datetime
    last_commit_author: str
    last_commit_message: str
    ahead_count: int
    behind_count: int
    has_conflicts: bool
    is_fully_merged: bool
    is_protected: bool = False
    open_pr_number: Optional[int] = None
    changed_files: Optional[List[str]] = None  # Only collected when ahead_count > 0

    @property
    def has_open_pr(self) -> bool:
        return self.open_pr_number is not None


@dataclass(frozen=True)
class BranchInfo:
    """A fully classified branch."""
    name: str
    sha: str
    last_commit_date: datetime
    last_commit_author: str
    last_commit_message: str
    ahead_count: int
    behind_count: int
    has_conflicts: bool
    is_fully_merged: bool
    is_protected: bool
    open_pr_number: Optional[int]
    changed_files: Optional[List[str]]
    is_ignored: bool
    days_since_last_commit: int
    staleness_level: StalenessLevel
    merge_status: MergeStatus
    proposed_action: ProposedAction = ProposedAction.KEEP

    @property
    def has_open_pr(self) -> bool:
        return self.open_pr_number is not None

    @classmethod
    def from_facts(
        cls,
        facts: BranchFacts,
        is_ignored: bool,
        days_since_last_commit: int,
        staleness_level: StalenessLevel,
        merge_status: MergeStatus,
    ) -> "BranchInfo":
        """Combine raw facts with their derived classification."""
        return cls(
            name=facts.name,
            sha=facts.sha,
            last_commit_date=facts.last_commit_date,
            last_commit_author=facts.last_commit_author,
            last_commit_message=facts.last_commit_message,
            ahead_count=facts.ahead_count,
            behind_count=facts.behind_count,
            has_conflicts=facts.has_conflicts,
            is_fully_merged=facts.is_fully_merged,
            is_protected=facts.is_protected,
            open_pr_number=facts.open_pr_number,
            changed_files=list(facts.changed_files) if facts.changed_files is not None else None,
            is_ignored=is_ignored,
            days_since_last_commit=days_since_last_commit,
            staleness_level=staleness_level,
            merge_status=merge_status,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the report's camelCase keys."""
        data: Dict[str, Any] = {
            "name": self.name,
            "sha": self.sha,
            "lastCommitDate": self.last_commit_date.isoformat(),
            "lastCommitAuthor": self.last_commit_author,
            "lastCommitMessage": self.last_commit_message,
            "aheadCount": self.ahead_count,
            "behindCount": self.behind_count,
            "mergeStatus": self.merge_status.value,
            "proposedAction": self.proposed_action.value,
            "stalenessLevel": self.staleness_level.value,
            "daysSinceLastCommit": self.days_since_last_commit,
            "isProtected": self.is_protected,
            "isIgnored": self.is_ignored,
            "hasOpenPR": self.has_open_pr,
        }
        if self.open_pr_number is not None:
            data["prNumber"] = self.open_pr_number
        if self.changed_files is not None:
            data["changedFiles"] = list(self.changed_files)
        return data


@dataclass(frozen=True)
class ActionResult:
    """Outcome of executing (or simulating) one proposed action."""
    branch: str
    action: ProposedAction
    success: bool
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "branch": self.branch,
            "action": self.action.value,
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
