"""Carries out (or simulates) the proposed branch actions"""

from typing import Callable, Dict, Iterable, List, Optional

from rich.console import Console

from branch_health.config import Config
from branch_health.logging_config import get_logger
from branch_health.models.branch import ActionResult, BranchInfo, ProposedAction
from branch_health.services.github_service import GitHubService

console = Console()
logger = get_logger(__name__)

_PASSIVE_ACTIONS = (ProposedAction.KEEP, ProposedAction.REVIEW)

_DRY_RUN_MESSAGES = {
    ProposedAction.DELETE: "[DRY-RUN] Would delete branch",
    ProposedAction.OPEN_PR: "[DRY-RUN] Would open PR",
    ProposedAction.AUTO_MERGE: "[DRY-RUN] Would attempt auto-merge",
    ProposedAction.UPDATE_PR: "[DRY-RUN] Would update PR",
}


def pull_request_title(branch: BranchInfo, default_branch: str) -> str:
    return f"Merge {branch.name} into {default_branch}"


def pull_request_body(branch: BranchInfo, default_branch: str) -> str:
    return (
        "Automated PR created by branch-health workflow.\n\n"
        f"**Branch:** {branch.name}\n"
        f"**Ahead of {default_branch}:** {branch.ahead_count} commits\n"
        f"**Behind {default_branch}:** {branch.behind_count} commits"
    )


class ActionExecutor:
    """Interprets proposed actions against the GitHub API.

    In dry-run mode nothing is called and every action is reported as it would
    be taken. In apply mode each failure is recorded on its ActionResult and the
    remaining branches are still processed.
    """

    def __init__(
        self,
        github_service: Optional[GitHubService],
        default_branch: str,
        config: Config,
        dry_run: bool = True,
        verbose: bool = False,
    ):
        self.github_service = github_service
        self.default_branch = default_branch
        self.config = config
        self.dry_run = dry_run
        self.verbose = verbose
        self._handlers: Dict[ProposedAction, Callable[[BranchInfo], str]] = {
            ProposedAction.DELETE: self._delete,
            ProposedAction.OPEN_PR: self._open_pr,
            ProposedAction.AUTO_MERGE: self._auto_merge,
            ProposedAction.UPDATE_PR: self._update_pr,
        }

    def execute(self, branches: Iterable[BranchInfo]) -> List[ActionResult]:
        """Process every branch whose proposed action is not keep/review."""
        results = []
        for branch in branches:
            if branch.proposed_action in _PASSIVE_ACTIONS:
                continue
            result = self.execute_one(branch)
            if result is not None:
                results.append(result)
        return results

    def execute_one(self, branch: BranchInfo) -> Optional[ActionResult]:
        """Carry out a single branch's proposed action."""
        action = branch.proposed_action

        # A PR already exists, nothing to open
        if action == ProposedAction.OPEN_PR and branch.has_open_pr:
            logger.debug(f"Skipping open-pr for {branch.name}: PR #{branch.open_pr_number} is open")
            return None

        if self.dry_run:
            message = _DRY_RUN_MESSAGES[action]
            if self.verbose:
                console.print(f"[dim]{message}: {branch.name}[/dim]")
            return ActionResult(branch=branch.name, action=action, success=True, message=message)

        if self.github_service is None:
            return ActionResult(
                branch=branch.name,
                action=action,
                success=False,
                message="GitHub API unavailable (set GITHUB_TOKEN and GITHUB_REPOSITORY)",
            )

        try:
            message = self._handlers[action](branch)
            success = True
        except _ActionRefused as e:
            message = str(e)
            success = False
        except Exception as e:
            logger.error(f"Action {action.value} failed for {branch.name}: {e}")
            message = str(e)
            success = False

        if self.verbose:
            color = "green" if success else "red"
            console.print(f"[{color}]{action.value}[/{color}] {branch.name}: {message}")
        return ActionResult(branch=branch.name, action=action, success=success, message=message)

    def _delete(self, branch: BranchInfo) -> str:
        assert self.github_service is not None
        self.github_service.delete_branch(branch.name)
        return "Branch deleted"

    def _open_pr(self, branch: BranchInfo) -> str:
        assert self.github_service is not None
        number = self.github_service.create_pull_request(
            head=branch.name,
            base=self.default_branch,
            title=pull_request_title(branch, self.default_branch),
            body=pull_request_body(branch, self.default_branch),
        )
        return f"Opened PR #{number}"

    def _auto_merge(self, branch: BranchInfo) -> str:
        assert self.github_service is not None
        policy = self.config.auto_merge
        if policy.require_no_conflicts and branch.has_conflicts:
            raise _ActionRefused("Branch has conflicts with the default branch")
        if policy.require_status_checks:
            state = self.github_service.get_commit_status(branch.sha)
            if state != "success":
                raise _ActionRefused(f"Status checks not passing ({state})")
        self.github_service.fast_forward(self.default_branch, branch.sha)
        return f"Fast-forwarded {self.default_branch} to {branch.sha[:7]}"

    def _update_pr(self, branch: BranchInfo) -> str:
        raise _ActionRefused("Updating pull requests is not automated")


class _ActionRefused(Exception):
    """A policy check stopped an action before any mutating call."""
