"""Git queries that supply the facts for each remote branch"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

import git

from branch_health.constants import FALLBACK_DEFAULT_BRANCHES, REMOTE_NAME
from branch_health.exceptions import GitOperationError, RepositoryNotFoundError
from branch_health.logging_config import get_logger
from branch_health.models.branch import BranchFacts

logger = get_logger(__name__)

_COMMIT_FORMAT = "%H%n%aI%n%an%n%s"


@dataclass(frozen=True)
class CommitInfo:
    """Head commit metadata for a branch."""
    sha: str
    date: datetime
    author: str
    message: str


class GitService:
    """Service for querying remote branches with GitPython.

    Every per-branch query degrades to a safe default when git fails, so one
    broken ref never stops the run. Only listing branches is fatal.
    """

    def __init__(self, repo_path: str, remote_name: str = REMOTE_NAME):
        """Initialize the service.

        Args:
            repo_path: Path to the git repository
            remote_name: Remote whose branches are analyzed
        """
        self.repo_path = repo_path
        self.remote_name = remote_name
        try:
            self._get_repo()
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise RepositoryNotFoundError(repo_path) from e

    def _get_repo(self) -> git.Repo:
        """Open the repository. Worker threads each get their own Repo."""
        return git.Repo(self.repo_path)

    def _ref(self, branch_name: str) -> str:
        return f"{self.remote_name}/{branch_name}"

    def get_remote_url(self) -> Optional[str]:
        """URL of the analyzed remote, if configured."""
        try:
            return self._get_repo().remote(self.remote_name).url
        except (ValueError, AttributeError) as e:
            logger.debug(f"No {self.remote_name} remote: {e}")
            return None

    def fetch(self) -> bool:
        """Fetch all remotes and prune deleted refs."""
        try:
            self._get_repo().git.fetch("--all", "--prune")
            return True
        except git.exc.GitCommandError as e:
            logger.warning(f"Could not fetch remote branches: {e}")
            return False

    def get_default_branch(self, configured: Optional[str] = None) -> str:
        """Resolve the default branch name.

        The configured name wins; then the remote's HEAD; then the first of
        main/master that exists on the remote.
        """
        if configured:
            return configured

        repo = self._get_repo()
        try:
            remote_head = repo.git.rev_parse("--abbrev-ref", f"{self.remote_name}/HEAD").strip()
            prefix = f"{self.remote_name}/"
            if remote_head and remote_head.startswith(prefix) and remote_head != f"{prefix}HEAD":
                return remote_head[len(prefix):]
        except git.exc.GitCommandError as e:
            logger.debug(f"Remote HEAD not set: {e}")

        for candidate in FALLBACK_DEFAULT_BRANCHES:
            try:
                repo.git.rev_parse("--verify", "--quiet", self._ref(candidate))
                return candidate
            except git.exc.GitCommandError:
                continue

        return FALLBACK_DEFAULT_BRANCHES[0]

    def list_remote_branches(self) -> List[str]:
        """List branch names on the remote, without the remote prefix."""
        try:
            output = self._get_repo().git.branch("-r", "--format=%(refname:short)")
        except git.exc.GitCommandError as e:
            raise GitOperationError("list_remote_branches", message=str(e)) from e

        prefix = f"{self.remote_name}/"
        branches = []
        for line in output.splitlines():
            ref = line.strip().strip("'")
            if not ref.startswith(prefix) or "->" in ref:
                continue
            name = ref[len(prefix):]
            if name and name != "HEAD":
                branches.append(name)
        return branches

    def get_commit_info(self, branch_name: str) -> CommitInfo:
        """Get sha, author date, author and subject of the branch head."""
        try:
            output = self._get_repo().git.log("-1", f"--format={_COMMIT_FORMAT}", self._ref(branch_name))
            sha, date, author, message = (output.split("\n") + ["", "", "", ""])[:4]
            return CommitInfo(
                sha=sha,
                date=datetime.fromisoformat(date) if date else datetime.now(timezone.utc),
                author=author or "unknown",
                message=message,
            )
        except (git.exc.GitCommandError, ValueError) as e:
            logger.debug(f"Error getting commit info for {branch_name}: {e}")
            return CommitInfo(sha="", date=datetime.now(timezone.utc), author="unknown", message="")

    def get_ahead_behind(self, branch_name: str, default_branch: str) -> Tuple[int, int]:
        """Return (ahead, behind) commit counts relative to the default branch."""
        try:
            output = self._get_repo().git.rev_list(
                "--left-right", "--count", f"{self._ref(default_branch)}...{self._ref(branch_name)}"
            )
            behind, ahead = (int(part) for part in output.split())
            return ahead, behind
        except (git.exc.GitCommandError, ValueError) as e:
            logger.debug(f"Error counting commits for {branch_name}: {e}")
            return 0, 0

    def is_fully_merged(self, branch_name: str, default_branch: str) -> bool:
        """True when the branch head is reachable from the default branch."""
        try:
            repo = self._get_repo()
            merge_base = repo.git.merge_base(self._ref(default_branch), self._ref(branch_name)).strip()
            branch_sha = repo.git.rev_parse(self._ref(branch_name)).strip()
            return bool(merge_base) and merge_base == branch_sha
        except git.exc.GitCommandError as e:
            logger.debug(f"Error checking merge status for {branch_name}: {e}")
            return False

    def has_conflicts(self, branch_name: str, default_branch: str) -> bool:
        """Test-merge the branch into the default branch without touching the worktree.

        Any failure counts as a conflict, so the branch is never auto-merged blindly.
        """
        try:
            self._get_repo().git.merge_tree(
                "--write-tree", self._ref(default_branch), self._ref(branch_name)
            )
            return False
        except git.exc.GitCommandError as e:
            if e.status != 1:
                logger.debug(f"Conflict check failed for {branch_name}: {e}")
            return True

    def get_changed_files(self, branch_name: str, default_branch: str) -> List[str]:
        """Files changed on the branch since it forked from the default branch."""
        try:
            output = self._get_repo().git.diff(
                "--name-only", f"{self._ref(default_branch)}...{self._ref(branch_name)}"
            )
            return [line for line in output.splitlines() if line]
        except git.exc.GitCommandError as e:
            logger.debug(f"Error listing changed files for {branch_name}: {e}")
            return []

    def collect_facts(
        self,
        branch_name: str,
        default_branch: str,
        protected_branches: Set[str],
        open_prs: Dict[str, int],
    ) -> BranchFacts:
        """Gather every fact the classifier needs for one branch."""
        commit = self.get_commit_info(branch_name)
        ahead, behind = self.get_ahead_behind(branch_name, default_branch)
        is_merged = self.is_fully_merged(branch_name, default_branch)
        # A conflict probe only matters when there is work to merge
        conflicts = ahead > 0 and self.has_conflicts(branch_name, default_branch)

        return BranchFacts(
            name=branch_name,
            sha=commit.sha,
            last_commit_date=commit.date,
            last_commit_author=commit.author,
            last_commit_message=commit.message,
            ahead_count=ahead,
            behind_count=behind,
            has_conflicts=conflicts,
            is_fully_merged=is_merged,
            is_protected=branch_name in protected_branches,
            open_pr_number=open_prs.get(branch_name),
            changed_files=self.get_changed_files(branch_name, default_branch) if ahead > 0 else None,
        )
