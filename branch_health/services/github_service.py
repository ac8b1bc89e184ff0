"""GitHub API integration service"""
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Set, TYPE_CHECKING
from urllib.parse import urlparse

from github import Auth, Github, GithubException

from branch_health.exceptions import GitHubAPIError
from branch_health.logging_config import get_logger

if TYPE_CHECKING:
    from github.Repository import Repository

logger = get_logger(__name__)


def parse_repository_from_url(remote_url: str) -> Optional[str]:
    """Extract ``owner/repo`` from a github.com remote URL."""
    if not remote_url or "github.com" not in remote_url:
        return None

    if remote_url.startswith("git@"):
        # Handle SSH URL format (git@github.com:org/repo.git)
        path = remote_url.split("github.com:", 1)[-1]
    else:
        # Handle HTTPS URL format (https://github.com/org/repo.git)
        path = urlparse(remote_url).path

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]

    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return path


@dataclass(frozen=True)
class GitHubContext:
    """Credentials and repository identifier for the GitHub API."""
    owner: str
    repo: str
    token: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_environment(
        cls, remote_url: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
    ) -> Optional["GitHubContext"]:
        """Build a context from GITHUB_TOKEN and GITHUB_REPOSITORY.

        When GITHUB_REPOSITORY is unset the repository is taken from a
        github.com remote URL. Returns None when either piece is missing.
        """
        env = os.environ if environ is None else environ
        token = env.get("GITHUB_TOKEN")
        if not token:
            logger.debug("[GitHub] No GITHUB_TOKEN found")
            return None

        repository = env.get("GITHUB_REPOSITORY") or (
            parse_repository_from_url(remote_url) if remote_url else None
        )
        if not repository:
            logger.debug("[GitHub] Could not determine the repository")
            return None

        parts = repository.split("/")
        if len(parts) != 2 or not all(parts):
            logger.debug(f"[GitHub] Invalid repository identifier: {repository}")
            return None

        return cls(owner=parts[0], repo=parts[1], token=token)


class GitHubService:
    """Thin wrapper around PyGithub for the data and actions branch-health needs.

    Lookups return None when GitHub cannot answer; mutations raise GitHubAPIError.
    """

    def __init__(self, context: GitHubContext, github: Optional[Github] = None):
        """Initialize the service.

        Args:
            context: Repository and token to use
            github: Pre-built client (tests); created from the token otherwise
        """
        self.context = context
        self.github = github or Github(auth=Auth.Token(context.token))
        self._gh_repo: Optional["Repository"] = None

    @property
    def repository(self) -> str:
        return self.context.full_name

    @property
    def gh_repo(self) -> "Repository":
        if self._gh_repo is None:
            self._gh_repo = self.github.get_repo(self.context.full_name)
            logger.debug(f"[GitHub] GitHub integration enabled for: {self.context.full_name}")
        return self._gh_repo

    def get_open_prs(self) -> Optional[Dict[str, int]]:
        """Map head branch name to open PR number, or None if unavailable."""
        try:
            prs = {pr.head.ref: pr.number for pr in self.gh_repo.get_pulls(state="open")}
            logger.debug(f"[GitHub] Found {len(prs)} open PRs")
            return prs
        except Exception as e:
            logger.debug(f"[GitHub] Error listing open PRs: {e}")
            return None

    def get_protected_branches(self) -> Optional[Set[str]]:
        """Names of protected branches, or None if unavailable."""
        try:
            protected = {branch.name for branch in self.gh_repo.get_branches() if branch.protected}
            logger.debug(f"[GitHub] Found {len(protected)} protected branches")
            return protected
        except Exception as e:
            logger.debug(f"[GitHub] Error listing branches: {e}")
            return None

    def delete_branch(self, branch_name: str) -> None:
        """Delete the branch ref on GitHub."""
        try:
            self.gh_repo.get_git_ref(f"heads/{branch_name}").delete()
            logger.debug(f"[GitHub] Deleted branch {branch_name}")
        except GithubException as e:
            raise GitHubAPIError("delete_branch", _describe(e)) from e

    def create_pull_request(self, head: str, base: str, title: str, body: str) -> int:
        """Open a pull request and return its number."""
        try:
            pr = self.gh_repo.create_pull(title=title, body=body, head=head, base=base)
            logger.debug(f"[GitHub] Opened PR #{pr.number} for {head}")
            return pr.number
        except GithubException as e:
            raise GitHubAPIError("create_pull_request", _describe(e)) from e

    def post_issue_comment(self, issue_number: int, body: str) -> None:
        """Post a comment on an issue (or pull request)."""
        try:
            self.gh_repo.get_issue(issue_number).create_comment(body)
            logger.debug(f"[GitHub] Commented on #{issue_number}")
        except GithubException as e:
            raise GitHubAPIError("post_issue_comment", _describe(e)) from e

    def get_commit_status(self, sha: str) -> str:
        """Combined status-check state of a commit (success, pending, failure...)."""
        try:
            return self.gh_repo.get_commit(sha).get_combined_status().state
        except GithubException as e:
            raise GitHubAPIError("get_commit_status", _describe(e)) from e

    def fast_forward(self, base: str, sha: str) -> None:
        """Move base to sha. GitHub rejects the update unless it is a fast-forward."""
        try:
            self.gh_repo.get_git_ref(f"heads/{base}").edit(sha=sha, force=False)
            logger.debug(f"[GitHub] Fast-forwarded {base} to {sha[:7]}")
        except GithubException as e:
            raise GitHubAPIError("fast_forward", _describe(e)) from e

    def close(self) -> None:
        """Close the GitHub API connection to clean up resources."""
        try:
            self.github.close()
            logger.debug("[GitHub] Closed GitHub API connection")
        except Exception as e:
            logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")


def _describe(error: GithubException) -> str:
    data = error.data if isinstance(error.data, dict) else {}
    message = data.get("message") or str(error)
    return f"{error.status} {message}"
