"""Custom exceptions for branch-health"""

from typing import Optional


class BranchHealthError(Exception):
    """Base exception for all branch-health errors."""


class GitOperationError(BranchHealthError):
    """A git command the run cannot do without has failed."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message
        target = f" on '{branch}'" if branch else ""
        detail = f": {message}" if message else ""
        super().__init__(f"git {operation}{target} failed{detail}")


class GitHubAPIError(BranchHealthError):
    """A mutating GitHub API call was rejected or could not be made."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"GitHub {operation} failed{detail}")


class RepositoryNotFoundError(GitOperationError):
    """The path given with --repo is not a git repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("open_repository", message=f"Not a git repository: {path}")
