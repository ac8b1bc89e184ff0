"""Pytest fixtures for branch-health tests"""
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from branch_health.models.branch import (
    BranchFacts,
    BranchInfo,
    MergeStatus,
    ProposedAction,
    StalenessLevel,
)

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def commit_file(repo, filename, content, message, days_ago=0):
    """Write a file and commit it with author/committer dates days_ago in the past."""
    path = Path(repo.working_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    when = datetime.now(timezone.utc) - timedelta(days=days_ago)
    stamp = f"{int(when.timestamp())} +0000"
    return repo.index.commit(message, author_date=stamp, commit_date=stamp)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def now():
    """A fixed 'current time' for classification tests."""
    return FIXED_NOW


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with a bare 'origin' remote.

    main holds one commit from 200 days ago and is pushed to origin.
    """
    origin_path = temp_dir / "origin.git"
    git.Repo.init(origin_path, bare=True)

    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit", days_ago=200)
    repo.git.branch("-M", "main")

    repo.create_remote("origin", str(origin_path))
    repo.git.push("origin", "main")

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def push_branch(git_repo):
    """Factory: create a branch off base, commit files to it and push it to origin.

    files maps filename to content; an empty dict pushes the branch without
    new commits.
    """
    def _push(name, files=None, days_ago=0, base="main"):
        git_repo.git.checkout(base)
        git_repo.git.checkout("-b", name)
        if files is None:
            files = {f"{name.replace('/', '_')}.txt": f"{name}\n"}
        for filename, content in files.items():
            commit_file(git_repo, filename, content, f"Work on {name}", days_ago=days_ago)
        git_repo.git.push("origin", name)
        git_repo.git.checkout("main")
        return git_repo.commit(name).hexsha

    return _push


@pytest.fixture
def commit_on_main(git_repo):
    """Factory: commit a file on main and push it to origin."""
    def _commit(filename, content, days_ago=0):
        git_repo.git.checkout("main")
        commit = commit_file(git_repo, filename, content, f"Update {filename}", days_ago=days_ago)
        git_repo.git.push("origin", "main")
        return commit.hexsha

    return _commit


@pytest.fixture
def make_facts(now):
    """Factory for BranchFacts with sensible defaults."""
    def _make(name="feature/test", days_ago=5, **overrides):
        values = dict(
            name=name,
            sha="a" * 40,
            last_commit_date=now - timedelta(days=days_ago),
            last_commit_author="Test User",
            last_commit_message="Work in progress",
            ahead_count=0,
            behind_count=0,
            has_conflicts=False,
            is_fully_merged=False,
        )
        values.update(overrides)
        return BranchFacts(**values)

    return _make


@pytest.fixture
def make_branch(now):
    """Factory for fully classified BranchInfo values."""
    def _make(name="feature/test", days=5, **overrides):
        values = dict(
            name=name,
            sha="b" * 40,
            last_commit_date=now - timedelta(days=days),
            last_commit_author="Test User",
            last_commit_message="Work in progress",
            ahead_count=0,
            behind_count=0,
            has_conflicts=False,
            is_fully_merged=False,
            is_protected=False,
            open_pr_number=None,
            changed_files=None,
            is_ignored=False,
            days_since_last_commit=days,
            staleness_level=StalenessLevel.ACTIVE,
            merge_status=MergeStatus.UNMERGED,
            proposed_action=ProposedAction.KEEP,
        )
        values.update(overrides)
        return BranchInfo(**values)

    return _make


@pytest.fixture
def mock_github():
    """Create a mock PyGithub client whose get_repo returns a mock repository."""
    github = Mock()

    repo = Mock()
    repo.full_name = "test/repo"
    repo.get_pulls = Mock(return_value=[])
    repo.get_branches = Mock(return_value=[])

    github.get_repo = Mock(return_value=repo)
    return github


@pytest.fixture
def github_context():
    from branch_health.services.github_service import GitHubContext

    return GitHubContext(owner="test", repo="repo", token="test_token_for_testing")


@pytest.fixture
def mock_github_service():
    """Create a mock GitHubService."""
    from branch_health.services.github_service import GitHubService

    service = Mock(spec=GitHubService)
    service.repository = "test/repo"
    service.get_open_prs = Mock(return_value={})
    service.get_protected_branches = Mock(return_value=set())
    service.create_pull_request = Mock(return_value=42)
    service.get_commit_status = Mock(return_value="success")
    return service
