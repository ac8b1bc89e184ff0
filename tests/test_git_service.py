"""Tests for GitService"""
from unittest.mock import Mock, patch

import git
import pytest

from branch_health.exceptions import GitOperationError, RepositoryNotFoundError
from branch_health.services.git_service import GitService


class TestGitServiceInit:
    """Test GitService initialization."""

    def test_init_with_repo_path(self, git_repo):
        service = GitService(git_repo.working_dir)
        assert service.repo_path == git_repo.working_dir
        assert service.remote_name == "origin"

    def test_init_with_missing_path(self, temp_dir):
        with pytest.raises(RepositoryNotFoundError):
            GitService(str(temp_dir / "nonexistent"))

    def test_init_with_plain_directory(self, temp_dir):
        plain = temp_dir / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryNotFoundError):
            GitService(str(plain))

    def test_get_remote_url(self, git_repo, temp_dir):
        service = GitService(git_repo.working_dir)
        assert service.get_remote_url() == str(temp_dir / "origin.git")

    def test_get_remote_url_without_remote(self, git_repo):
        git_repo.delete_remote(git_repo.remote("origin"))
        assert GitService(git_repo.working_dir).get_remote_url() is None


class TestRemoteBranches:
    """Test fetching and listing remote branches."""

    def test_list_remote_branches(self, git_repo, push_branch):
        push_branch("feature/a")
        push_branch("bugfix/b")
        service = GitService(git_repo.working_dir)
        assert service.fetch() is True
        assert sorted(service.list_remote_branches()) == ["bugfix/b", "feature/a", "main"]

    def test_remote_head_is_not_listed(self, git_repo, push_branch):
        push_branch("develop", files={})
        git_repo.git.remote("set-head", "origin", "develop")
        service = GitService(git_repo.working_dir)
        assert sorted(service.list_remote_branches()) == ["develop", "main"]

    def test_fetch_failure_returns_false(self, git_repo, temp_dir):
        git_repo.git.remote("set-url", "origin", str(temp_dir / "missing.git"))
        assert GitService(git_repo.working_dir).fetch() is False

    def test_list_failure_raises(self, git_repo):
        service = GitService(git_repo.working_dir)
        broken = Mock()
        broken.git.branch.side_effect = git.exc.GitCommandError("branch", 128)
        with patch.object(service, "_get_repo", return_value=broken):
            with pytest.raises(GitOperationError):
                service.list_remote_branches()


class TestDefaultBranch:
    """Test default branch resolution."""

    def test_configured_name_wins(self, git_repo):
        assert GitService(git_repo.working_dir).get_default_branch("trunk") == "trunk"

    def test_remote_head(self, git_repo, push_branch):
        push_branch("develop", files={})
        git_repo.git.remote("set-head", "origin", "develop")
        assert GitService(git_repo.working_dir).get_default_branch() == "develop"

    def test_falls_back_to_main(self, git_repo):
        assert GitService(git_repo.working_dir).get_default_branch() == "main"


class TestBranchFacts:
    """Test the per-branch git queries."""

    def test_get_commit_info(self, git_repo, push_branch):
        sha = push_branch("feature/a", days_ago=40)
        info = GitService(git_repo.working_dir).get_commit_info("feature/a")
        assert info.sha == sha
        assert info.author == "Test User"
        assert info.message == "Work on feature/a"
        assert info.date.tzinfo is not None

    def test_get_commit_info_missing_branch(self, git_repo):
        info = GitService(git_repo.working_dir).get_commit_info("nope")
        assert info.sha == ""
        assert info.author == "unknown"

    def test_ahead_behind(self, git_repo, push_branch, commit_on_main):
        push_branch("feature/a", files={"a.txt": "a\n", "b.txt": "b\n"})
        commit_on_main("main.txt", "main\n")
        service = GitService(git_repo.working_dir)
        assert service.get_ahead_behind("feature/a", "main") == (2, 1)

    def test_ahead_behind_missing_branch(self, git_repo):
        assert GitService(git_repo.working_dir).get_ahead_behind("nope", "main") == (0, 0)

    def test_is_fully_merged(self, git_repo, push_branch, commit_on_main):
        push_branch("merged", files={})
        push_branch("feature/a")
        commit_on_main("main.txt", "main\n")
        service = GitService(git_repo.working_dir)
        # A branch whose head is an ancestor of main counts as merged
        assert service.is_fully_merged("merged", "main") is True
        assert service.is_fully_merged("feature/a", "main") is False

    def test_has_conflicts(self, git_repo, push_branch, commit_on_main):
        push_branch("feature/conflict", files={"README.md": "branch version\n"})
        commit_on_main("README.md", "main version\n")
        assert GitService(git_repo.working_dir).has_conflicts("feature/conflict", "main") is True

    def test_no_conflicts(self, git_repo, push_branch, commit_on_main):
        if git_repo.git.version_info < (2, 38):
            pytest.skip("git merge-tree --write-tree needs git 2.38+")
        push_branch("feature/clean", files={"clean.txt": "clean\n"})
        commit_on_main("main.txt", "main\n")
        assert GitService(git_repo.working_dir).has_conflicts("feature/clean", "main") is False

    def test_get_changed_files(self, git_repo, push_branch, commit_on_main):
        push_branch("feature/a", files={"src/a.py": "a\n", "b.txt": "b\n"})
        commit_on_main("main.txt", "main\n")
        files = GitService(git_repo.working_dir).get_changed_files("feature/a", "main")
        assert sorted(files) == ["b.txt", "src/a.py"]

    def test_collect_facts(self, git_repo, push_branch):
        push_branch("feature/a", files={"a.txt": "a\n"}, days_ago=10)
        service = GitService(git_repo.working_dir)
        facts = service.collect_facts("feature/a", "main", {"feature/a"}, {"feature/a": 9})

        assert facts.name == "feature/a"
        assert facts.ahead_count == 1
        assert facts.behind_count == 0
        assert facts.is_fully_merged is False
        assert facts.is_protected is True
        assert facts.open_pr_number == 9
        assert facts.changed_files == ["a.txt"]

    def test_collect_facts_skips_probes_when_not_ahead(self, git_repo, push_branch):
        push_branch("merged", files={})
        service = GitService(git_repo.working_dir)
        with patch.object(service, "has_conflicts") as mock_conflicts:
            facts = service.collect_facts("merged", "main", set(), {})

        mock_conflicts.assert_not_called()
        assert facts.has_conflicts is False
        assert facts.changed_files is None
        assert facts.is_fully_merged is True
